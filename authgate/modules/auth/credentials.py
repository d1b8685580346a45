"""Credential validation on top of the user directory."""

import logging

from .errors import InvalidCredentials
from .identity import Identity
from .interfaces import UserDirectory

logger = logging.getLogger(__name__)


class CredentialValidator:
    """
    Validates a primary credential and snapshots the identity.

    All rejections raise the same InvalidCredentials so callers cannot tell
    an unknown identifier from a wrong password or an inactive account.
    """

    def __init__(self, directory: UserDirectory):
        self.directory = directory

    async def validate(self, identifier: str, secret: str) -> Identity:
        """
        Args:
            identifier: Username or mobile number
            secret: Password

        Returns:
            Active identity snapshot

        Raises:
            InvalidCredentials: Rejected, malformed or inactive
            DirectoryUnavailable: Directory timed out (propagated, retryable)
        """
        if not identifier or not secret:
            raise InvalidCredentials("empty identifier or secret")

        payload = await self.directory.verify_password(identifier, secret)
        if payload is None:
            logger.info("Primary credential rejected by directory")
            raise InvalidCredentials("rejected by directory")

        try:
            identity = Identity.from_directory_payload(payload)
        except ValueError as e:
            logger.warning(f"Malformed directory payload: {e}")
            raise InvalidCredentials("malformed directory payload") from e

        if not identity.is_active:
            logger.info(f"Login refused for subject {identity.subject_id} with status {identity.status}")
            raise InvalidCredentials(f"status {identity.status}")

        return identity
