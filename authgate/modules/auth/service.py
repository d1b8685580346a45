"""
Authentication Service Facade following Black Box Design principles.

This module provides:
- The two-step flow (authenticate, verify_code) as one stable interface
- The dispatch failure policy
- Protocol definitions for swappable implementations
"""

import logging
from typing import Protocol

from ...config.provider import DispatchFailurePolicy
from .credentials import CredentialValidator
from .errors import DeliveryFailure
from .interfaces import NonceStore
from .notification import VerificationCodeGenerator
from .tokens import TokenIssuer
from .verifier import Verifier

logger = logging.getLogger(__name__)


class AuthenticationService(Protocol):
    """Protocol for authentication services."""

    async def authenticate(self, identifier: str, password: str) -> str:
        """
        Validate a primary credential and issue a challenge.

        Returns:
            Nonce identifying the pending verification
        """
        ...

    async def verify_code(self, nonce: str, code: str) -> str:
        """
        Exchange a nonce and verification code for an access token.

        Returns:
            Signed access token
        """
        ...

    def refresh_token(self, token: str) -> str:
        ...

    def public_key(self) -> str:
        ...


class ChallengeAuthService:
    """
    Default implementation of AuthenticationService.

    This facade hides the collaborators behind the two calls the API layer
    needs. It holds no state of its own; the nonce store is the only shared
    mutable state.
    """

    def __init__(
        self,
        validator: CredentialValidator,
        store: NonceStore,
        codes: VerificationCodeGenerator,
        verifier: Verifier,
        issuer: TokenIssuer,
        failure_policy: DispatchFailurePolicy = DispatchFailurePolicy.FAIL,
    ):
        self.validator = validator
        self.store = store
        self.codes = codes
        self.verifier = verifier
        self.issuer = issuer
        self.failure_policy = failure_policy

    async def authenticate(self, identifier: str, password: str) -> str:
        """
        Raises:
            InvalidCredentials: Credential rejected or account inactive
            DirectoryUnavailable: Directory timed out
            DeliveryFailure: Code not delivered and the policy is FAIL
        """
        identity = await self.validator.validate(identifier, password)
        nonce, code = await self.store.create(identity)

        try:
            await self.codes.dispatch(identity, code)
        except DeliveryFailure as e:
            if self.failure_policy == DispatchFailurePolicy.FAIL:
                logger.error(f"Verification code delivery failed for subject {identity.subject_id}: {e.reason}")
                raise
            logger.warning(
                f"Verification code delivery failed for subject {identity.subject_id}, "
                f"continuing per policy: {e.reason}"
            )

        return nonce

    async def verify_code(self, nonce: str, code: str) -> str:
        """
        Raises:
            Unauthorized: Any invalid, expired, exhausted or reused pair
            InternalError: Signing key unavailable
        """
        identity = await self.verifier.check(nonce, code)
        return self.issuer.mint(identity)

    def refresh_token(self, token: str) -> str:
        return self.issuer.refresh(token)

    def public_key(self) -> str:
        return self.issuer.public_key_pem()
