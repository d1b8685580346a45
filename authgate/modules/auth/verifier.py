"""Second-step verification of a nonce and code pair."""

import logging
import secrets
from typing import Callable, NoReturn

from .errors import Unauthorized
from .identity import Identity
from .interfaces import NonceStore

logger = logging.getLogger(__name__)

MAX_NONCE_LENGTH = 256


class Verifier:
    """
    Matches a submitted code against the pending verification for a nonce.

    Every rejection raises the same Unauthorized; the reason is only logged.
    """

    def __init__(self, store: NonceStore, clock: Callable[[], float]):
        self.store = store
        self.clock = clock

    async def check(self, nonce: str, submitted_code: str) -> Identity:
        """
        Args:
            nonce: Nonce returned by /authenticate
            submitted_code: Code the user received out-of-band

        Returns:
            Identity captured when the nonce was issued

        Raises:
            Unauthorized: On any mismatch, expiry, exhaustion or reuse
        """
        if not nonce or len(nonce) > MAX_NONCE_LENGTH:
            self._reject("unknown")

        record = await self.store.get(nonce)
        if record is None:
            self._reject("unknown")

        if record.is_expired(self.clock()):
            await self.store.consume(nonce)
            self._reject("expired")

        # The attempt is counted before comparing, so no more than max_attempts
        # submissions per nonce ever reach the comparison, however many race.
        attempts = await self.store.record_attempt(nonce)
        if attempts == 0:
            self._reject("unknown")
        if attempts > self.store.max_attempts:
            self._reject("exhausted")

        if not secrets.compare_digest(record.code.encode("utf-8"), (submitted_code or "").encode("utf-8")):
            if attempts >= self.store.max_attempts:
                await self.store.consume(nonce)
                self._reject("exhausted")
            self._reject("mismatch")

        if not await self.store.consume(nonce):
            self._reject("race")

        logger.info(f"Verification code accepted for subject {record.identity.subject_id}")
        return record.identity

    @staticmethod
    def _reject(reason: str) -> NoReturn:
        logger.info(f"Verification rejected: {reason}")
        raise Unauthorized(reason)
