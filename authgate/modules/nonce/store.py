"""In-process store of pending verifications issued by /authenticate."""

import logging
import secrets
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from ..auth.identity import Identity

logger = logging.getLogger(__name__)


def default_nonce() -> str:
    """256 bits from the OS CSPRNG, URL safe."""
    return secrets.token_urlsafe(32)


@dataclass
class PendingVerification:
    """A challenge issued by /authenticate and awaiting /verifyCode."""
    nonce: str
    code: str
    identity: Identity
    created_at: float
    expires_at: float
    attempts: int = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryNonceStore:
    """
    Process-local pending verification store.

    Every operation runs under a single lock and never awaits while holding
    it, so operations on one nonce are totally ordered even when requests
    run on different threads.
    """

    backend = "memory"

    def __init__(
        self,
        code_factory: Callable[[], str],
        ttl: int = 600,
        max_attempts: int = 5,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = default_nonce,
    ):
        """
        Initialize nonce store.

        Args:
            code_factory: Produces a fresh verification code
            ttl: Seconds a pending verification stays valid
            max_attempts: Wrong codes tolerated before the nonce is destroyed
            clock: Returns the current time in epoch seconds
            nonce_factory: Produces a fresh opaque nonce
        """
        self.code_factory = code_factory
        self.ttl = ttl
        self.max_attempts = max_attempts
        self.clock = clock
        self.nonce_factory = nonce_factory

        self._lock = threading.Lock()
        self._records: Dict[str, PendingVerification] = {}

    async def create(self, identity: Identity) -> Tuple[str, str]:
        """
        Store a new pending verification for an identity.

        Returns:
            (nonce, code); the code must only go to the notification channel
        """
        code = self.code_factory()
        now = self.clock()

        with self._lock:
            nonce = self.nonce_factory()
            while nonce in self._records:
                nonce = self.nonce_factory()

            self._records[nonce] = PendingVerification(
                nonce=nonce,
                code=code,
                identity=identity,
                created_at=now,
                expires_at=now + self.ttl,
            )

        return nonce, code

    async def get(self, nonce: str) -> Optional[PendingVerification]:
        """
        Look up a pending verification.

        Returns:
            A copy of the record, or None if unknown, consumed or expired
        """
        with self._lock:
            record = self._records.get(nonce)
            if record is None:
                return None
            if record.is_expired(self.clock()):
                del self._records[nonce]
                return None
            return replace(record)

    async def record_attempt(self, nonce: str) -> int:
        """
        Reserve an attempt before the submitted code is compared.

        The record is removed once the count exceeds max_attempts, so at most
        max_attempts submissions are ever compared against the code.

        Returns:
            The new attempt count, or 0 if the nonce was not pending
        """
        with self._lock:
            record = self._records.get(nonce)
            if record is None:
                return 0
            if record.is_expired(self.clock()):
                del self._records[nonce]
                return 0

            record.attempts += 1
            if record.attempts > self.max_attempts:
                del self._records[nonce]
                logger.info(f"Nonce invalidated after {self.max_attempts} attempts")
            return record.attempts

    async def consume(self, nonce: str) -> bool:
        """
        Remove a pending verification.

        Returns:
            True only for the call that actually removed it
        """
        with self._lock:
            return self._records.pop(nonce, None) is not None

    async def reap(self) -> int:
        """
        Remove expired records.

        Returns:
            Number of records removed
        """
        now = self.clock()
        with self._lock:
            expired = [nonce for nonce, record in self._records.items() if record.is_expired(now)]
            for nonce in expired:
                del self._records[nonce]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
