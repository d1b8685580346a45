"""Authentication interfaces following Black Box Design principles."""
from typing import Any, Dict, Optional, Protocol, Tuple

from .identity import Identity


class UserDirectory(Protocol):
    """Protocol for the external user directory - allows swappable implementations."""

    async def verify_password(self, identifier: str, secret: str) -> Optional[Dict[str, Any]]:
        """
        Check a primary credential.

        Args:
            identifier: Username or mobile number
            secret: User supplied password

        Returns:
            Directory payload on success, None if the credential was rejected

        Raises:
            DirectoryUnavailable: On timeout or transport failure
        """
        ...


class NotificationChannel(Protocol):
    """Protocol for out-of-band code delivery."""

    async def send(self, channel: str, contact: str, code: str, identity: Identity) -> None:
        """
        Deliver a verification code.

        Args:
            channel: "sms" or "email"
            contact: Mobile number or email address
            code: Verification code
            identity: Recipient identity

        Raises:
            DeliveryFailure: If the code could not be delivered
        """
        ...


class KeyProvider(Protocol):
    """Protocol for signing key access."""

    def get_signing_key(self) -> Any:
        """Return the private key used to sign tokens."""
        ...

    def get_verification_key(self) -> Any:
        """Return the public key used to verify tokens."""
        ...


class CodeSource(Protocol):
    """Randomness source for verification codes (``secrets.SystemRandom`` or ``random.Random``)."""

    def randrange(self, stop: int) -> int:
        ...


class NonceStore(Protocol):
    """Protocol for pending verification storage."""

    backend: str
    max_attempts: int

    async def create(self, identity: Identity) -> Tuple[str, str]:
        ...

    async def get(self, nonce: str) -> Optional[Any]:
        ...

    async def record_attempt(self, nonce: str) -> int:
        ...

    async def consume(self, nonce: str) -> bool:
        ...

    async def reap(self) -> int:
        ...
