"""
Access token minting and verification.

Tokens are compact JWS strings signed with the configured private key and
verifiable offline by anyone holding the public key.
"""

import logging
import secrets
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import jwt
from cryptography.hazmat.primitives import serialization

from .errors import InternalError, KeyUnavailable, Unauthorized
from .identity import Identity
from .interfaces import KeyProvider

logger = logging.getLogger(__name__)


class FileKeyProvider:
    """Loads PEM encoded signing keys from disk on first use."""

    def __init__(self, private_key_path: Optional[str], public_key_path: Optional[str]):
        self.private_key_path = private_key_path
        self.public_key_path = public_key_path
        self._private_key = None
        self._public_key = None

    def get_signing_key(self) -> Any:
        if self._private_key is None:
            if not self.private_key_path:
                raise KeyUnavailable("CERT_PRIVATE_KEY_PATH is not configured")
            try:
                self._private_key = serialization.load_pem_private_key(
                    Path(self.private_key_path).read_bytes(), password=None
                )
            except (OSError, ValueError, TypeError) as e:
                raise KeyUnavailable(f"cannot load private key: {e}") from e
        return self._private_key

    def get_verification_key(self) -> Any:
        if self._public_key is None:
            if self.public_key_path:
                try:
                    self._public_key = serialization.load_pem_public_key(
                        Path(self.public_key_path).read_bytes()
                    )
                except (OSError, ValueError) as e:
                    raise KeyUnavailable(f"cannot load public key: {e}") from e
            else:
                self._public_key = self.get_signing_key().public_key()
        return self._public_key


class StaticKeyProvider:
    """Holds already loaded keys (tests, embedded use)."""

    def __init__(self, private_key: Any, public_key: Any = None):
        self._private_key = private_key
        self._public_key = public_key

    def get_signing_key(self) -> Any:
        if self._private_key is None:
            raise KeyUnavailable("no signing key configured")
        return self._private_key

    def get_verification_key(self) -> Any:
        if self._public_key is not None:
            return self._public_key
        return self.get_signing_key().public_key()


class TokenIssuer:
    """Mints signed access tokens for verified identities."""

    def __init__(
        self,
        key_provider: KeyProvider,
        ttl: int = 604800,
        algorithm: str = "RS256",
        issuer: str = "authgate",
        audience: Optional[List[str]] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize token issuer.

        Args:
            key_provider: Supplies the signing and verification keys
            ttl: Token lifetime in seconds
            algorithm: JWS algorithm
            issuer: Value of the iss claim
            audience: Values of the aud claim
            clock: Returns the current time in epoch seconds
        """
        self.key_provider = key_provider
        self.ttl = ttl
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience or ["authgate:api"]
        self.clock = clock

    def mint(self, identity: Identity) -> str:
        """
        Create a signed token for an identity.

        Returns:
            Compact JWS (header.payload.signature)

        Raises:
            Unauthorized: Identity is not active
            InternalError: Signing key missing or signing failed
        """
        if not identity.is_active:
            logger.warning(f"Refusing to mint token for subject {identity.subject_id} with status {identity.status}")
            raise Unauthorized("inactive identity")

        return self._sign(identity.subject_id, list(identity.scope))

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decode and verify a token issued by this service.

        Raises:
            Unauthorized: Bad signature, expired, wrong issuer/audience or missing claims
            InternalError: Verification key unavailable
        """
        try:
            return jwt.decode(
                token,
                self.key_provider.get_verification_key(),
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub", "scope"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Token expired")
            raise Unauthorized("token expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid token: {e}")
            raise Unauthorized("invalid token")

    def refresh(self, token: str) -> str:
        """Verify a token and mint a fresh one with the same subject and scope."""
        claims = self.verify(token)
        scope = claims["scope"]
        if not isinstance(scope, list):
            raise Unauthorized("scope claim is not a list")
        return self._sign(str(claims["sub"]), scope)

    def public_key_pem(self) -> str:
        key = self.key_provider.get_verification_key()
        return key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode("ascii")

    def _sign(self, subject_id: str, scope: List[str]) -> str:
        now = int(self.clock())
        claims = {
            "sub": subject_id,
            "scope": scope,
            "iat": now,
            "exp": now + self.ttl,
            "iss": self.issuer,
            "aud": self.audience,
            "jti": secrets.token_urlsafe(16),
        }

        signing_key = self.key_provider.get_signing_key()
        try:
            return jwt.encode(claims, signing_key, algorithm=self.algorithm)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.error(f"Token signing failed: {e}")
            raise InternalError("token signing failed") from e
