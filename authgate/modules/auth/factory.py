"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires dependencies together
- Returns only the service facade (hiding implementation)
"""

import logging
import time
from typing import Any, Callable, Optional

from ...config.provider import ConfigProvider
from ..nonce import InMemoryNonceStore, RedisNonceStore
from .credentials import CredentialValidator
from .directory import HttpUserDirectory
from .interfaces import CodeSource, KeyProvider, NotificationChannel, UserDirectory
from .notification import (
    HttpNotificationChannel,
    LoggingNotificationChannel,
    VerificationCodeGenerator,
)
from .service import ChallengeAuthService
from .tokens import FileKeyProvider, TokenIssuer
from .verifier import Verifier

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that:
    - Creates all auth components
    - Wires them together via dependency injection
    - Returns only the public interface
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        redis_client: Optional[Any] = None,
        directory: Optional[UserDirectory] = None,
        channel: Optional[NotificationChannel] = None,
        key_provider: Optional[KeyProvider] = None,
        clock: Callable[[], float] = time.time,
        code_source: Optional[CodeSource] = None,
    ) -> ChallengeAuthService:
        """
        Build the complete authentication stack.

        Any collaborator passed explicitly replaces the one the configuration
        would select; tests use this to inject doubles.

        Args:
            config_provider: Configuration provider
            redis_client: Async Redis client, required for the redis nonce backend
            directory: User directory override
            channel: Notification channel override
            key_provider: Signing key override
            clock: Time source shared by the store, verifier and issuer
            code_source: Randomness source for verification codes

        Returns:
            ChallengeAuthService facade
        """
        nonce_config = config_provider.get_nonce_config()
        token_config = config_provider.get_token_config()
        directory_config = config_provider.get_directory_config()
        notification_config = config_provider.get_notification_config()

        if directory is None:
            directory = HttpUserDirectory(directory_config.url, timeout=directory_config.timeout)

        if channel is None:
            if notification_config.mode == "log":
                logger.warning("Verification codes will be logged, not sent (NOTIFICATION_MODE=log)")
                channel = LoggingNotificationChannel()
            else:
                channel = HttpNotificationChannel(notification_config.url, timeout=notification_config.timeout)

        if key_provider is None:
            key_provider = FileKeyProvider(token_config.private_key_path, token_config.public_key_path)

        codes = VerificationCodeGenerator(channel, length=nonce_config.code_length, source=code_source)

        if nonce_config.uses_redis:
            if redis_client is None:
                raise ValueError("NONCE_BACKEND=redis requires a Redis client")
            logger.info("Building authentication stack with Redis nonce store")
            store = RedisNonceStore(
                redis_client,
                code_factory=codes.generate,
                ttl=nonce_config.code_ttl,
                max_attempts=nonce_config.max_attempts,
                clock=clock,
            )
        else:
            logger.info("Building authentication stack with in-memory nonce store")
            store = InMemoryNonceStore(
                code_factory=codes.generate,
                ttl=nonce_config.code_ttl,
                max_attempts=nonce_config.max_attempts,
                clock=clock,
            )

        issuer = TokenIssuer(
            key_provider,
            ttl=token_config.ttl,
            algorithm=token_config.algorithm,
            issuer=token_config.issuer,
            audience=token_config.audience,
            clock=clock,
        )

        return ChallengeAuthService(
            validator=CredentialValidator(directory),
            store=store,
            codes=codes,
            verifier=Verifier(store, clock),
            issuer=issuer,
            failure_policy=notification_config.failure_policy,
        )
