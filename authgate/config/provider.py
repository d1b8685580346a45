"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol


class DispatchFailurePolicy(str, Enum):
    """What /authenticate does when the verification code cannot be delivered."""

    FAIL = "fail"
    IGNORE = "ignore"


@dataclass
class NonceConfig:
    """Pending verification configuration."""
    code_ttl: int = 600
    code_length: int = 6
    max_attempts: int = 5
    reap_interval: int = 60
    backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_timeout: float = 5.0

    @property
    def uses_redis(self) -> bool:
        """Check if pending verifications are kept in Redis."""
        return self.backend == "redis"


@dataclass
class TokenConfig:
    """Access token configuration."""
    private_key_path: Optional[str] = None
    public_key_path: Optional[str] = None
    ttl: int = 604800
    algorithm: str = "RS256"
    issuer: str = "authgate"
    audience: List[str] = field(default_factory=lambda: ["authgate:api"])


@dataclass
class DirectoryConfig:
    """User directory configuration."""
    url: str = "http://localhost:3030"
    timeout: float = 5.0


@dataclass
class NotificationConfig:
    """Notification channel configuration."""
    url: str = "http://localhost:2020"
    timeout: float = 5.0
    mode: str = "http"
    failure_policy: DispatchFailurePolicy = DispatchFailurePolicy.FAIL


@dataclass
class APIConfig:
    """API configuration."""
    port: int = 4040
    host: str = "0.0.0.0"
    debug: bool = False
    log_level: str = "INFO"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_nonce_config(self) -> NonceConfig:
        """Get pending verification configuration."""
        ...

    def get_token_config(self) -> TokenConfig:
        """Get access token configuration."""
        ...

    def get_directory_config(self) -> DirectoryConfig:
        """Get user directory configuration."""
        ...

    def get_notification_config(self) -> NotificationConfig:
        """Get notification channel configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


def _choice(name: str, default: str, allowed: List[str]) -> str:
    value = os.getenv(name, default).strip().lower()
    if value not in allowed:
        raise ValueError(
            f"{name} must be one of {', '.join(allowed)} (got {value!r})"
        )
    return value


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_nonce_config(self) -> NonceConfig:
        """Get pending verification configuration from environment variables."""
        max_attempts = int(os.getenv("MAX_CODE_ATTEMPTS", "5"))
        if max_attempts < 1:
            raise ValueError("MAX_CODE_ATTEMPTS must be at least 1")

        return NonceConfig(
            code_ttl=int(os.getenv("CODE_TTL", "600")),
            code_length=int(os.getenv("CODE_LENGTH", "6")),
            max_attempts=max_attempts,
            reap_interval=int(os.getenv("REAP_INTERVAL", "60")),
            backend=_choice("NONCE_BACKEND", "memory", ["memory", "redis"]),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            redis_timeout=float(os.getenv("REDIS_TIMEOUT", "5")),
        )

    def get_token_config(self) -> TokenConfig:
        """Get access token configuration from environment variables."""
        audience = os.getenv("TOKEN_AUDIENCE", "authgate:api")

        return TokenConfig(
            private_key_path=os.getenv("CERT_PRIVATE_KEY_PATH"),
            public_key_path=os.getenv("CERT_PUBLIC_KEY_PATH"),
            ttl=int(os.getenv("TOKEN_TTL", "604800")),
            algorithm=os.getenv("TOKEN_ALGORITHM", "RS256"),
            issuer=os.getenv("TOKEN_ISSUER", "authgate"),
            audience=[aud.strip() for aud in audience.split(",") if aud.strip()],
        )

    def get_directory_config(self) -> DirectoryConfig:
        """Get user directory configuration from environment variables."""
        return DirectoryConfig(
            url=os.getenv("USER_DIRECTORY_URL", "http://localhost:3030"),
            timeout=float(os.getenv("DIRECTORY_TIMEOUT", "5")),
        )

    def get_notification_config(self) -> NotificationConfig:
        """Get notification channel configuration from environment variables."""
        policy = _choice("DISPATCH_FAILURE_POLICY", "fail", [p.value for p in DispatchFailurePolicy])

        return NotificationConfig(
            url=os.getenv("NOTIFICATION_URL", "http://localhost:2020"),
            timeout=float(os.getenv("NOTIFICATION_TIMEOUT", "5")),
            mode=_choice("NOTIFICATION_MODE", "http", ["http", "log"]),
            failure_policy=DispatchFailurePolicy(policy),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", "4040")),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=os.getenv("API_DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
