"""Configuration for authgate."""

from .provider import (
    APIConfig,
    ConfigProvider,
    DirectoryConfig,
    DispatchFailurePolicy,
    EnvConfigProvider,
    NonceConfig,
    NotificationConfig,
    TokenConfig,
)

__all__ = [
    "APIConfig",
    "ConfigProvider",
    "DirectoryConfig",
    "DispatchFailurePolicy",
    "EnvConfigProvider",
    "NonceConfig",
    "NotificationConfig",
    "TokenConfig",
]
