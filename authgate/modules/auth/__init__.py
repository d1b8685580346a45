"""
Authentication Module - Black Box Interface

Purpose: Two-step challenge/response login
Interface: ChallengeAuthService.authenticate(), verify_code(), refresh_token()
Hidden: Directory transport, code delivery, nonce bookkeeping, token signing

Built by authgate.modules.auth.factory.AuthFactory; collaborators can be
replaced with any implementation of the protocols in interfaces.py.
"""

from .errors import (
    AuthError,
    DeliveryFailure,
    InternalError,
    InvalidCredentials,
    ServiceUnavailable,
    Unauthorized,
)
from .identity import Identity

__all__ = [
    "AuthError",
    "DeliveryFailure",
    "Identity",
    "InternalError",
    "InvalidCredentials",
    "ServiceUnavailable",
    "Unauthorized",
]
