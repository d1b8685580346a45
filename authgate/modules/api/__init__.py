"""
API Module - Black Box Interface

Purpose: HTTP routing for the authentication flow
Interface: REST API endpoints
Hidden: Request validation, error translation

The API module only orchestrates - it contains no business logic.
All logic is delegated to the authentication service.
"""

from .models import (
    AuthenticateRequest,
    AuthenticateResponse,
    HealthResponse,
    RefreshTokenRequest,
    TokenResponse,
    VerifyCodeRequest,
)
from .routes import create_auth_router

__all__ = [
    "AuthenticateRequest",
    "AuthenticateResponse",
    "HealthResponse",
    "RefreshTokenRequest",
    "TokenResponse",
    "VerifyCodeRequest",
    "create_auth_router",
]
