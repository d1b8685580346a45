"""
Authentication endpoints for the authgate API.

The router reads the authentication service from ``app.state`` so the
application lifespan (or a test) decides which stack is wired in.
"""

import logging
from typing import NoReturn

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from ..auth.errors import AuthError, InternalError, ServiceUnavailable
from ..auth.service import AuthenticationService
from .models import (
    AuthenticateRequest,
    AuthenticateResponse,
    RefreshTokenRequest,
    TokenResponse,
    VerifyCodeRequest,
)

logger = logging.getLogger(__name__)


def _service(request: Request) -> AuthenticationService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise HTTPException(503, "Service not initialized")
    return service


def _raise_http(error: AuthError) -> NoReturn:
    """Translate a domain error into its public HTTP shape."""
    if isinstance(error, InternalError):
        logger.error(f"{type(error).__name__}: {error.reason}")
    headers = {"Retry-After": "5"} if isinstance(error, ServiceUnavailable) else None
    raise HTTPException(status_code=error.status_code, detail=error.detail, headers=headers) from error


def create_auth_router() -> APIRouter:
    """
    Create the authentication router.

    Returns:
        FastAPI router with the challenge/response endpoints
    """
    router = APIRouter(tags=["auth"])

    @router.post("/authenticate", response_model=AuthenticateResponse)
    async def authenticate(body: AuthenticateRequest, request: Request) -> AuthenticateResponse:
        """
        Validate a primary credential and send a verification code.

        The code is never part of the response; it goes out-of-band to the
        user's mobile or email.
        """
        service = _service(request)
        try:
            nonce = await service.authenticate(body.resolved_identifier, body.password)
        except AuthError as e:
            _raise_http(e)
        return AuthenticateResponse(nonce=nonce)

    @router.post("/verifyCode", response_model=TokenResponse)
    async def verify_code(body: VerifyCodeRequest, request: Request) -> TokenResponse:
        """Exchange a nonce and verification code for an access token."""
        service = _service(request)
        try:
            token = await service.verify_code(body.nonce, body.code)
        except AuthError as e:
            _raise_http(e)
        return TokenResponse(token=token)

    @router.post("/refreshToken", response_model=TokenResponse)
    async def refresh_token(body: RefreshTokenRequest, request: Request) -> TokenResponse:
        """Exchange a valid access token for a new one with the same subject and scope."""
        service = _service(request)
        try:
            token = service.refresh_token(body.token)
        except AuthError as e:
            _raise_http(e)
        return TokenResponse(token=token)

    @router.get("/.well-known", response_class=PlainTextResponse)
    async def public_key(request: Request) -> str:
        """PEM encoded public key for offline token verification."""
        service = _service(request)
        try:
            return service.public_key()
        except AuthError as e:
            _raise_http(e)

    return router
