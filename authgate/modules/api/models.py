"""
authgate API data models.

These models define the request and response bodies of the
authentication endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Request Models (API Input)


class AuthenticateRequest(BaseModel):
    """Primary credential. The identifier may arrive as username, mobile or identifier."""

    identifier: Optional[str] = Field(None, description="Username or mobile number", max_length=256)
    username: Optional[str] = Field(None, description="Username", max_length=256)
    mobile: Optional[str] = Field(None, description="Mobile number", max_length=32)
    password: str = Field(..., description="Password", min_length=1, max_length=1024)

    @model_validator(mode="after")
    def require_identifier(self):
        """Ensure at least one usable identifier was supplied."""
        if not self.resolved_identifier:
            raise ValueError("one of identifier, username or mobile is required")
        return self

    @property
    def resolved_identifier(self) -> str:
        return self.identifier or self.username or self.mobile or ""


class VerifyCodeRequest(BaseModel):
    """Nonce from /authenticate plus the code delivered out-of-band."""

    nonce: str = Field(..., description="Nonce returned by /authenticate")
    code: str = Field(..., description="Verification code")


class RefreshTokenRequest(BaseModel):
    """Existing access token to exchange for a fresh one."""

    token: str = Field(..., description="Access token", min_length=1)


# Response Models (API Output)


class AuthenticateResponse(BaseModel):
    """Challenge issued."""

    nonce: str = Field(..., description="Opaque identifier of the pending verification")


class TokenResponse(BaseModel):
    """Access token issued."""

    token: str = Field(..., description="Signed access token (header.payload.signature)")


class HealthResponse(BaseModel):
    """Service health."""

    status: str = "healthy"
    nonce_backend: str
