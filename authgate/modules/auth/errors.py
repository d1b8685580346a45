"""
Authentication error taxonomy.

Every error carries the HTTP status and the public detail that may reach
the client. Internal reasons (expired vs. wrong code vs. too many attempts)
are logged by the raiser and never placed in ``detail``.
"""


class AuthError(Exception):
    """Base class for all authentication failures."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, reason: str = ""):
        super().__init__(reason or self.detail)
        self.reason = reason


class InvalidCredentials(AuthError):
    """Primary credential rejected, or the account is not active."""

    status_code = 401
    detail = "Invalid credentials"


class Unauthorized(AuthError):
    """Nonce/code pair rejected (unknown, expired, exhausted, consumed or wrong)."""

    status_code = 401
    detail = "Unauthorized"


class ServiceUnavailable(AuthError):
    """A collaborator timed out or could not be reached. Safe to retry."""

    status_code = 503
    detail = "Service temporarily unavailable"


class DirectoryUnavailable(ServiceUnavailable):
    """The user directory could not answer."""


class DeliveryFailure(AuthError):
    """The verification code could not be delivered."""

    status_code = 500
    detail = "Failed to deliver verification code"


class InternalError(AuthError):
    """Signing key or storage unavailable."""

    status_code = 500
    detail = "Internal server error"


class KeyUnavailable(InternalError):
    """The signing key could not be loaded."""
