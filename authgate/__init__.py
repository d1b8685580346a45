"""
authgate - Two-step challenge/response authentication service

Exchanges a primary credential for a short-lived verification code, and
a correct nonce+code pair for a signed access token.

Architecture:
- Each module is self-contained with clear interfaces
- Collaborators (user directory, notification channel, signing keys)
  are injected, never imported directly
- All communication through defined interfaces

Modules:
- auth: Credential validation, code delivery, verification and token minting
- nonce: Pending verification storage with expiry and single-use semantics
- storage: Redis connection management
- api: REST API interface
"""

__version__ = "1.0.0"
