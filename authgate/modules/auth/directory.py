"""
User directory adapter.

Talks to the user management service over HTTP. Only the transport lives
here; deciding whether a payload is acceptable is the credential
validator's job.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import DirectoryUnavailable

logger = logging.getLogger(__name__)

REJECTED_STATUSES = {400, 401, 403, 404}


class HttpUserDirectory:
    """Checks primary credentials against the user management service."""

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize directory adapter.

        Args:
            base_url: User management service root URL
            timeout: Per-request timeout in seconds
            client: Optional shared client (tests pass one with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def verify_password(self, identifier: str, secret: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/verifyPassword"
        body = {"username": identifier, "password": secret}

        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body)
        except httpx.TimeoutException as e:
            logger.warning(f"User directory timed out: {e}")
            raise DirectoryUnavailable("user directory timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"User directory unreachable: {e}")
            raise DirectoryUnavailable("user directory unreachable") from e

        if response.status_code in REJECTED_STATUSES:
            return None

        if response.status_code != 200:
            logger.error(f"User directory returned unexpected HTTP {response.status_code}")
            raise DirectoryUnavailable(f"user directory returned {response.status_code}")

        try:
            return response.json()
        except ValueError:
            logger.warning("User directory returned a non-JSON body")
            return None
