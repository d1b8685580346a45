"""
Verification code generation and out-of-band delivery.

The generator owns the randomness source and the channel choice; the
channels only know how to talk to a notification backend.
"""

import logging
import secrets
from typing import Optional

import httpx

from .errors import DeliveryFailure
from .identity import Identity
from .interfaces import CodeSource, NotificationChannel

logger = logging.getLogger(__name__)

SMS = "sms"
EMAIL = "email"


class VerificationCodeGenerator:
    """Produces numeric verification codes and dispatches them."""

    def __init__(
        self,
        channel: NotificationChannel,
        length: int = 6,
        source: Optional[CodeSource] = None,
    ):
        """
        Args:
            channel: Notification channel used by dispatch()
            length: Number of digits in each code
            source: Randomness source, defaults to the OS CSPRNG
        """
        if length < 1:
            raise ValueError("code length must be at least 1")
        self.channel = channel
        self.length = length
        self.source = source or secrets.SystemRandom()

    def generate(self) -> str:
        """Return a zero-padded numeric code of the configured length."""
        return str(self.source.randrange(10 ** self.length)).zfill(self.length)

    async def dispatch(self, identity: Identity, code: str) -> None:
        """
        Send a code to the identity's mobile, falling back to email.

        Raises:
            DeliveryFailure: If the identity has no contact or the channel fails
        """
        if identity.mobile:
            channel, contact = SMS, identity.mobile
        elif identity.email:
            channel, contact = EMAIL, identity.email
        else:
            logger.warning(f"No contact details for subject {identity.subject_id}")
            raise DeliveryFailure("identity has no mobile or email")

        await self.channel.send(channel, contact, code, identity)
        logger.info(f"Verification code dispatched via {channel} for subject {identity.subject_id}")


class HttpNotificationChannel:
    """Delivers codes through the notification service over HTTP."""

    ENDPOINTS = {
        SMS: "/authenticationCodeSMS",
        EMAIL: "/authenticationCodeEmail",
    }

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def send(self, channel: str, contact: str, code: str, identity: Identity) -> None:
        if channel == SMS:
            body = {"msisdn": contact, "code": code}
        else:
            body = {"email": contact, "code": code}

        url = f"{self.base_url}{self.ENDPOINTS[channel]}"
        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body)
        except httpx.TimeoutException as e:
            logger.warning(f"Notification service timed out: {e}")
            raise DeliveryFailure("notification service timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"Notification service unreachable: {e}")
            raise DeliveryFailure("notification service unreachable") from e

        if response.status_code >= 400:
            logger.warning(f"Notification service rejected {channel} delivery: HTTP {response.status_code}")
            raise DeliveryFailure(f"notification service returned {response.status_code}")


class LoggingNotificationChannel:
    """Development channel: writes the code to the log instead of sending it."""

    async def send(self, channel: str, contact: str, code: str, identity: Identity) -> None:
        logger.info(f"[dev] verification code for {contact} via {channel}: {code}")
