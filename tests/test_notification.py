"""
Unit tests for verification code generation and delivery.
"""

import json
import logging
import random

import httpx
import pytest

from authgate.modules.auth.errors import DeliveryFailure
from authgate.modules.auth.identity import Identity
from authgate.modules.auth.notification import (
    HttpNotificationChannel,
    LoggingNotificationChannel,
    VerificationCodeGenerator,
)


def channel_with(handler) -> HttpNotificationChannel:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpNotificationChannel("http://notification:2020", timeout=1.0, client=client)


def test_generate_fixed_length_numeric(channel):
    """Test codes are numeric and zero padded."""
    generator = VerificationCodeGenerator(channel, length=6)

    codes = [generator.generate() for _ in range(200)]

    assert all(len(code) == 6 and code.isdigit() for code in codes)
    assert len(set(codes)) > 1


def test_generate_uses_injected_source(channel):
    """Test a seeded source gives reproducible codes."""
    first = VerificationCodeGenerator(channel, length=4, source=random.Random(7))
    second = VerificationCodeGenerator(channel, length=4, source=random.Random(7))

    assert [first.generate() for _ in range(5)] == [second.generate() for _ in range(5)]


def test_generate_pads_small_values(channel):
    class Fixed:
        def randrange(self, stop):
            return 7

    assert VerificationCodeGenerator(channel, length=6, source=Fixed()).generate() == "000007"


def test_invalid_length(channel):
    with pytest.raises(ValueError):
        VerificationCodeGenerator(channel, length=0)


@pytest.mark.asyncio
async def test_dispatch_prefers_mobile(channel, identity):
    """Test SMS is chosen when a mobile number is present."""
    await VerificationCodeGenerator(channel).dispatch(identity, "123456")

    assert len(channel.sent) == 1
    assert channel.sent[0].channel == "sms"
    assert channel.sent[0].contact == "+345345343"
    assert channel.sent[0].code == "123456"


@pytest.mark.asyncio
async def test_dispatch_falls_back_to_email(channel):
    identity = Identity.from_directory_payload(
        {"userId": "2", "scope": ["register"], "status": "active", "email": "a@b.org"}
    )

    await VerificationCodeGenerator(channel).dispatch(identity, "123456")

    assert channel.sent[0].channel == "email"
    assert channel.sent[0].contact == "a@b.org"


@pytest.mark.asyncio
async def test_dispatch_without_contact(channel):
    identity = Identity.from_directory_payload({"userId": "3", "scope": [], "status": "active"})

    with pytest.raises(DeliveryFailure):
        await VerificationCodeGenerator(channel).dispatch(identity, "123456")

    assert channel.sent == []


@pytest.mark.asyncio
async def test_http_channel_sms(identity):
    """Test the SMS request shape."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200)

    await channel_with(handler).send("sms", "+345345343", "123456", identity)

    assert seen == {"path": "/authenticationCodeSMS", "body": {"msisdn": "+345345343", "code": "123456"}}


@pytest.mark.asyncio
async def test_http_channel_email(identity):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200)

    await channel_with(handler).send("email", "a@b.org", "123456", identity)

    assert seen == {"path": "/authenticationCodeEmail", "body": {"email": "a@b.org", "code": "123456"}}


@pytest.mark.asyncio
async def test_http_channel_error_status(identity):
    with pytest.raises(DeliveryFailure):
        await channel_with(lambda request: httpx.Response(502)).send("sms", "+1", "123456", identity)


@pytest.mark.asyncio
async def test_http_channel_timeout(identity):
    """Test a slow notification service becomes a delivery failure."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.WriteTimeout("timed out", request=request)

    with pytest.raises(DeliveryFailure):
        await channel_with(handler).send("sms", "+1", "123456", identity)


@pytest.mark.asyncio
async def test_logging_channel(identity, caplog):
    """Test the development channel logs the code instead of sending it."""
    with caplog.at_level(logging.INFO, logger="authgate.modules.auth.notification"):
        await LoggingNotificationChannel().send("sms", "+345345343", "654321", identity)

    assert "654321" in caplog.text
