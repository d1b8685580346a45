"""
Shared pytest fixtures for authgate tests.

This module provides common fixtures including:
- FakeClock: controllable time source for expiry tests
- Directory and notification doubles
- In-memory Redis double for the Redis nonce backend
- RSA key material and a fully wired authentication service
"""

import logging
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from authgate.config.provider import (
    APIConfig,
    DirectoryConfig,
    DispatchFailurePolicy,
    NonceConfig,
    NotificationConfig,
    TokenConfig,
)
from authgate.modules.auth.errors import DeliveryFailure, DirectoryUnavailable
from authgate.modules.auth.factory import AuthFactory
from authgate.modules.auth.identity import Identity
from authgate.modules.auth.tokens import StaticKeyProvider


# =============================================================================
# Time
# =============================================================================

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[float] = None):
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def propagate_authgate_logs(monkeypatch):
    """authgate.main configures the package logger not to propagate; caplog listens on root."""
    monkeypatch.setattr(logging.getLogger("authgate"), "propagate", True)


# =============================================================================
# Collaborator doubles
# =============================================================================

ADMIN_PAYLOAD = {
    "name": [{"use": "en", "family": "Anik", "given": ["Sadman"]}],
    "userId": "1",
    "scope": ["admin"],
    "status": "active",
    "mobile": "+345345343",
    "email": "test@test.org",
}


class FakeDirectory:
    """User directory double keyed by (identifier, password)."""

    def __init__(self, users: Optional[Dict[Tuple[str, str], Dict[str, Any]]] = None):
        self.users = users or {}
        self.calls: List[Tuple[str, str]] = []
        self.unavailable = False

    def add(self, identifier: str, password: str, payload: Dict[str, Any]) -> "FakeDirectory":
        self.users[(identifier, password)] = payload
        return self

    async def verify_password(self, identifier: str, secret: str) -> Optional[Dict[str, Any]]:
        self.calls.append((identifier, secret))
        if self.unavailable:
            raise DirectoryUnavailable("user directory timed out")
        return self.users.get((identifier, secret))


@dataclass
class SentCode:
    channel: str
    contact: str
    code: str
    identity: Identity


@dataclass
class RecordingChannel:
    """Notification channel double that remembers every code it was asked to send."""

    sent: List[SentCode] = field(default_factory=list)
    fail: bool = False

    async def send(self, channel: str, contact: str, code: str, identity: Identity) -> None:
        if self.fail:
            raise DeliveryFailure("notification service returned 502")
        self.sent.append(SentCode(channel, contact, code, identity))

    @property
    def last_code(self) -> str:
        return self.sent[-1].code


@pytest.fixture
def directory():
    return FakeDirectory().add("+345345343", "2r23432", dict(ADMIN_PAYLOAD))


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def identity():
    return Identity.from_directory_payload(ADMIN_PAYLOAD)


# =============================================================================
# Keys
# =============================================================================

@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_provider(private_key):
    return StaticKeyProvider(private_key)


# =============================================================================
# Configuration
# =============================================================================

class StaticConfigProvider:
    """Config provider returning fixed dataclasses."""

    def __init__(self, **overrides):
        self.nonce = NonceConfig(max_attempts=3, code_ttl=600)
        self.token = TokenConfig(ttl=3600)
        self.directory = DirectoryConfig()
        self.notification = NotificationConfig()
        self.api = APIConfig()
        for section, values in overrides.items():
            for key, value in values.items():
                setattr(getattr(self, section), key, value)

    def get_nonce_config(self) -> NonceConfig:
        return self.nonce

    def get_token_config(self) -> TokenConfig:
        return self.token

    def get_directory_config(self) -> DirectoryConfig:
        return self.directory

    def get_notification_config(self) -> NotificationConfig:
        return self.notification

    def get_api_config(self) -> APIConfig:
        return self.api


@pytest.fixture
def build_service(directory, channel, key_provider, clock):
    """Factory fixture: build a wired service, optionally overriding config sections."""

    def _build(redis_client=None, **overrides):
        provider = StaticConfigProvider(**overrides)
        return AuthFactory.build(
            provider,
            redis_client=redis_client,
            directory=directory,
            channel=channel,
            key_provider=key_provider,
            clock=clock,
        )

    return _build


@pytest.fixture
def ignore_policy():
    return {"notification": {"failure_policy": DispatchFailurePolicy.IGNORE}}


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

class InMemoryRedis:
    """
    Async Redis double with real read-back semantics for the commands the
    nonce backend uses (hashes, sets, delete, expiry bookkeeping).
    """

    def __init__(self):
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.sets: Dict[str, set] = {}
        self.expiries: Dict[str, int] = {}

    async def hset(self, key, mapping):
        self.hashes.setdefault(key, {}).update({k: str(v) for k, v in mapping.items()})
        return len(mapping)

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def hget(self, key, field_name):
        return self.hashes.get(key, {}).get(field_name)

    async def hexists(self, key, field_name):
        return field_name in self.hashes.get(key, {})

    async def hincrby(self, key, field_name, amount=1):
        data = self.hashes.setdefault(key, {})
        value = int(data.get(field_name, 0)) + amount
        data[field_name] = str(value)
        return value

    async def exists(self, *keys):
        return sum(1 for key in keys if key in self.hashes)

    async def delete(self, *keys):
        count = 0
        for key in keys:
            if self.hashes.pop(key, None) is not None:
                count += 1
            self.expiries.pop(key, None)
        return count

    async def pexpireat(self, key, when):
        self.expiries[key] = when
        return key in self.hashes

    async def sadd(self, key, *members):
        self.sets.setdefault(key, set()).update(members)
        return len(members)

    async def srem(self, key, *members):
        existing = self.sets.get(key, set())
        removed = len(existing & set(members))
        existing.difference_update(members)
        return removed

    async def smembers(self, key):
        return set(self.sets.get(key, set()))


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Tests exercising the full HTTP stack"
    )
