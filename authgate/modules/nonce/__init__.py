"""
Nonce Module - Black Box Interface

Purpose: Hold pending verifications between /authenticate and /verifyCode
Interface: create(), get(), record_attempt(), consume(), reap()
Hidden: Storage backend, expiry bookkeeping, locking

Replaceable with any backend that keeps the single-use and attempt-limit
guarantees (in-process dict, Redis).
"""

from .redis_store import RedisNonceStore
from .store import InMemoryNonceStore, PendingVerification

__all__ = ["InMemoryNonceStore", "PendingVerification", "RedisNonceStore"]
