"""Redis-backed store of pending verifications shared between replicas."""

import json
import logging
import time
from typing import Callable, Optional, Tuple

from ..auth.identity import Identity
from .store import PendingVerification, default_nonce

logger = logging.getLogger(__name__)

PENDING_INDEX = "verifications:pending"


class RedisNonceStore:
    """
    Pending verification store shared between API replicas.

    Relies on single-command atomicity in Redis: HINCRBY for attempt
    counting, the DEL return value for single-use consumption, and key TTL
    for expiry. The stored expires_at is also checked against the injected
    clock so expiry does not depend on Redis eviction timing.
    """

    backend = "redis"

    def __init__(
        self,
        redis_client,
        code_factory: Callable[[], str],
        ttl: int = 600,
        max_attempts: int = 5,
        clock: Callable[[], float] = time.time,
        nonce_factory: Callable[[], str] = default_nonce,
    ):
        """
        Initialize Redis nonce store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            code_factory: Produces a fresh verification code
            ttl: Seconds a pending verification stays valid
            max_attempts: Wrong codes tolerated before the nonce is destroyed
            clock: Returns the current time in epoch seconds
            nonce_factory: Produces a fresh opaque nonce
        """
        self.redis = redis_client
        self.code_factory = code_factory
        self.ttl = ttl
        self.max_attempts = max_attempts
        self.clock = clock
        self.nonce_factory = nonce_factory

    @staticmethod
    def _key(nonce: str) -> str:
        return f"verification:{nonce}"

    async def create(self, identity: Identity) -> Tuple[str, str]:
        code = self.code_factory()
        now = self.clock()
        expires_at = now + self.ttl

        nonce = self.nonce_factory()
        while await self.redis.exists(self._key(nonce)):
            nonce = self.nonce_factory()

        key = self._key(nonce)
        await self.redis.hset(
            key,
            mapping={
                "code": code,
                "identity": json.dumps(identity.to_dict()),
                "created_at": repr(now),
                "expires_at": repr(expires_at),
                "attempts": 0,
            },
        )
        await self.redis.pexpireat(key, int(expires_at * 1000))
        await self.redis.sadd(PENDING_INDEX, nonce)

        return nonce, code

    async def get(self, nonce: str) -> Optional[PendingVerification]:
        key = self._key(nonce)
        data = await self.redis.hgetall(key)
        if not data:
            return None

        # A hash without a code is left over from an attempt racing a consume
        if "code" not in data:
            await self._remove(nonce)
            return None

        record = PendingVerification(
            nonce=nonce,
            code=data["code"],
            identity=Identity.from_directory_payload(json.loads(data["identity"])),
            created_at=float(data["created_at"]),
            expires_at=float(data["expires_at"]),
            attempts=int(data.get("attempts", 0)),
        )

        if record.is_expired(self.clock()):
            await self._remove(nonce)
            return None

        return record

    async def record_attempt(self, nonce: str) -> int:
        """
        Reserve an attempt with HINCRBY before the code is compared.

        Returns:
            The new attempt count, or 0 if the nonce was not pending
        """
        key = self._key(nonce)
        if not await self.redis.exists(key):
            return 0

        count = await self.redis.hincrby(key, "attempts", 1)

        if not await self.redis.hexists(key, "code"):
            await self._remove(nonce)
            return 0

        if count > self.max_attempts:
            await self._remove(nonce)
            logger.info(f"Nonce invalidated after {self.max_attempts} attempts")

        return count

    async def consume(self, nonce: str) -> bool:
        return await self._remove(nonce)

    async def reap(self) -> int:
        """
        Drop index entries whose hash has expired or is past expires_at.

        Returns:
            Number of pending verifications removed
        """
        cleaned = 0
        now = self.clock()

        for nonce in await self.redis.smembers(PENDING_INDEX):
            key = self._key(nonce)
            expires_at = await self.redis.hget(key, "expires_at")
            if expires_at is None or now >= float(expires_at):
                await self.redis.delete(key)
                await self.redis.srem(PENDING_INDEX, nonce)
                cleaned += 1

        return cleaned

    async def _remove(self, nonce: str) -> bool:
        deleted = await self.redis.delete(self._key(nonce))
        await self.redis.srem(PENDING_INDEX, nonce)
        return deleted > 0
