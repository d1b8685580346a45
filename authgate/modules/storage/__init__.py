"""
Storage Module - Black Box Interface

Purpose: Own the Redis connection used by the shared nonce backend
Interface: connect(), disconnect()
Hidden: Redis specifics, connection pooling, serialization

Can be replaced with any storage backend without affecting other modules.
"""

from typing import Optional

import redis.asyncio as redis


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: str, timeout: float = 5.0):
        """Initialize storage with connection URL and per-command socket timeout."""
        self.url = connection_url
        self.timeout = timeout
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=self.timeout,
                socket_connect_timeout=self.timeout,
            )
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule"]
