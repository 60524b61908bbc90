"""
Redis-based distributed lock guarding a ride's seat count.

Every booking and booking cancellation for one ride runs under
``lock:ride:<id>:seats`` so two API processes never sell the same seat.
The row is additionally locked with ``SELECT ... FOR UPDATE``.

Acquire is SET NX EX; release is an atomic check-and-delete in Lua so a
lock that expired and was re-taken by someone else is left alone.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class LockNotAcquired(RuntimeError):
    """Raised when another holder owns the lock."""


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 10
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    @classmethod
    def for_ride_seats(
        cls, client: aioredis.Redis, ride_id: int, ttl_seconds: int = 10
    ) -> DistributedLock:
        return cls(client, f"ride:{ride_id}:seats", ttl_seconds=ttl_seconds)

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def release(self) -> None:
        """Release only if we still own the lock."""
        await self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token)

    async def __aenter__(self):
        if not await self.acquire():
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()
