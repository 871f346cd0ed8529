from __future__ import annotations
import logging
from typing import Dict, List, Protocol, Sequence
import redis
import redis.asyncio as aioredis
from gatewaystats.errors import StatsError, StorageFailure
from gatewaystats.merge import Bucket
from gatewaystats.ranges import StatKey

logger = logging.getLogger(__name__)

class StatsStore(Protocol):
    async def multi_hgetall(self, keys: Sequence[str]) -> List[Dict[str, str]]:
        ...

class RedisStatsStore:
    """Reads per-day stat hashes with one MULTI/EXEC round trip per batch."""

    def __init__(self, client: aioredis.Redis):
        self.r = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStatsStore":
        return cls(aioredis.Redis.from_url(url, decode_responses=True))

    async def multi_hgetall(self, keys: Sequence[str]) -> List[Dict[str, str]]:
        if not keys:
            return []
        try:
            async with self.r.pipeline(transaction=True) as pipe:
                for k in keys:
                    pipe.hgetall(k)
                replies = await pipe.execute()
        except redis.RedisError as e:
            raise StorageFailure(e) from e
        return [dict(reply or {}) for reply in replies]

    async def close(self) -> None:
        await self.r.aclose()

async def fetch(store: StatsStore, keys: Sequence[StatKey], delimiter: str = ":") -> List[Bucket]:
    rendered = [k.render(delimiter) for k in keys]
    try:
        buckets = await store.multi_hgetall(rendered)
    except StatsError:
        raise
    except Exception as e:
        raise StorageFailure(e) from e
    if len(buckets) != len(rendered):
        raise StorageFailure(
            RuntimeError(f"expected {len(rendered)} replies, got {len(buckets)}"),
            message="Storage returned a batch of the wrong size",
        )
    logger.debug("fetched %d buckets starting at %s", len(buckets), rendered[0] if rendered else None)
    return [dict(b) if b else {} for b in buckets]
