from __future__ import annotations
from typing import Any, Dict, List, Protocol
import redis
import redis.asyncio as aioredis
from gatewaystats.errors import EntityNotFound, StorageFailure

ENTITIES = ("key", "keyring", "api")

class EntityDirectory(Protocol):
    async def get(self, entity: str, identifier: str) -> Dict[str, Any]:
        ...

    async def keyring_keys(self, keyring: str) -> List[str]:
        ...

class RedisEntityDirectory:
    def __init__(self, client: aioredis.Redis, delimiter: str = ":"):
        self.r = client
        self.delimiter = delimiter

    def _meta_key(self, *parts: str) -> str:
        return self.delimiter.join(("meta", *parts))

    async def get(self, entity: str, identifier: str) -> Dict[str, Any]:
        if entity not in ENTITIES:
            raise ValueError(f"unknown entity type {entity!r}")
        try:
            record = await self.r.hgetall(self._meta_key(entity, identifier))
        except redis.RedisError as e:
            raise StorageFailure(e) from e
        if not record:
            raise EntityNotFound(entity, identifier)
        return dict(record)

    async def keyring_keys(self, keyring: str) -> List[str]:
        await self.get("keyring", keyring)
        try:
            return list(await self.r.zrange(self._meta_key("keyring", keyring, "keys"), 0, -1))
        except redis.RedisError as e:
            raise StorageFailure(e) from e
