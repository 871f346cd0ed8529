from __future__ import annotations
import asyncio, logging, time
from contextlib import asynccontextmanager
from typing import Callable, List, Optional
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
import redis.asyncio as aioredis
from gatewaystats import granularity as gran
from gatewaystats.config import Settings, settings as default_settings
from gatewaystats.directory import EntityDirectory, RedisEntityDirectory
from gatewaystats.errors import EntityNotFound, StatsError
from gatewaystats.schemas import TimeRange, envelope
from gatewaystats.stats import StatsAggregator
from gatewaystats.store import RedisStatsStore, StatsStore

logger = logging.getLogger(__name__)

STATS_CATEGORY = "stats"

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[StatsStore] = None,
    directory: Optional[EntityDirectory] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    s = settings or default_settings
    default_granularity = gran.resolve(s.default_granularity)

    owned: List[aioredis.Redis] = []
    if store is None or directory is None:
        client = aioredis.Redis.from_url(s.redis_url, decode_responses=True)
        owned.append(client)
        store = store or RedisStatsStore(client)
        directory = directory or RedisEntityDirectory(client, s.key_delimiter)

    aggregator = StatsAggregator(store, s.response_classes, s.key_delimiter)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        for client in owned:
            await client.aclose()

    app = FastAPI(title="Gateway Stats Admin API", version=s.api_version, lifespan=lifespan)

    @app.exception_handler(StatsError)
    async def _stats_error(request: Request, exc: StatsError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
        body = envelope(None, s.api_version, status_code=exc.status_code, error=exc.to_dict())
        return JSONResponse(body, status_code=exc.status_code)

    async def _stats(path_parts: List[str], from_ts: Optional[str], to_ts: Optional[str],
                     granularity: Optional[str]) -> dict:
        g = gran.resolve(granularity, default=default_granularity)
        tr = TimeRange.parse(from_ts, to_ts, now=int(clock()), default_range_seconds=s.default_range_seconds)
        results = await aggregator.run(STATS_CATEGORY, path_parts, tr, g)
        return envelope(results, s.api_version)

    @app.get("/v1/key/{key}/stats")
    async def key_stats(
        key: str,
        from_ts: Optional[str] = Query(None, alias="from"),
        to_ts: Optional[str] = Query(None, alias="to"),
        granularity: Optional[str] = Query(None),
    ):
        await directory.get("key", key)
        return await _stats(["key", key], from_ts, to_ts, granularity)

    @app.get("/v1/keyring/{keyring}/stats")
    async def keyring_stats(
        keyring: str,
        from_ts: Optional[str] = Query(None, alias="from"),
        to_ts: Optional[str] = Query(None, alias="to"),
        granularity: Optional[str] = Query(None),
    ):
        await directory.get("keyring", keyring)
        return await _stats(["keyring", keyring], from_ts, to_ts, granularity)

    @app.get("/v1/api/{api}/stats")
    async def api_stats(
        api: str,
        from_ts: Optional[str] = Query(None, alias="from"),
        to_ts: Optional[str] = Query(None, alias="to"),
        granularity: Optional[str] = Query(None),
    ):
        await directory.get("api", api)
        return await _stats(["api", api], from_ts, to_ts, granularity)

    @app.get("/v1/api/{api}/key/{key}/stats")
    async def api_key_stats(
        api: str,
        key: str,
        from_ts: Optional[str] = Query(None, alias="from"),
        to_ts: Optional[str] = Query(None, alias="to"),
        granularity: Optional[str] = Query(None),
    ):
        await directory.get("api", api)
        await directory.get("key", key)
        return await _stats(["api", api, "key", key], from_ts, to_ts, granularity)

    async def _key_record(key: str) -> Optional[dict]:
        # members whose key record was deleted resolve to null
        try:
            return await directory.get("key", key)
        except EntityNotFound:
            return None

    @app.get("/v1/keyring/{keyring}/keys")
    async def keyring_keys(keyring: str, resolve: Optional[str] = Query(None)):
        keys = await directory.keyring_keys(keyring)
        if resolve is None:
            return envelope(keys, s.api_version)
        records = await asyncio.gather(*(_key_record(k) for k in keys))
        return envelope(dict(zip(keys, records)), s.api_version)

    return app

app = create_app()
