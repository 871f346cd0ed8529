from __future__ import annotations
import argparse, asyncio, logging, sys, time
import orjson
import uvicorn
from gatewaystats import granularity as gran
from gatewaystats.config import settings, Settings
from gatewaystats.directory import ENTITIES, RedisEntityDirectory
from gatewaystats.errors import StatsError
from gatewaystats.schemas import TimeRange, envelope
from gatewaystats.stats import StatsAggregator
from gatewaystats.store import RedisStatsStore

logger = logging.getLogger("gatewaystats")

async def query_stats(s: Settings, entity: str, identifier: str, from_ts, to_ts, granularity) -> dict:
    g = gran.resolve(granularity, default=gran.resolve(s.default_granularity))
    store = RedisStatsStore.from_url(s.redis_url)
    try:
        directory = RedisEntityDirectory(store.r, s.key_delimiter)
        await directory.get(entity, identifier)
        tr = TimeRange.parse(from_ts, to_ts, now=int(time.time()), default_range_seconds=s.default_range_seconds)
        aggregator = StatsAggregator(store, s.response_classes, s.key_delimiter)
        results = await aggregator.run("stats", [entity, identifier], tr, g)
        return envelope(results, s.api_version)
    finally:
        await store.close()

def cmd_stats(args) -> int:
    s = settings.model_copy(update={"redis_url": args.redis_url})
    try:
        body = asyncio.run(query_stats(s, args.entity, args.id, args.from_ts, args.to_ts, args.granularity))
        code = 0
    except StatsError as e:
        logger.error("%s", e.message)
        body = envelope(None, s.api_version, status_code=e.status_code, error=e.to_dict())
        code = 1
    sys.stdout.write(orjson.dumps(body, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")
    return code

def cmd_api(args) -> int:
    uvicorn.run("gatewaystats.api:app", host=args.host, port=args.port, reload=False)
    return 0

def main(argv=None) -> int:
    p = argparse.ArgumentParser(prog="gws")
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="cmd", required=True)

    a = sub.add_parser("api")
    a.add_argument("--host", default="0.0.0.0")
    a.add_argument("--port", type=int, default=8000)
    a.set_defaults(fn=cmd_api)

    st = sub.add_parser("stats")
    st.add_argument("entity", choices=ENTITIES)
    st.add_argument("id")
    st.add_argument("--from", dest="from_ts", default=None)
    st.add_argument("--to", dest="to_ts", default=None)
    st.add_argument("--granularity", default=None, help=f"one of: {', '.join(gran.GRANULARITIES)}")
    st.add_argument("--redis-url", default=settings.redis_url)
    st.set_defaults(fn=cmd_stats)

    args = p.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return args.fn(args)

if __name__ == "__main__":
    sys.exit(main())
