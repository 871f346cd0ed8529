from __future__ import annotations
import asyncio, logging
from typing import Dict, List, Sequence
from gatewaystats.merge import Bucket, merge
from gatewaystats.ranges import build_keys
from gatewaystats.schemas import TimeRange
from gatewaystats.store import StatsStore, fetch

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_CLASSES = ("uncached", "cached", "error")

class StatsAggregator:
    """Fans a stats query out over response classes and folds each into one mapping.

    Each response class is fetched in its own task. The first failing task
    cancels the rest and its error is raised; no partial result is returned.
    """

    def __init__(self, store: StatsStore, response_classes: Sequence[str] = DEFAULT_RESPONSE_CLASSES,
                 delimiter: str = ":"):
        if not response_classes:
            raise ValueError("at least one response class is required")
        self.store = store
        self.response_classes = tuple(dict.fromkeys(response_classes))
        self.delimiter = delimiter

    async def _one(self, category: str, path_parts: List[str], response_class: str,
                   time_range: TimeRange) -> Bucket:
        keys = build_keys(category, path_parts, response_class, time_range.start, time_range.end)
        logger.debug("querying %d day keys for %s", len(keys), keys[0].render(self.delimiter))
        buckets = await fetch(self.store, keys, self.delimiter)
        return merge(buckets, len(keys))[0]

    async def run(self, category: str, path_parts: Sequence[str], time_range: TimeRange,
                  granularity: str) -> Dict[str, Bucket]:
        parts = [*path_parts, granularity]
        tasks = {
            rc: asyncio.create_task(self._one(category, parts, rc, time_range), name=f"stats:{rc}")
            for rc in self.response_classes
        }
        try:
            done, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for t in tasks.values():
                t.cancel()
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        failed = [rc for rc, t in tasks.items() if t in done and not t.cancelled() and t.exception()]
        if failed:
            for t in pending:
                t.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            # retrieve sibling exceptions so they are not reported as unhandled
            for rc in failed[1:]:
                tasks[rc].exception()
            first = failed[0]
            logger.warning("stats query for %s failed on %s", ":".join([category, *parts]), first)
            raise tasks[first].exception()

        return {rc: tasks[rc].result() for rc in self.response_classes}
