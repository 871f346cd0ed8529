import asyncio
import pytest
import redis
from gatewaystats.errors import StorageFailure
from gatewaystats.ranges import StatKey
from gatewaystats.store import RedisStatsStore, fetch
from conftest import FakeStatsStore

class FakePipeline:
    def __init__(self, client, transaction):
        self.client = client
        self.transaction = transaction
        self.queued = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def hgetall(self, key):
        self.queued.append(key)
        return self

    async def execute(self):
        self.client.executed.append((self.transaction, list(self.queued)))
        if self.client.error:
            raise self.client.error
        return [self.client.hashes.get(k, {}) for k in self.queued]

class FakeRedis:
    def __init__(self, hashes=None, error=None):
        self.hashes = hashes or {}
        self.error = error
        self.executed = []

    def pipeline(self, transaction=True):
        return FakePipeline(self, transaction)

def _keys(*dates):
    return [StatKey("stats", ("key", "k1", "minutes"), d, "cached") for d in dates]

def test_redis_store_issues_one_transaction_in_key_order():
    client = FakeRedis({"stats:key:k1:minutes:2024-1-2:cached": {"1704153600": "7"}})
    store = RedisStatsStore(client)
    buckets = asyncio.run(fetch(store, _keys("2024-1-1", "2024-1-2", "2024-1-3")))
    assert buckets == [{}, {"1704153600": "7"}, {}]
    assert client.executed == [(True, [
        "stats:key:k1:minutes:2024-1-1:cached",
        "stats:key:k1:minutes:2024-1-2:cached",
        "stats:key:k1:minutes:2024-1-3:cached",
    ])]

def test_redis_errors_become_storage_failures():
    store = RedisStatsStore(FakeRedis(error=redis.ConnectionError("down")))
    with pytest.raises(StorageFailure) as ei:
        asyncio.run(fetch(store, _keys("2024-1-1")))
    assert isinstance(ei.value.cause, redis.ConnectionError)
    assert ei.value.to_dict()["cause"] == "ConnectionError"

def test_fetch_wraps_arbitrary_store_errors():
    with pytest.raises(StorageFailure) as ei:
        asyncio.run(fetch(FakeStatsStore(fail_on="cached"), _keys("2024-1-1")))
    assert isinstance(ei.value.__cause__, ConnectionError)

def test_fetch_rejects_short_batches():
    class ShortStore:
        async def multi_hgetall(self, keys):
            return [{}]

    with pytest.raises(StorageFailure):
        asyncio.run(fetch(ShortStore(), _keys("2024-1-1", "2024-1-2")))
