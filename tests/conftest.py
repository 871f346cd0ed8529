from __future__ import annotations
import asyncio
from typing import Dict, List, Optional
import pytest
from gatewaystats.errors import EntityNotFound

class FakeStatsStore:
    def __init__(self, data: Optional[Dict[str, Dict[str, str]]] = None, fail_on: Optional[str] = None,
                 delay_on: Optional[str] = None):
        self.data = data or {}
        self.fail_on = fail_on
        self.delay_on = delay_on
        self.batches: List[List[str]] = []
        self.cancelled: List[str] = []

    async def multi_hgetall(self, keys):
        self.batches.append(list(keys))
        if self.delay_on and any(k.endswith(self.delay_on) for k in keys):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                self.cancelled.append(self.delay_on)
                raise
        if self.fail_on and any(k.endswith(self.fail_on) for k in keys):
            raise ConnectionError("connection reset by peer")
        return [dict(self.data.get(k, {})) for k in keys]

class FakeDirectory:
    def __init__(self, records=None, keyrings=None):
        self.records = records or {}
        self.keyrings = keyrings or {}

    async def get(self, entity, identifier):
        record = self.records.get((entity, identifier))
        if record is None:
            raise EntityNotFound(entity, identifier)
        return record

    async def keyring_keys(self, keyring):
        await self.get("keyring", keyring)
        return list(self.keyrings.get(keyring, []))

@pytest.fixture
def store():
    return FakeStatsStore()

@pytest.fixture
def directory():
    return FakeDirectory(
        records={
            ("key", "k1"): {"qps": "2", "qpd": "1000"},
            ("key", "k2"): {"qps": "5", "qpd": "50"},
            ("keyring", "ring"): {"createdAt": "1704067200"},
            ("api", "weather"): {"endPoint": "api.example.com"},
        },
        keyrings={"ring": ["k1", "k2"]},
    )
