from __future__ import annotations
from typing import Any, Optional, Union
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from gatewaystats.errors import InvalidTimeRange

Timestamp = Union[int, str, None]

# 9999-12-31T23:59:59Z
MAX_TIMESTAMP = 253402300799

class TimeRange(BaseModel):
    """Inclusive query range in epoch seconds."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: int = Field(alias="from", ge=0, le=MAX_TIMESTAMP)
    to: int = Field(ge=0, le=MAX_TIMESTAMP)

    @model_validator(mode="after")
    def _ordered(self):
        if self.from_ > self.to:
            raise ValueError("'from' must not be later than 'to'")
        return self

    @property
    def start(self) -> datetime:
        return datetime.fromtimestamp(self.from_, tz=timezone.utc)

    @property
    def end(self) -> datetime:
        return datetime.fromtimestamp(self.to, tz=timezone.utc)

    @classmethod
    def parse(cls, from_ts: Timestamp, to_ts: Timestamp, now: int, default_range_seconds: int) -> "TimeRange":
        if to_ts is None or to_ts == "":
            to_ts = now
        if from_ts is None or from_ts == "":
            from_ts = now - default_range_seconds
        try:
            return cls.model_validate({"from": from_ts, "to": to_ts})
        except ValidationError as e:
            reason = "; ".join(err["msg"] for err in e.errors())
            raise InvalidTimeRange(reason, from_ts, to_ts) from e

class Meta(BaseModel):
    version: str
    status_code: int

class Envelope(BaseModel):
    meta: Meta
    results: Any = None

def envelope(results: Any, version: str, status_code: int = 200, error: Optional[dict] = None) -> dict:
    if error is not None:
        results = {"error": error}
    return Envelope(meta=Meta(version=version, status_code=status_code), results=results).model_dump()
