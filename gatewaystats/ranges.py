from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple
from datetime import date, datetime, timezone, timedelta

@dataclass(frozen=True)
class StatKey:
    category: str
    path_parts: Tuple[str, ...]
    date: str
    response_class: str

    def segments(self) -> List[str]:
        return [self.category, *self.path_parts, self.date, self.response_class]

    def render(self, delimiter: str = ":") -> str:
        return delimiter.join(self.segments())

def _utc_date(ts: datetime) -> date:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).date()

def day_token(d: date) -> str:
    return f"{d.year}-{d.month}-{d.day}"

def parse_day_token(token: str) -> date:
    year, month, day = (int(p) for p in token.split("-"))
    return date(year, month, day)

def whole_days_between(to_ts: datetime, from_ts: datetime) -> int:
    """Number of UTC day boundaries crossed going from ``from_ts`` to ``to_ts``."""
    return (_utc_date(to_ts) - _utc_date(from_ts)).days

def build_keys(category: str, path_parts: Sequence[str], response_class: str,
               from_ts: datetime, to_ts: datetime) -> List[StatKey]:
    days = whole_days_between(to_ts, from_ts)
    if days < 0:
        raise ValueError("from_ts must not be later than to_ts")
    first = _utc_date(from_ts)
    parts = tuple(str(p) for p in path_parts)
    return [
        StatKey(category, parts, day_token(first + timedelta(days=i)), response_class)
        for i in range(days + 1)
    ]
