from __future__ import annotations
from typing import Optional, Tuple
from gatewaystats.errors import InvalidGranularity

GRANULARITIES: Tuple[str, ...] = ("seconds", "minutes", "hours", "days")

DEFAULT_GRANULARITY = "minutes"

def resolve(requested: Optional[str] = None, default: str = DEFAULT_GRANULARITY) -> str:
    """Return the granularity to query, rejecting anything outside GRANULARITIES."""
    if not requested:
        return default
    if requested not in GRANULARITIES:
        raise InvalidGranularity(requested, GRANULARITIES)
    return requested
