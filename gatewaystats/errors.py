"""Error types surfaced by stats queries.

Every error carries a ``kind`` tag and an HTTP status so the API layer can
render it without inspecting messages.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Sequence, Tuple


class StatsError(Exception):
    kind: str = "StatsError"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def context(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "message": self.message, **self.context()}


class InvalidGranularity(StatsError):
    kind = "InvalidGranularity"
    status_code = 400

    def __init__(self, requested: str, valid: Sequence[str]):
        self.requested = requested
        self.valid: Tuple[str, ...] = tuple(valid)
        super().__init__(f"Invalid granularity '{requested}'. Valid options are: {', '.join(self.valid)}")

    def context(self) -> Dict[str, Any]:
        return {"requested": self.requested, "valid": list(self.valid)}


class InvalidTimeRange(StatsError):
    kind = "InvalidTimeRange"
    status_code = 400

    def __init__(self, reason: str, from_ts: Any = None, to_ts: Any = None):
        self.reason = reason
        self.from_ts = from_ts
        self.to_ts = to_ts
        super().__init__(f"Invalid time range: {reason}")

    def context(self) -> Dict[str, Any]:
        return {"from": self.from_ts, "to": self.to_ts}


class StorageFailure(StatsError):
    kind = "StorageFailure"
    status_code = 500

    def __init__(self, cause: BaseException, message: Optional[str] = None):
        self.cause = cause
        super().__init__(message or f"Storage read failed: {cause}")

    def context(self) -> Dict[str, Any]:
        return {"cause": type(self.cause).__name__}


class EntityNotFound(StatsError):
    kind = "EntityNotFound"
    status_code = 404

    def __init__(self, entity: str, identifier: str):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found.")

    def context(self) -> Dict[str, Any]:
        return {"entity": self.entity, "identifier": self.identifier}
