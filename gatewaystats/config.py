from __future__ import annotations
import os
from typing import Tuple
from pydantic import BaseModel, field_validator

def _csv(value: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())

class Settings(BaseModel):
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    key_delimiter: str = os.getenv("GWS_KEY_DELIMITER", ":")

    default_range_seconds: int = int(os.getenv("GWS_DEFAULT_RANGE_SECONDS", "600"))
    default_granularity: str = os.getenv("GWS_DEFAULT_GRANULARITY", "minutes")
    response_classes: Tuple[str, ...] = _csv(os.getenv("GWS_RESPONSE_CLASSES", "uncached,cached,error"))

    api_version: str = os.getenv("GWS_API_VERSION", "1.0.0")
    log_level: str = os.getenv("GWS_LOG_LEVEL", "INFO")

    @field_validator("response_classes", mode="before")
    @classmethod
    def _split_classes(cls, v):
        if isinstance(v, str):
            return _csv(v)
        return v

settings = Settings()
