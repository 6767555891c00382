from __future__ import annotations
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.duration import parse_duration

NotifyMode = Literal["background", "blocking"]


class WatchConfig(BaseModel):
    """Static settings for one watcher run. Built once at start-up, never mutated."""

    model_config = ConfigDict(frozen=True)

    target_url: str = Field(..., min_length=1)
    interval: float = Field(5.0, gt=0)
    success_status: int = Field(404, ge=100, le=599)
    sound_file: Path
    notify_mode: NotifyMode = "background"
    request_timeout: float = Field(10.0, gt=0)
    shutdown_grace: float = Field(2.0, ge=0)

    @field_validator("target_url")
    @classmethod
    def check_url(cls, v: str) -> str:
        v = v.strip()
        parts = urlparse(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"target_url must be an absolute http(s) URL, got {v!r}")
        return v

    @field_validator("interval", "request_timeout", "shutdown_grace", mode="before")
    @classmethod
    def parse_seconds(cls, v):
        return parse_duration(v)
