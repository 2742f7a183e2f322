"""Runtime configuration helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

METRIC_SOURCES = ("system", "mock")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    metric_source: str = "system"
    log_lines: int = 15
    disk_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.metric_source not in METRIC_SOURCES:
            raise ValueError(
                f"Unknown metric source {self.metric_source!r}; expected one of {', '.join(METRIC_SOURCES)}"
            )
        if not 0 < self.port < 65536:
            raise ValueError(f"Port out of range: {self.port}")
        if self.log_lines < 0:
            raise ValueError("log_lines must not be negative")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    host = os.getenv("DASHBOARD_HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    log_level = os.getenv("DASHBOARD_LOG_LEVEL", "info").lower()
    metric_source = os.getenv("DASHBOARD_METRIC_SOURCE", "system").lower()
    log_lines = int(os.getenv("DASHBOARD_LOG_LINES", "15"))
    disk_path = os.getenv("DASHBOARD_DISK_PATH") or None
    return Settings(
        host=host,
        port=port,
        log_level=log_level,
        metric_source=metric_source,
        log_lines=log_lines,
        disk_path=disk_path,
    )
