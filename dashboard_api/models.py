"""Sample types produced by the metric sources."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict

_GIB = 1024 ** 3


@dataclass(frozen=True)
class CpuSample:
    usage_percent: float


@dataclass(frozen=True)
class MemorySample:
    usage_percent: int
    used_bytes: float
    total_bytes: float

    @property
    def used_gb(self) -> float:
        return round(self.used_bytes / _GIB, 2)

    @property
    def total_gb(self) -> float:
        return round(self.total_bytes / _GIB, 2)


@dataclass(frozen=True)
class FilesystemUsage:
    fs: str
    mount: str
    use: float

    def to_dict(self) -> Dict[str, Any]:
        return {"fs": self.fs, "mount": self.mount, "use": self.use}


@dataclass(frozen=True)
class NetworkSample:
    """Upload and download throughput in MB/s."""

    upload: float
    download: float
    timestamp: dt.datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "upload": self.upload,
            "download": self.download,
        }


@dataclass(frozen=True)
class HttpStatusCounts:
    status200: int = 0
    status400: int = 0
    status500: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "status200": self.status200,
            "status400": self.status400,
            "status500": self.status500,
        }


@dataclass(frozen=True)
class ProcessInfo:
    """One row of the process table; cpu/mem are pre-formatted strings."""

    name: str
    pid: int
    cpu_percent: str
    mem_percent: str
    status: str


@dataclass(frozen=True)
class LogLine:
    timestamp: dt.datetime
    level: str
    message: str

    def render(self) -> str:
        local = self.timestamp.astimezone()
        return f"[{local.strftime('%H:%M:%S')}] [{self.level}] {self.message}"
