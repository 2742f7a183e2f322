"""Metric samplers backing the dashboard endpoints.

Two interchangeable sources implement :class:`MetricSource`:

* :class:`SystemMetricSource` reads the host through psutil.
* :class:`MockMetricSource` synthesizes plausible readings from a random
  source; every value is derived from ``rng.random()`` so tests can pass a
  deterministic generator.

Log lines are always synthetic and come from :func:`generate_logs`.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
import os
import random
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import psutil

from .models import CpuSample, FilesystemUsage, LogLine, MemorySample, NetworkSample, ProcessInfo

LOG_LEVELS = ("INFO", "WARN", "ERROR", "DEBUG")
LOG_MESSAGES = (
    "Server started successfully on port 3000",
    "Database connection established",
    "API request completed in 45ms",
    "Cache hit ratio: 87%",
    "Memory usage within normal range",
    "New client connected from 192.168.1.45",
    "Scheduled backup completed",
    "SSL certificate valid for 89 days",
    "Rate limit threshold reached for IP 10.0.0.23",
    "Authentication successful for user: admin",
)

# name, pid, (cpu low, cpu high), (mem low, mem high)
MOCK_PROCESSES: Tuple[Tuple[str, int, Tuple[float, float], Tuple[float, float]], ...] = (
    ("node", 1234, (10.0, 40.0), (5.0, 25.0)),
    ("nginx", 5678, (5.0, 25.0), (3.0, 18.0)),
    ("postgres", 9012, (8.0, 33.0), (10.0, 40.0)),
    ("redis", 3456, (3.0, 18.0), (2.0, 12.0)),
    ("docker", 7890, (5.0, 25.0), (8.0, 33.0)),
)

TOP_PROCESS_LIMIT = 5
# Linux already counts guest time inside user and nice.
GUEST_TICK_FIELDS = frozenset({"guest", "guest_nice"})
_MIB = 1024 * 1024


def _as_dict(stats_obj: Any) -> Dict[str, Any]:
    """Normalize psutil namedtuple output to plain dicts."""
    if hasattr(stats_obj, "_asdict"):
        return dict(stats_obj._asdict())
    return dict(stats_obj)


def _uniform(rng: random.Random, low: float, high: float) -> float:
    return low + rng.random() * (high - low)


def _randint(rng: random.Random, low: int, high: int) -> int:
    """Integer in ``[low, high)``."""
    return low + math.floor(rng.random() * (high - low))


def _clamp_percent(value: float) -> float:
    return min(max(value, 0), 100)


def cpu_usage_from_times(times: Iterable[Any]) -> CpuSample:
    """Compute busy percentage from per-core tick counters.

    Each entry holds cumulative tick durations by type (``idle`` among them),
    either as a mapping or a psutil ``scputimes`` tuple.
    """
    cores = [_as_dict(entry) for entry in times]
    if not cores:
        return CpuSample(usage_percent=0)

    total_idle = sum(core.get("idle", 0) for core in cores)
    total_tick = sum(
        sum(ticks for field, ticks in core.items() if field not in GUEST_TICK_FIELDS) for core in cores
    )
    idle = total_idle / len(cores)
    total = total_tick / len(cores)
    if total <= 0:
        return CpuSample(usage_percent=0)

    usage = 100 - math.floor(idle / total * 100)
    return CpuSample(usage_percent=_clamp_percent(usage))


def memory_sample(total: float, available: float) -> MemorySample:
    used = max(0.0, total - available)
    used = min(used, total)
    usage = math.floor(used / total * 100) if total > 0 else 0
    return MemorySample(usage_percent=int(_clamp_percent(usage)), used_bytes=used, total_bytes=total)


def format_uptime(seconds: float) -> str:
    """Render seconds as ``"Xd Yh Zm"``; partial minutes are dropped."""
    seconds = int(max(0, seconds))
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, _ = divmod(remainder, 60)
    return f"{days}d {hours}h {minutes}m"


def top_processes(entries: Iterable[Mapping[str, Any]], limit: int = TOP_PROCESS_LIMIT) -> List[ProcessInfo]:
    """Pick the busiest processes, keeping listing order between equal cpu values."""
    ranked = sorted(entries, key=lambda entry: entry.get("cpu_percent") or 0.0, reverse=True)
    return [
        ProcessInfo(
            name=entry.get("name") or "",
            pid=entry["pid"],
            cpu_percent=f"{entry.get('cpu_percent') or 0.0:.2f}",
            mem_percent=f"{entry.get('memory_percent') or 0.0:.2f}",
            status=entry.get("status") or "unknown",
        )
        for entry in ranked[:limit]
    ]


def generate_logs(rng: random.Random, now: dt.datetime, count: int = 15) -> List[LogLine]:
    """Fabricate ``count`` log lines, one simulated minute apart, newest first."""
    lines = []
    for index in range(count):
        level = LOG_LEVELS[math.floor(rng.random() * len(LOG_LEVELS))]
        message = LOG_MESSAGES[math.floor(rng.random() * len(LOG_MESSAGES))]
        lines.append(LogLine(timestamp=now - dt.timedelta(minutes=index), level=level, message=message))
    return lines


class MetricSource:
    """Capability interface for everything the dashboard samples."""

    name = "abstract"

    def cpu(self) -> CpuSample:
        raise NotImplementedError

    def memory(self) -> MemorySample:
        raise NotImplementedError

    def disk(self) -> float:
        raise NotImplementedError

    def filesystems(self) -> List[FilesystemUsage]:
        raise NotImplementedError

    def uptime(self) -> str:
        raise NotImplementedError

    def network(self) -> NetworkSample:
        raise NotImplementedError

    def processes(self) -> List[ProcessInfo]:
        raise NotImplementedError

    def connections(self) -> int:
        raise NotImplementedError

    def custom(self) -> Dict[str, Any]:
        raise NotImplementedError


class MockMetricSource(MetricSource):
    name = "mock"
    memory_total = 16 * 1024 ** 3

    def __init__(self, rng: Optional[random.Random] = None, started_at: Optional[float] = None) -> None:
        self._rng = rng or random.Random()
        self._started_at = time.time() if started_at is None else started_at

    def cpu(self) -> CpuSample:
        return CpuSample(usage_percent=_randint(self._rng, 5, 95))

    def memory(self) -> MemorySample:
        fraction = _uniform(self._rng, 0.3, 0.9)
        return memory_sample(self.memory_total, self.memory_total * (1 - fraction))

    def disk(self) -> float:
        return _randint(self._rng, 50, 80)

    def filesystems(self) -> List[FilesystemUsage]:
        return [FilesystemUsage(fs="/dev/sda1", mount="/", use=round(_uniform(self._rng, 50, 80), 2))]

    def uptime(self) -> str:
        return format_uptime(time.time() - self._started_at)

    def network(self) -> NetworkSample:
        return NetworkSample(
            upload=round(_uniform(self._rng, 1, 6), 2),
            download=round(_uniform(self._rng, 2, 12), 2),
            timestamp=dt.datetime.now(dt.timezone.utc),
        )

    def processes(self) -> List[ProcessInfo]:
        return [
            ProcessInfo(
                name=name,
                pid=pid,
                cpu_percent=f"{_uniform(self._rng, *cpu_range):.1f}",
                mem_percent=f"{_uniform(self._rng, *mem_range):.1f}",
                status="running",
            )
            for name, pid, cpu_range, mem_range in MOCK_PROCESSES
        ]

    def connections(self) -> int:
        return _randint(self._rng, 20, 70)

    def custom(self) -> Dict[str, Any]:
        players = _randint(self._rng, 0, 20)
        bot_status = "online" if self._rng.random() < 0.9 else "offline"
        return {"minecraftPlayers": players, "botStatus": bot_status}


def _resolve_root_path(configured: Optional[str] = None) -> Path:
    if configured:
        return Path(configured).expanduser().resolve()
    if os.name == "nt":
        return Path(os.getenv("SystemDrive", "C:\\"))
    return Path("/")


class SystemMetricSource(MetricSource):
    name = "system"
    process_attrs = ["pid", "name", "cpu_percent", "memory_percent", "status"]

    def __init__(self, disk_path: Optional[str] = None, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._root_path = _resolve_root_path(disk_path)
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._last_net_io: Optional[Dict[str, Any]] = None
        self._last_net_time: Optional[float] = None

    def cpu(self) -> CpuSample:
        return cpu_usage_from_times(psutil.cpu_times(percpu=True))

    def memory(self) -> MemorySample:
        memory = psutil.virtual_memory()
        return memory_sample(memory.total, memory.available)

    def disk(self) -> float:
        return round(psutil.disk_usage(str(self._root_path)).percent, 2)

    def filesystems(self) -> List[FilesystemUsage]:
        usages = []
        for partition in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError as exc:
                logging.debug("Skipping filesystem %s: %s", partition.mountpoint, exc)
                continue
            use = usage.used / usage.total * 100 if usage.total else 0.0
            usages.append(FilesystemUsage(fs=partition.device, mount=partition.mountpoint, use=round(use, 2)))
        return usages

    def uptime(self) -> str:
        return format_uptime(time.time() - psutil.boot_time())

    def network(self) -> NetworkSample:
        with self._lock:
            net_io = _as_dict(psutil.net_io_counters())
            now = self._monotonic()
            upload = download = 0.0
            if self._last_net_io is not None and self._last_net_time is not None:
                elapsed = max(1e-6, now - self._last_net_time)
                sent = net_io.get("bytes_sent", 0) - self._last_net_io.get("bytes_sent", 0)
                recv = net_io.get("bytes_recv", 0) - self._last_net_io.get("bytes_recv", 0)
                upload = max(0.0, sent / elapsed) / _MIB
                download = max(0.0, recv / elapsed) / _MIB
            self._last_net_io = net_io
            self._last_net_time = now
        return NetworkSample(
            upload=round(upload, 2),
            download=round(download, 2),
            timestamp=dt.datetime.now(dt.timezone.utc),
        )

    def _process_table(self) -> Sequence[Mapping[str, Any]]:
        table = []
        for proc in psutil.process_iter(attrs=self.process_attrs):
            try:
                table.append(dict(proc.info))
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return table

    def processes(self) -> List[ProcessInfo]:
        return top_processes(self._process_table())

    def connections(self) -> int:
        return len(psutil.net_connections(kind="inet"))

    def custom(self) -> Dict[str, Any]:
        return {"minecraftPlayers": 0, "botStatus": "unknown"}


def create_source(metric_source: str, disk_path: Optional[str] = None, rng: Optional[random.Random] = None) -> MetricSource:
    if metric_source == "system":
        return SystemMetricSource(disk_path=disk_path)
    if metric_source == "mock":
        return MockMetricSource(rng=rng)
    raise ValueError(f"Unknown metric source: {metric_source}")
