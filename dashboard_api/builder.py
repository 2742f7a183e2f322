"""Assemble endpoint payloads from metric sources and dashboard state."""
from __future__ import annotations

import datetime as dt
import logging
import random
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .metrics import MetricSource, generate_logs
from .state import DashboardState

T = TypeVar("T")

API_NAME = "System Dashboard API"
API_VERSION = "1.0.0"
ENDPOINTS = {
    "status": "/api/status",
    "network": "/api/network",
    "networkHistory": "/api/network/history",
    "http": "/api/http",
    "connections": "/api/connections",
    "processes": "/api/processes",
    "logs": "/api/logs",
    "custom": "/api/custom",
    "health": "/health",
}


class SamplerError(RuntimeError):
    """Raised when a metric source fails while building a response."""


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ResponseBuilder:
    def __init__(
        self,
        source: MetricSource,
        state: Optional[DashboardState] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], dt.datetime] = _utcnow,
        log_lines: int = 15,
    ) -> None:
        self.source = source
        self.state = state or DashboardState()
        self._rng = rng or random.Random()
        self._clock = clock
        self.log_lines = log_lines

    def _sample(self, what: str, sampler: Callable[[], T]) -> T:
        try:
            return sampler()
        except Exception as exc:  # pylint: disable=broad-except
            logging.exception("Sampling %s from %s source failed", what, self.source.name)
            raise SamplerError(str(exc) or exc.__class__.__name__) from exc

    def status(self) -> Dict[str, Any]:
        cpu = self._sample("cpu", self.source.cpu)
        memory = self._sample("memory", self.source.memory)
        disk = self._sample("disk", self.source.disk)
        filesystems = self._sample("filesystems", self.source.filesystems)
        uptime = self._sample("uptime", self.source.uptime)
        return {
            "cpu": cpu.usage_percent,
            "ram": memory.usage_percent,
            "ramUsed": memory.used_gb,
            "ramTotal": memory.total_gb,
            "disk": disk,
            "filesystems": [fs.to_dict() for fs in filesystems],
            "uptime": uptime,
        }

    def network(self) -> Dict[str, float]:
        sample = self._sample("network", self.source.network)
        self.state.network_history.record(sample)
        return {"upload": sample.upload, "download": sample.download}

    def network_history(self) -> List[Dict[str, Any]]:
        return [sample.to_dict() for sample in self.state.network_history.samples()]

    def http(self) -> Dict[str, int]:
        return self.state.http_counters.bump().to_dict()

    def connections(self) -> Dict[str, Any]:
        active = self._sample("connections", self.source.connections)
        processes = self._sample("processes", self.source.processes)
        return {
            "active": active,
            "processes": [
                {"name": proc.name, "pid": proc.pid, "cpu": proc.cpu_percent, "ram": proc.mem_percent, "status": proc.status}
                for proc in processes
            ],
        }

    def processes(self) -> List[Dict[str, Any]]:
        processes = self._sample("processes", self.source.processes)
        return [
            {"name": proc.name, "pid": proc.pid, "cpu": proc.cpu_percent, "mem": proc.mem_percent, "status": proc.status}
            for proc in processes
        ]

    def logs(self) -> List[str]:
        return [line.render() for line in generate_logs(self._rng, self._clock(), self.log_lines)]

    def custom(self) -> Dict[str, Any]:
        return self._sample("custom", self.source.custom)

    def health(self) -> Dict[str, str]:
        return {"status": "ok", "timestamp": self._clock().isoformat()}

    def index(self) -> Dict[str, Any]:
        return {
            "message": API_NAME,
            "version": API_VERSION,
            "source": self.source.name,
            "endpoints": dict(ENDPOINTS),
        }
