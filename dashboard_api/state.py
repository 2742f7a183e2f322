"""Process-wide dashboard state: network history and HTTP status counters."""
from __future__ import annotations

import math
import random
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from .models import HttpStatusCounts, NetworkSample

NETWORK_HISTORY_CAPACITY = 20


class NetworkHistory:
    """Fixed-capacity FIFO of recent network samples; oldest entries drop first."""

    def __init__(self, capacity: int = NETWORK_HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._samples: Deque[NetworkSample] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(self, sample: NetworkSample) -> None:
        with self._lock:
            self._samples.append(sample)

    def samples(self) -> List[NetworkSample]:
        with self._lock:
            return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)


class HttpStatusCounters:
    """Running totals of simulated 2xx/4xx/5xx responses.

    Each :meth:`bump` adds a random non-negative delta per bucket, so the
    totals never decrease for the life of the process.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._counts = HttpStatusCounts()
        self._lock = threading.Lock()

    def _delta(self, low: int, high: int) -> int:
        return low + math.floor(self._rng.random() * (high - low))

    def bump(self) -> HttpStatusCounts:
        with self._lock:
            self._counts = HttpStatusCounts(
                status200=self._counts.status200 + self._delta(100, 150),
                status400=self._counts.status400 + self._delta(2, 12),
                status500=self._counts.status500 + self._delta(1, 6),
            )
            return self._counts

    def snapshot(self) -> HttpStatusCounts:
        return self._counts


@dataclass
class DashboardState:
    network_history: NetworkHistory = field(default_factory=NetworkHistory)
    http_counters: HttpStatusCounters = field(default_factory=HttpStatusCounters)
