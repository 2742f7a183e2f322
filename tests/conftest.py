"""Shared fixtures for the dashboard API tests."""
import datetime as dt
import random

import pytest
from fastapi.testclient import TestClient

from dashboard_api.api import create_app
from dashboard_api.builder import ResponseBuilder
from dashboard_api.config import Settings
from dashboard_api.metrics import MockMetricSource
from dashboard_api.state import DashboardState, HttpStatusCounters

FIXED_NOW = dt.datetime(2024, 5, 1, 12, 30, 0, tzinfo=dt.timezone.utc)


def local_clock(moment: dt.datetime) -> str:
    """Host-local ``HH:MM:SS`` rendering used by log lines."""
    return moment.astimezone().strftime("%H:%M:%S")


class FixedRandom(random.Random):
    """Random source that replays a fixed sequence from ``random()``."""

    def __init__(self, *values: float) -> None:
        super().__init__(0)
        self._values = list(values) or [0.0]
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


class FailingSource(MockMetricSource):
    """Mock source whose samplers blow up, as if the host were unreadable."""

    def cpu(self):
        raise RuntimeError("sensor offline")

    def network(self):
        raise OSError("interface vanished")

    def processes(self):
        raise RuntimeError("process table unavailable")


@pytest.fixture
def settings():
    return Settings(metric_source="mock")


@pytest.fixture
def builder():
    rng = random.Random(42)
    state = DashboardState(http_counters=HttpStatusCounters(random.Random(7)))
    return ResponseBuilder(MockMetricSource(rng), state, rng=rng, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(settings, builder):
    with TestClient(create_app(settings, builder)) as test_client:
        yield test_client


@pytest.fixture
def failing_client(settings):
    builder = ResponseBuilder(FailingSource(random.Random(1)), clock=lambda: FIXED_NOW)
    with TestClient(create_app(settings, builder)) as test_client:
        yield test_client
