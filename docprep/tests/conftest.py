from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("DOCPREP_CACHE_SWEEP_ENABLED", "false")
os.environ.setdefault("DOCPREP_METRICS_ENABLED", "true")
os.environ.pop("DOCPREP_STOP_WORDS", None)
os.environ.pop("DOCPREP_FINANCIAL_TERMS", None)
os.environ.pop("DOCPREP_MARKET_TERMS", None)


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
