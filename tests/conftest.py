import sys
from pathlib import Path

# Ensure top-level modules import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from simclock import SimClock


class FakeTime:
    """Manual time source; sleep() advances it instead of blocking."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def fake_clock(fake_time) -> SimClock:
    clock = SimClock(time_source=fake_time)
    clock.start()
    return clock


@pytest.fixture
def started_clock() -> SimClock:
    clock = SimClock()
    clock.start()
    return clock


def no_sleep(_seconds: float) -> None:
    return None
