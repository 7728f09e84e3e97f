"""
Pytest configuration for the mediaprovider test suite.

Makes the src directory importable without installing the package and
provides fixtures shared by the Subsonic and Jellyfin tests.
"""
import sys
from pathlib import Path

import pytest

src_dir = Path(__file__).parent.parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from mediaprovider.cache import TimedCache  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def genre_cache(clock: FakeClock) -> TimedCache:
    """Genre cache driven by the fake clock."""
    return TimedCache(ttl_seconds=60, clock=clock)
