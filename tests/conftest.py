"""
mcp-fda Test Configuration
--------------------------
Shared fixtures: a fake clock and a fake urlopen so no test touches the
network or sleeps for real.
"""

import io
import json
import sys
import urllib.error
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.dispatcher import Dispatcher


class FakeClock:
    """Manual clock.  sleep() advances it and records the requested delay."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeResponse:
    """Minimal stand-in for the object urlopen() returns."""

    def __init__(self, body: bytes, status: int = 200, reason: str = "OK"):
        self._body = body
        self.status = status
        self.reason = reason

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeOpener:
    """urlopen replacement that records requests and replays canned results.

    Each queued item is either a FakeResponse or an exception to raise.
    When the queue is empty it answers {"results": []}.
    """

    def __init__(self, clock: FakeClock = None, latency: float = 0.0):
        self.requests = []
        self.issue_times = []
        self.timeouts = []
        self.queue = []
        self._clock = clock
        self._latency = latency

    def push_json(self, data, status: int = 200) -> None:
        self.queue.append(FakeResponse(json.dumps(data).encode("utf-8"), status=status))

    def push(self, item) -> None:
        self.queue.append(item)

    @property
    def urls(self):
        return [r.full_url for r in self.requests]

    def __call__(self, request, timeout=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        if self._clock is not None:
            self.issue_times.append(self._clock())
            self._clock.now += self._latency
        item = self.queue.pop(0) if self.queue else FakeResponse(b'{"results": []}')
        if isinstance(item, BaseException):
            raise item
        return item


def http_error(url: str, code: int, reason: str, body: bytes = b"") -> urllib.error.HTTPError:
    return urllib.error.HTTPError(url, code, reason, None, io.BytesIO(body))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def opener(clock):
    return FakeOpener(clock=clock)


@pytest.fixture
def dispatcher(clock, opener):
    """A Dispatcher with the reference 250ms spacing, fake clock and fake network."""
    return Dispatcher(min_interval=0.25, timeout=15.0, clock=clock, sleep=clock.sleep, opener=opener)
