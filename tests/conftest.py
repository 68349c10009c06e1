import pytest

from idlease import Allocator, FixedClock
from idlease.server import create_app

START_MS = 1_700_000_000_000
TIMEOUT_MS = 2000


@pytest.fixture
def clock():
    return FixedClock(START_MS)


@pytest.fixture
def allocator(clock):
    return Allocator(min_id=1, max_id=3, timeout_ms=TIMEOUT_MS, clock=clock)


@pytest.fixture
def client(allocator):
    app = create_app(allocator)
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
