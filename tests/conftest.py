import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault('TEST_MODE', 'true')

from vocab_srs import BufferedAnalyticsSink, CardStore, InMemoryBackend, Scheduler


@pytest.fixture
def t0():
    return datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def sink():
    return BufferedAnalyticsSink()


@pytest.fixture
def store(backend, sink):
    return CardStore(backend, sink=sink)


@pytest.fixture
def scheduler(store, sink):
    return Scheduler(store, sink=sink)


@pytest.fixture
def dumpling(store, t0):
    return store.find_or_create(
        'u1', 'dumpling', '饺子', 'jiǎozi',
        'Made during Chinese New Year, each fold is a wish for prosperity.',
        timestamp=t0,
    )
