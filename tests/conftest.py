"""
Shared fixtures.
"""

import pytest
from fakes import FakeClock, RecordingSleep

from consensus_chat.repositories import InMemorySessionStore


@pytest.fixture
def store():
    """Fresh in-memory session store."""
    return InMemorySessionStore.create()


@pytest.fixture
def clock():
    """Fake clock starting at a fixed timestamp."""
    return FakeClock()


@pytest.fixture
def sleep():
    """Backoff sleep that records delays without waiting."""
    return RecordingSleep()
