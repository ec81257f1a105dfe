"""
Shared fixtures for taskclock tests.
"""

from datetime import datetime

import pytest

from taskclock.config import reset_config
from taskclock.events import reset_event_bus

# 2025-01-15 is a Wednesday
WEDNESDAY = datetime(2025, 1, 15, 10, 0)


@pytest.fixture
def now() -> datetime:
    return WEDNESDAY


@pytest.fixture(autouse=True)
def _fresh_globals():
    reset_config()
    reset_event_bus()
    yield
    reset_config()
    reset_event_bus()
