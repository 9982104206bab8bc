"""Shared pytest fixtures for portfolio tracker tests."""

import pytest

from helpers import SleepRecorder
from portfolio_tracker.models.records import Quote


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def aapl_quote():
    return Quote(price=200.0, previous_close=195.0)
