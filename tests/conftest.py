"""Shared fixtures."""
import time

import pytest


@pytest.fixture
def utc_host(monkeypatch):
    """Run the test on a host whose local zone is UTC, as on Lambda."""
    if not hasattr(time, 'tzset'):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv('TZ', 'UTC')
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
