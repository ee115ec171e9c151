"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest

from lxc_driver.driver import LXCDriver
from lxc_driver.executor import CommandOutput


@pytest.fixture
def mock_executor():
    """Create a mock executor returning empty output."""
    executor = MagicMock()
    executor.run.return_value = ""
    return executor


@pytest.fixture
def driver(mock_executor):
    """Create a driver with no container bound."""
    return LXCDriver(mock_executor)


@pytest.fixture
def container_driver(mock_executor):
    """Create a driver bound to a container."""
    return LXCDriver(mock_executor, "a-container", transition_timeout=5.0, poll_interval=0.1)


@pytest.fixture
def attach_help_with_namespaces():
    """lxc-attach help output advertising --namespaces."""
    return CommandOutput(stdout="", stderr="--namespaces")


@pytest.fixture
def fake_clock(monkeypatch):
    """Replace time.monotonic and time.sleep with a controllable clock."""
    import time

    class FakeClock:
        def __init__(self):
            self.now = 0.0
            self.sleeps = []

        def monotonic(self):
            return self.now

        def sleep(self, seconds):
            self.sleeps.append(seconds)
            self.now += seconds

    clock = FakeClock()
    monkeypatch.setattr(time, "monotonic", clock.monotonic)
    monkeypatch.setattr(time, "sleep", clock.sleep)
    return clock


@pytest.fixture
def completed_process():
    """Factory for subprocess.CompletedProcess-like results."""

    def make(returncode=0, stdout="", stderr=""):
        result = MagicMock()
        result.returncode = returncode
        result.stdout = stdout
        result.stderr = stderr
        return result

    return make
