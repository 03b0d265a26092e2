"""
Pytest configuration and shared fixtures for PrintDesk tests.
"""
import os
import tempfile
from pathlib import Path

import pytest

# Keep the module-level settings (and the server's shared app) away from
# the user's real log directory.
os.environ.setdefault("PRINTDESK_LOG_DIR", tempfile.mkdtemp(prefix="printdesk-logs-"))
os.environ.setdefault("PRINTDESK_TEMP_DIR", tempfile.mkdtemp(prefix="printdesk-tmp-"))

from runtime.notifications import RecordingSink  # noqa: E402
from runtime.store.log_store import LogStore  # noqa: E402


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def log_store(log_dir, clock):
    return LogStore(log_dir=str(log_dir), env="test", clock=clock)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def tool_dir(tmp_path):
    """A directory holding a fake SumatraPDF binary."""
    directory = tmp_path / "resources"
    directory.mkdir()
    (directory / "SumatraPDF-3.5.2-64.exe").write_bytes(b"MZ")
    return directory
