"""
Shared pytest fixtures and helpers for the sftpsender test suite.
"""

import logging
import pathlib
import sys
import textwrap

import pytest

# Make the project root importable however pytest is invoked.
_PROJECT_ROOT = pathlib.Path(__file__).parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from sftp_sender.config import Config, Credential  # noqa: E402


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def logger():
    """Logger that only propagates to caplog."""
    log = logging.getLogger("sftpsender_tests")
    log.handlers.clear()
    log.setLevel(logging.INFO)
    return log


@pytest.fixture
def numbered_files(tmp_path):
    """Factory that creates prefix<N>suffix files for each N given."""
    def _factory(numbers, prefix="worker", suffix=".txt", directory=None):
        base = directory or tmp_path
        base.mkdir(parents=True, exist_ok=True)
        paths = []
        for n in numbers:
            p = base / f"{prefix}{n}{suffix}"
            p.write_text(f"payload {n}", encoding="utf-8")
            paths.append(p)
        return paths
    return _factory


@pytest.fixture
def config_file_factory(tmp_path):
    """Factory that writes a YAML config file and returns its Path."""
    def _factory(content: str, filename: str = "config.yaml") -> pathlib.Path:
        p = tmp_path / filename
        p.write_text(textwrap.dedent(content), encoding="utf-8")
        return p
    return _factory


@pytest.fixture
def worker_config():
    """In-memory config with worker21..worker27 and one IP-only host."""
    creds = [
        Credential(ip=f"10.0.0.{n}", username="root", password="pw", name=f"worker{n}")
        for n in range(21, 28)
    ]
    creds.append(Credential(ip="192.168.1.1", username="admin", password="pw"))
    return Config(credentials=creds, default_remote_location="/root")


class RecordingTransfer:
    """Transfer double that records calls and fails for chosen hosts."""

    def __init__(self, fail_hosts=()):
        self.fail_hosts = set(fail_hosts)
        self.calls = []

    def __call__(self, file, host, remote_location, display_path):
        self.calls.append((file, host, remote_location, display_path))
        if host in self.fail_hosts:
            raise ConnectionError(f"connection refused by {host}")
        return 0

    # lets the double stand in for SftpSender in run_autosend
    def upload(self, file, host, remote_location=None, display_path=None):
        return self(file, host, remote_location, display_path)


@pytest.fixture
def recording_transfer():
    return RecordingTransfer
