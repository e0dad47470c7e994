"""Shared fixtures for storage widget tests."""
import subprocess

import pytest

from storage_widget.models import RawVolume


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run in the enumerator with canned output.

    Returns a dict the test fills with ``stdout`` / ``stderr`` / ``returncode``;
    executed commands are recorded under ``calls``.
    """
    state = {"stdout": "", "stderr": "", "returncode": 0, "calls": []}

    def run(cmd, capture_output=True, text=False):
        state["calls"].append(cmd)
        return subprocess.CompletedProcess(
            cmd, state["returncode"], stdout=state["stdout"], stderr=state["stderr"]
        )

    monkeypatch.setattr("storage_widget.platform.subprocess.run", run)
    return state


@pytest.fixture
def unnamed_volumes():
    """Two unnamed internal volumes and one unnamed removable one."""
    return [
        RawVolume("/", None, 1_000_000_000_000, 300_000_000_000, is_internal=True),
        RawVolume("/data", "", 2_000_000_000_000, 1_000_000_000_000, is_internal=True),
        RawVolume("/media/usb", None, 64_000_000_000, 32_000_000_000, is_removable=True),
    ]
