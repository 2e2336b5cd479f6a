"""
Shared fixtures for the Sentinels Map tests.
"""

import pytest

from logic.config import BACKEND_LOCAL, BACKEND_REMOTE, Settings, get_base_dataset
from logic.store import IdSource, MarkerStore


class FakeClock:
    """Clock returning a fixed time in seconds, advanced by hand."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MarkerStore(get_base_dataset(), id_source=IdSource(clock))


@pytest.fixture
def remote_settings(tmp_path):
    return Settings(
        backend=BACKEND_REMOTE,
        database_url=f"sqlite:///{tmp_path / 'sentinels.db'}",
        data_dir=str(tmp_path / "data"),
    )


@pytest.fixture
def local_settings(tmp_path):
    return Settings(
        backend=BACKEND_LOCAL,
        database_url=f"sqlite:///{tmp_path / 'unused.db'}",
        data_dir=str(tmp_path / "data"),
    )
