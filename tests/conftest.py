"""Pytest configuration and fixtures for dailyvoice tests."""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture(autouse=True)
def patch_xdg_paths(monkeypatch, tmp_path) -> Generator[Path]:
    """Point every XDG directory at a per-test temp dir.

    Keeps tests away from the real cache, runtime and config locations.
    """
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path / "runtime"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("DAILYVOICE_PROVIDER", raising=False)
    monkeypatch.delenv("DAILYVOICE_VOICE", raising=False)
    monkeypatch.delenv("DAILYVOICE_MODEL", raising=False)

    import dailyvoice.config

    monkeypatch.setattr(dailyvoice.config, "_cached_config", None)
    yield tmp_path


class FakeClock:
    """Controllable millisecond clock for cache expiry tests."""

    def __init__(self, start: float = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
