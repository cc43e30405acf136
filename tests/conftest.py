"""Shared pytest fixtures for funnelctl tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from _helpers import FakeClock

from funnelctl.infrastructure.store import MemoryStore
from funnelctl.services.persistence import PersistenceAdapter
from funnelctl.services.session import SessionController


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def adapter(store: MemoryStore) -> PersistenceAdapter:
    return PersistenceAdapter(store, key="test_funnel")


@pytest.fixture
def session(adapter: PersistenceAdapter, clock: FakeClock) -> SessionController:
    """Loaded session on an empty in-memory store, driven by a fake clock."""
    controller = SessionController(adapter, clock=clock)
    controller.load()
    return controller


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Run CLI commands from an empty temp directory with no FUNNELCTL_* env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FUNNELCTL_CONFIG", raising=False)
    monkeypatch.delenv("FUNNELCTL_STORE__BACKEND", raising=False)
    monkeypatch.delenv("FUNNELCTL_STORE__KEY", raising=False)
    yield
