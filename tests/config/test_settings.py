"""Tests for FunnelSettings: unified settings with TOML source."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from funnelctl.config.settings import FunnelSettings
from funnelctl.infrastructure.store import FileStore, MemoryStore, SqliteStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("FUNNELCTL_CONFIG", "FUNNELCTL_STORE__BACKEND", "FUNNELCTL_HISTORY__LIMIT"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.history.limit == 50
        assert settings.store.backend == "file"
        assert settings.store.key == "cp_funnel_builder_v1"
        assert settings.guard.cooldown_ms == 250

    def test_frozen(self, tmp_path: Path) -> None:
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "funnelctl.toml").write_text(
            '[history]\nlimit = 10\n[store]\nbackend = "sqlite"\n'
        )
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        assert settings.history.limit == 10
        assert settings.store.backend == "sqlite"
        assert settings.store.key == "cp_funnel_builder_v1"  # default preserved

    def test_pyproject_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.funnelctl.guard]\ncooldown_ms = 0\n")
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        assert settings.guard.cooldown_ms == 0

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[store]\nkey = "other"\n')
        settings = FunnelSettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.store.key == "other"
        assert settings.config_path == custom

    def test_project_root_from_config_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "funnelctl.toml").write_text("")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        settings = FunnelSettings.from_cli()
        assert settings.project_root == tmp_path.resolve()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "funnelctl.toml").write_text("[history\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            FunnelSettings.from_cli(project_root=tmp_path)

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "funnelctl.toml").write_text("[history]\nlimit = 0\n")
        with pytest.raises(Exception):
            FunnelSettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "funnelctl.toml").write_text("[history]\nlimit = 10\n")
        monkeypatch.setenv("FUNNELCTL_HISTORY__LIMIT", "7")
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        assert settings.history.limit == 7

    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = FunnelSettings.from_cli(
            project_root=tmp_path, json_output=True, quiet=True, verbose=True
        )
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True


class TestCreateStore:
    def test_file_backend(self, tmp_path: Path) -> None:
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        assert isinstance(settings.create_store(), FileStore)
        assert settings.store_path == tmp_path / ".funnelctl"

    def test_memory_backend(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FUNNELCTL_STORE__BACKEND", "memory")
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        assert isinstance(settings.create_store(), MemoryStore)

    def test_sqlite_backend(self, tmp_path: Path) -> None:
        (tmp_path / "funnelctl.toml").write_text('[store]\nbackend = "sqlite"\npath = "data"\n')
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        store = settings.create_store()
        assert isinstance(store, SqliteStore)
        store.set("k", b"v")
        store.engine.dispose()
        assert (tmp_path / "data" / "funnelctl.db").is_file()

    def test_absolute_store_path(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere"
        (tmp_path / "funnelctl.toml").write_text(f'[store]\npath = "{target.as_posix()}"\n')
        settings = FunnelSettings.from_cli(project_root=tmp_path)
        assert settings.store_path == target
