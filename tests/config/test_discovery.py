"""Tests for config file walk-up discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from funnelctl.config.discovery import find_config, read_config_table


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FUNNELCTL_CONFIG", raising=False)


class TestFindConfig:
    def test_finds_in_start_directory(self, tmp_path: Path) -> None:
        (tmp_path / "funnelctl.toml").write_text("")
        assert find_config(tmp_path) == (tmp_path / "funnelctl.toml").resolve()

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "funnelctl.toml").write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == (tmp_path / "funnelctl.toml").resolve()

    def test_dedicated_file_wins_over_pyproject(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.funnelctl]\n")
        (tmp_path / "funnelctl.toml").write_text("")
        assert find_config(tmp_path) == (tmp_path / "funnelctl.toml").resolve()

    def test_pyproject_without_table_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        nested = tmp_path / "inner"
        nested.mkdir()
        (nested / "pyproject.toml").write_text("[tool.other]\n")
        result = find_config(nested)
        assert result is None or not result.is_relative_to(tmp_path)

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        target = tmp_path / "elsewhere.toml"
        target.write_text("")
        monkeypatch.setenv("FUNNELCTL_CONFIG", str(target))
        assert find_config(tmp_path / "unrelated") == target

    def test_env_override_missing_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FUNNELCTL_CONFIG", str(tmp_path / "absent.toml"))
        assert find_config(tmp_path) is None


class TestReadConfigTable:
    def test_dedicated_file_is_whole_document(self, tmp_path: Path) -> None:
        path = tmp_path / "funnelctl.toml"
        path.write_text("[history]\nlimit = 5\n")
        assert read_config_table(path) == {"history": {"limit": 5}}

    def test_pyproject_uses_tool_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n[tool.funnelctl.store]\nkey = "k"\n')
        assert read_config_table(path) == {"store": {"key": "k"}}
