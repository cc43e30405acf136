"""Tests for the export and import commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from funnelctl.cli import cli


def _build(runner: CliRunner) -> None:
    for kind in ("sales", "order", "thankyou"):
        runner.invoke(cli, ["add", kind])
    runner.invoke(cli, ["connect", "#1", "#2"])
    runner.invoke(cli, ["connect", "#2", "#3"])


@pytest.mark.usefixtures("_isolated_project")
class TestExport:
    def test_stdout_envelope(self, cli_runner: CliRunner) -> None:
        _build(cli_runner)
        result = cli_runner.invoke(cli, ["export"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["version"] == 1
        assert len(payload["nodes"]) == 3
        assert payload["edges"][0]["type"] == "smoothstep"
        assert payload["counters"]["thankyou"] == 1

    def test_write_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _build(cli_runner)
        target = tmp_path / "funnel.json"
        result = cli_runner.invoke(cli, ["--json", "export", "-o", str(target)])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["edge_count"] == 2
        assert json.loads(target.read_text())["version"] == 1


    def test_unwritable_target_fails_cleanly(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        target = tmp_path / "missing-dir" / "funnel.json"
        result = cli_runner.invoke(cli, ["--json", "export", "-o", str(target)])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "EXPORT_ERROR"
        assert not target.exists()

@pytest.mark.usefixtures("_isolated_project")
class TestImport:
    def test_round_trip(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _build(cli_runner)
        target = tmp_path / "funnel.json"
        cli_runner.invoke(cli, ["export", "-o", str(target)])
        exported = json.loads(target.read_text())
        cli_runner.invoke(cli, ["delete", "--node", "#1", "--node", "#2"])

        result = cli_runner.invoke(cli, ["--json", "import", str(target)])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["node_count"] == 3
        assert json.loads(cli_runner.invoke(cli, ["export"]).stdout) == exported

    def test_wrong_version_rejected(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _build(cli_runner)
        before = cli_runner.invoke(cli, ["export"]).stdout
        bad = tmp_path / "v2.json"
        bad.write_text('{"version": 2, "nodes": [], "edges": []}')
        result = cli_runner.invoke(cli, ["--json", "import", str(bad)])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "IMPORT_ERROR"
        assert cli_runner.invoke(cli, ["export"]).stdout == before

    def test_missing_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "import", str(tmp_path / "absent.json")])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "IMPORT_ERROR"

    def test_missing_annotations_normalized(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        source = tmp_path / "bare.json"
        source.write_text(
            json.dumps(
                {
                    "version": 1,
                    "nodes": [
                        {
                            "id": "a",
                            "position": {"x": 0, "y": 0},
                            "data": {"kind": "order", "title": "Order Page", "primaryCta": "x"},
                        }
                    ],
                    "edges": [{"id": "e", "source": "a", "target": "a"}],
                }
            )
        )
        assert cli_runner.invoke(cli, ["import", str(source)]).exit_code == 0
        payload = json.loads(cli_runner.invoke(cli, ["export"]).stdout)
        assert payload["edges"][0]["markerEnd"] == {"type": "arrowclosed"}
        assert payload["nodes"][0]["type"] == "funnel"
        assert payload["counters"]["order"] == 0
