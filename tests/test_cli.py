"""Tests for the command line interface."""

from __future__ import annotations

import json

import pytest
import yaml
from click.testing import CliRunner

from devcache import __version__
from devcache.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tree(make_tree):
    return make_tree({
        "web": {"package.json": "{}", "node_modules": {"a.js": "x" * 2048}},
        "tool": {"Cargo.toml": "", "target": {"bin": "y" * 100}},
        "notes": {},
    })


@pytest.fixture
def config_file(tmp_path, tree):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "version": 1,
        "options": {"defaultScanPath": str(tree), "maxDepth": 1, "detectLanguage": True},
        "languages": [
            {"name": "node", "enabled": True, "priority": 10,
             "patterns": ["node_modules"], "signatures": ["package.json"]},
            {"name": "rust", "enabled": True, "patterns": ["target"], "signatures": ["Cargo.toml"]},
            {"name": "go", "enabled": False, "patterns": ["vendor"], "signatures": ["go.mod"]},
        ],
    }))
    return path


class TestMain:
    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "config error" in result.output
        assert "dev-cache init" in result.output


class TestScan:
    def test_table(self, runner, config_file, tree):
        result = runner.invoke(main, ["scan", "--config", str(config_file)])

        assert result.exit_code == 0
        assert f"Scanning {tree} (max depth: 1)" in result.output
        assert "Language detection enabled" in result.output
        assert "Project Path" in result.output
        assert str(tree / "web") in result.output
        assert "node_modules" in result.output
        assert "(no cache directories)" in result.output
        assert "no language found" in result.output
        assert "TOTAL" in result.output
        assert (tree / "web" / "node_modules").exists()

    def test_json(self, runner, config_file, tree):
        result = runner.invoke(main, ["scan", "--config", str(config_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["scan_path"] == str(tree)
        assert data["dry_run"] is True
        assert data["total_bytes"] == 2148
        patterns = sorted(f["pattern"] for f in data["findings"])
        assert patterns == ["", "node_modules", "target"]

    def test_language_filter(self, runner, config_file):
        result = runner.invoke(main, ["scan", "--config", str(config_file), "--json", "-l", "rust"])

        data = json.loads(result.output)
        assert [f["pattern"] for f in data["findings"] if f["pattern"]] == ["target"]

    def test_no_languages_selected(self, runner, config_file):
        result = runner.invoke(main, ["scan", "--config", str(config_file), "-l", "go"])
        assert result.exit_code == 0
        assert "No languages selected." in result.output

    def test_scan_and_depth_overrides(self, runner, config_file, make_tree, tmp_path):
        other = tmp_path / "other"
        (other / "deep" / "er" / "target").mkdir(parents=True)

        shallow = runner.invoke(main, ["scan", "--config", str(config_file), "--scan", str(other), "--json"])
        deep = runner.invoke(
            main, ["scan", "--config", str(config_file), "--scan", str(other), "-d", "2", "--json"]
        )

        assert [f["pattern"] for f in json.loads(shallow.output)["findings"]] == [""]
        assert "target" in [f["pattern"] for f in json.loads(deep.output)["findings"]]

    def test_negative_depth_rejected(self, runner, config_file):
        result = runner.invoke(main, ["scan", "--config", str(config_file), "-d", "-1"])
        assert result.exit_code == 2

    def test_scan_path_must_be_a_directory(self, runner, config_file, tmp_path):
        result = runner.invoke(main, ["scan", "--config", str(config_file), "--scan", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "not a directory" in result.output

    def test_nothing_found(self, runner, config_file, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(main, ["scan", "--config", str(config_file), "--scan", str(empty)])
        assert result.exit_code == 0
        assert "No cache directories found." in result.output


class TestClean:
    def test_dry_run_deletes_nothing(self, runner, config_file, tree):
        result = runner.invoke(main, ["clean", "--config", str(config_file), "--dry-run"])

        assert result.exit_code == 0
        assert "dry run" in result.output
        assert (tree / "web" / "node_modules").exists()

    def test_cancelled(self, runner, config_file, tree):
        result = runner.invoke(main, ["clean", "--config", str(config_file)], input="n\n")

        assert result.exit_code == 0
        assert "WARNING: This will delete 2 cache directories" in result.output
        assert "Cancelled." in result.output
        assert (tree / "tool" / "target").exists()

    def test_confirmed(self, runner, config_file, tree):
        result = runner.invoke(main, ["clean", "--config", str(config_file)], input="y\n")

        assert result.exit_code == 0
        assert "Deleted 2 directories" in result.output
        assert not (tree / "web" / "node_modules").exists()
        assert not (tree / "tool" / "target").exists()
        assert (tree / "web" / "package.json").exists()

    def test_yes_with_json(self, runner, config_file, tree):
        result = runner.invoke(main, ["clean", "--config", str(config_file), "--yes", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == {
            "status": "cleaned",
            "requested": 2,
            "deleted": 2,
            "freed_bytes": 2148,
            "errors": [],
        }

    def test_json_requires_yes(self, runner, config_file, tree):
        result = runner.invoke(main, ["clean", "--config", str(config_file), "--json"])

        assert result.exit_code == 1
        assert json.loads(result.output)["status"] == "confirmation_required"
        assert (tree / "web" / "node_modules").exists()

    def test_nothing_to_clean(self, runner, config_file, tmp_path):
        empty = tmp_path / "empty"
        (empty / "docs").mkdir(parents=True)
        result = runner.invoke(main, ["clean", "--config", str(config_file), "--scan", str(empty), "--yes"])
        assert result.exit_code == 0
        assert "No cache directories found to delete." in result.output


class TestInit:
    def test_writes_starter_config(self, runner, isolate_config):
        result = runner.invoke(main, ["init"])

        assert result.exit_code == 0
        assert f"Starter config written to: {isolate_config}" in result.output
        data = yaml.safe_load(isolate_config.read_text())
        assert data["options"]["detectLanguage"] is True
        assert len(data["languages"]) == 12

    def test_existing_config_needs_force(self, runner, isolate_config):
        runner.invoke(main, ["init"])

        again = runner.invoke(main, ["init"])
        forced = runner.invoke(main, ["init", "--force"])

        assert again.exit_code == 1
        assert "already exists" in again.output
        assert forced.exit_code == 0
        assert "backed up to" in forced.output


class TestLanguages:
    def test_lists_in_detection_order(self, runner, config_file):
        result = runner.invoke(main, ["languages", "--config", str(config_file), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [d["name"] for d in data] == ["rust", "node", "go"]
        assert data[2]["enabled"] is False
        assert data[0]["patterns"] == ["target"]
        assert data[0]["signatures"] == ["Cargo.toml"]

    def test_text_output(self, runner, config_file):
        result = runner.invoke(main, ["languages", "--config", str(config_file)])

        assert result.exit_code == 0
        assert "rust" in result.output
        assert "disabled" in result.output
        assert "Cargo.toml" in result.output
