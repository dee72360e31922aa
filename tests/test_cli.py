"""
CLI interface tests for workspace-pins.
Tests the command-line interface and main entry points.
"""

import json

from click.testing import CliRunner
from unittest.mock import patch

from workspace_pins.main import USAGE, cli

from conftest import read_manifest, snapshot, write_manifest


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "prepare" in result.output
        assert "restore" in result.output

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_show_matrix(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--show-matrix"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert list(data) == ["artifacts", "devtools", "agents", "memory", "ai-sdk-tools"]
        assert data["artifacts"][0]["source_field"] == "devDependencies"

    def test_show_config(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ["--show-config", "--root", str(workspace), "--dry-run"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["workspace"]["root"] == str(workspace)
        assert data["publish"]["dry_run"] is True


class TestUsage:
    """Test invocations without a valid command."""

    def test_no_arguments_prints_usage(self, workspace):
        before = snapshot(workspace)
        runner = CliRunner()
        result = runner.invoke(cli, ["--root", str(workspace)])

        assert result.exit_code == 1
        assert USAGE in result.output
        assert snapshot(workspace) == before

    def test_unknown_command_prints_usage(self, workspace):
        before = snapshot(workspace)
        runner = CliRunner()
        result = runner.invoke(cli, ["publish", "--root", str(workspace)])

        assert result.exit_code == 1
        assert USAGE in result.output
        assert snapshot(workspace) == before

    def test_commands_are_case_sensitive(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ["PREPARE", "--root", str(workspace)])

        assert result.exit_code == 1
        assert USAGE in result.output

    def test_unknown_option_prints_usage(self, workspace):
        before = snapshot(workspace)
        runner = CliRunner()
        result = runner.invoke(cli, ["--bogus", "--root", str(workspace)])

        assert result.exit_code == 1
        assert USAGE in result.output
        assert snapshot(workspace) == before

    def test_extra_arguments_are_ignored(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ["prepare", "extra", "--root", str(workspace)])

        assert result.exit_code == 0
        assert read_manifest(workspace, "memory")["dependencies"] == {
            "@ai-sdk-tools/debug": "^1.2.3"
        }

    @patch("workspace_pins.main.run_command")
    def test_usage_does_not_run(self, mock_run):
        runner = CliRunner()
        runner.invoke(cli, [])

        mock_run.assert_not_called()


class TestPrepareCommand:
    """Test the prepare command."""

    def test_prepare(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ["prepare", "--root", str(workspace)])

        assert result.exit_code == 0
        assert "Preparing packages for publishing" in result.output
        assert "Moved @ai-sdk-tools/store from devDependencies" in result.output
        assert "Updated memory dependencies for publishing" in result.output
        assert read_manifest(workspace, "memory")["dependencies"] == {
            "@ai-sdk-tools/debug": "^1.2.3"
        }

    def test_prepare_uses_root_from_environment(self, workspace, monkeypatch):
        monkeypatch.setenv("WORKSPACE_PINS_ROOT", str(workspace))
        runner = CliRunner()
        result = runner.invoke(cli, ["prepare", "--quiet"])

        assert result.exit_code == 0
        assert "Preparing" not in result.output
        assert read_manifest(workspace, "artifacts")["dependencies"] == {
            "@ai-sdk-tools/store": "^0.4.0"
        }

    def test_prepare_dry_run(self, workspace):
        before = snapshot(workspace)
        runner = CliRunner()
        result = runner.invoke(cli, ["prepare", "--dry-run", "--root", str(workspace)])

        assert result.exit_code == 0
        assert "Dry run" in result.output
        assert "Would rewrite artifacts" in result.output
        assert snapshot(workspace) == before

    def test_flags_do_not_leak_between_invocations(self, workspace):
        runner = CliRunner()
        first = runner.invoke(cli, ["prepare", "--dry-run", "--root", str(workspace)])
        second = runner.invoke(cli, ["prepare", "--root", str(workspace)])

        assert first.exit_code == 0
        assert second.exit_code == 0
        assert "Dry run" not in second.output
        assert read_manifest(workspace, "memory")["dependencies"] == {
            "@ai-sdk-tools/debug": "^1.2.3"
        }

    def test_prepare_verbose_summary(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ["prepare", "--verbose", "--root", str(workspace)])

        assert result.exit_code == 0
        assert "Summary" in result.output
        assert "written" in result.output

    def test_prepare_missing_manifest_fails(self, workspace):
        (workspace / "packages" / "store" / "package.json").unlink()
        before = snapshot(workspace)

        runner = CliRunner()
        result = runner.invoke(cli, ["prepare", "--root", str(workspace)])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert snapshot(workspace) == before

    def test_prepare_no_buffer_partial_failure(self, workspace):
        write_manifest(workspace, "cache", {"name": "@ai-sdk-tools/cache"})

        runner = CliRunner()
        result = runner.invoke(
            cli, ["prepare", "--no-buffer", "--root", str(workspace)]
        )

        assert result.exit_code == 1
        assert read_manifest(workspace, "memory")["dependencies"] == {
            "@ai-sdk-tools/debug": "^1.2.3"
        }
        umbrella = read_manifest(workspace, "ai-sdk-tools")
        assert set(umbrella["dependencies"].values()) == {"workspace:*"}

    def test_missing_root_fails(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["prepare", "--root", str(tmp_path / "nowhere")])

        assert result.exit_code == 1


class TestRestoreCommand:
    """Test the restore command."""

    def test_prepare_then_restore(self, workspace):
        before = snapshot(workspace)
        runner = CliRunner()

        assert runner.invoke(cli, ["prepare", "--root", str(workspace)]).exit_code == 0
        result = runner.invoke(cli, ["restore", "--root", str(workspace)])

        assert result.exit_code == 0
        assert "Restoring packages to development mode" in result.output
        assert "Restored artifacts to development mode" in result.output
        assert snapshot(workspace) == before
