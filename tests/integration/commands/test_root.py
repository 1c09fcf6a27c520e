"""Integration tests for the root command and global options."""

from collections.abc import Callable
from pathlib import Path

import pytest

from gitlite.cli._commands._shared import USAGE_LINES


class TestUsage:
    def test_no_arguments_prints_usage(
        self,
        project: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli() == 0
        assert capsys.readouterr().out == "\n".join(USAGE_LINES) + "\n"

    def test_unknown_command_prints_usage(
        self,
        project: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("frobnicate") == 0
        assert capsys.readouterr().out.startswith("Simple Git Commands:")


class TestOutsideRepository:
    @pytest.mark.parametrize("command", ["status", "log", "branch", "remote"])
    def test_fatal_error(
        self,
        project: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
        command: str,
    ) -> None:
        assert gitlite_cli(command) == 1
        assert capsys.readouterr().out.startswith("Error: not a git repository")


class TestGlobalOptions:
    def test_config_file_applies(
        self,
        project: Path,
        tmp_path: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = tmp_path / "gitlite.toml"
        _ = config.write_text('[init]\ndefault_branch = "develop"\n')

        assert gitlite_cli("--config", str(config), "init") == 0
        _ = capsys.readouterr()
        assert gitlite_cli("--config", str(config), "status") == 0

        assert capsys.readouterr().out.startswith("On branch develop\n")

    def test_missing_config_file_exits(
        self,
        project: Path,
        tmp_path: Path,
        gitlite_cli: Callable[..., int],
    ) -> None:
        assert gitlite_cli("--config", str(tmp_path / "nope.toml"), "status") == 1

    def test_commands_are_logged(
        self,
        project: Path,
        gitlite_cli: Callable[..., int],
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        log_file = tmp_path / "gitlite.log"
        monkeypatch.setenv("GITLITE_LOG_FILE", str(log_file))

        assert gitlite_cli("init") == 0

        content = log_file.read_text()
        assert '"command": "init"' in content
        assert "Repository initialized" in content

    def test_verbose_add_reports_skipped_files(
        self,
        project: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("init") == 0
        _ = (project / "a.txt").write_text("a")
        _ = capsys.readouterr()

        assert gitlite_cli("--verbose", "add", ".") == 0

        assert capsys.readouterr().out.startswith("Added 1 files")
