"""Integration tests for init, status, add, commit, log and reset."""

import re
from collections.abc import Callable
from pathlib import Path

import pytest
from dulwich.repo import Repo
from pytest_mock import MockerFixture


class TestInit:
    def test_creates_repository_with_initial_commit(
        self,
        project: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("init") == 0

        assert capsys.readouterr().out == "Initialized Git repository with initial commit\n"
        with Repo(str(project)) as repo:
            assert repo.refs.get_symrefs()[b"HEAD"] == b"refs/heads/main"
            assert repo[b"HEAD"].message == b"Initial commit"

    def test_second_init_reinitializes(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with Repo(str(repo)) as before:
            head = before.head()

        assert gitlite_cli("init") == 0

        assert capsys.readouterr().out == "Reinitialized existing Git repository\n"
        with Repo(str(repo)) as after:
            assert after.head() == head

    def test_default_branch_from_environment(
        self,
        project: Path,
        gitlite_cli: Callable[..., int],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("GITLITE_DEFAULT_BRANCH", "trunk")

        assert gitlite_cli("init") == 0

        with Repo(str(project)) as repo:
            assert repo.refs.get_symrefs()[b"HEAD"] == b"refs/heads/trunk"


class TestStatusAddCommit:
    def test_clean_after_init(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("status") == 0
        assert capsys.readouterr().out == (
            "On branch main\nnothing to commit, working tree clean\n"
        )

    def test_add_commit_log_cycle(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = (repo / "a.txt").write_text("a\n")
        _ = (repo / "debug.log").write_text("noise\n")

        assert gitlite_cli("status") == 0
        out = capsys.readouterr().out
        assert "Changes not staged for commit:" in out
        assert "  new file:   a.txt" in out
        assert "debug.log" not in out

        assert gitlite_cli("add", "a.txt") == 0
        assert capsys.readouterr().out == "Added a.txt\n"

        assert gitlite_cli("status") == 0
        out = capsys.readouterr().out
        assert "Changes to be committed:\n  new file:   a.txt" in out

        assert gitlite_cli("commit", "-m", "Add a") == 0
        out = capsys.readouterr().out
        assert re.fullmatch(r"\[main [0-9a-f]{7}\] Add a\n", out)

        assert gitlite_cli("log", "-n", "1") == 0
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert re.fullmatch(r"commit [0-9a-f]{40}", lines[0])
        assert lines[1] == "Author: Gitlite User <user@gitlite.local>"
        assert re.fullmatch(r"Date: \d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.000Z", lines[2])
        assert lines[4] == "    Add a"
        assert "Initial commit" not in out

    def test_add_all_counts_files(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = (repo / "a.txt").write_text("a")
        (repo / "src").mkdir()
        _ = (repo / "src" / "b.txt").write_text("b")

        assert gitlite_cli("add", ".") == 0

        assert capsys.readouterr().out == "Added 2 files\n"

    def test_add_missing_file_is_fatal(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("add", "missing.txt") == 1
        assert "Error:" in capsys.readouterr().out

    def test_author_from_environment(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("GITLITE_AUTHOR_NAME", "Ada")
        monkeypatch.setenv("GITLITE_AUTHOR_EMAIL", "ada@example.com")
        _ = (repo / "a.txt").write_text("a")
        assert gitlite_cli("add", "a.txt") == 0
        assert gitlite_cli("commit", "-m", "Add a") == 0
        _ = capsys.readouterr()

        assert gitlite_cli("log", "-n", "1") == 0

        assert "Author: Ada <ada@example.com>" in capsys.readouterr().out


class TestIgnoredTrackedFile:
    @pytest.fixture
    def ignored_notes(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> Path:
        notes = repo / "notes.txt"
        _ = notes.write_text("a\n")
        assert gitlite_cli("add", "notes.txt") == 0
        assert gitlite_cli("commit", "-m", "Add notes") == 0
        _ = (repo / ".gitignore").write_text("notes.txt\n")
        _ = notes.write_text("b\n")
        _ = capsys.readouterr()
        return notes

    def test_modification_shown_in_status(
        self,
        ignored_notes: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("status") == 0

        out = capsys.readouterr().out
        assert "  modified:   notes.txt" in out
        assert "  new file:   .gitignore" in out

    @pytest.mark.parametrize("target", [".", "notes.txt"])
    def test_modification_can_be_staged(
        self,
        repo: Path,
        ignored_notes: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
        target: str,
    ) -> None:
        assert gitlite_cli("add", target) == 0
        _ = capsys.readouterr()

        with Repo(str(repo)) as r:
            sha = r.open_index()[b"notes.txt"].sha
            assert r[sha].data == b"b\n"

        assert gitlite_cli("status") == 0
        assert "Changes to be committed:\n  modified:   notes.txt" in (
            capsys.readouterr().out
        )

    def test_untracked_ignored_file_is_fatal(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _ = (repo / ".gitignore").write_text("secret.txt\n")
        _ = (repo / "secret.txt").write_text("s\n")

        assert gitlite_cli("add", "secret.txt") == 1
        assert "ignored by one of your .gitignore files" in capsys.readouterr().out


class TestReset:
    def test_hard_reset_moves_branch_and_worktree(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        with Repo(str(repo)) as r:
            initial = r.head().decode()
        _ = (repo / "a.txt").write_text("a")
        assert gitlite_cli("add", "a.txt") == 0
        assert gitlite_cli("commit", "-m", "Add a") == 0
        _ = capsys.readouterr()

        assert gitlite_cli("reset", "--hard", "HEAD~1") == 0

        assert capsys.readouterr().out == (
            f"Hard reset to HEAD~1...\nHEAD is now at {initial[:7]}\n"
        )
        with Repo(str(repo)) as r:
            assert r.head().decode() == initial

    def test_unknown_ref(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("reset", "--hard", "HEAD~5") == 0
        assert "Reset failed: unknown revision 'HEAD~5'" in capsys.readouterr().out

    def test_worktree_write_failure_is_reported(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
        mocker: MockerFixture,
    ) -> None:
        _ = mocker.patch(
            "gitlite.repository._dulwich.porcelain.reset",
            side_effect=OSError("Permission denied"),
        )

        assert gitlite_cli("reset", "--hard", "HEAD") == 0

        assert capsys.readouterr().out == (
            "Hard reset to HEAD...\nReset failed: Permission denied\n"
        )

    def test_soft_not_supported(
        self,
        repo: Path,
        gitlite_cli: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert gitlite_cli("reset", "--soft", "HEAD~1") == 0
        assert capsys.readouterr().out.startswith(
            "Soft reset is not fully supported in this implementation"
        )
