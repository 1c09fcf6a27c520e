"""Integration tests for DulwichObjectLayer against real repositories."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from dulwich.repo import Repo

from gitlite.exceptions import (
    BranchError,
    CheckoutError,
    RefNotFoundError,
    RemoteError,
    StagingError,
)
from gitlite.repository import (
    Author,
    DulwichObjectLayer,
    FileState,
    ObjectLayer,
    Remote,
    StatusEntry,
    init_repository,
)


@pytest.fixture
def dulwich_layer(tmp_path: Path, author: Author) -> Iterator[DulwichObjectLayer]:
    """Fresh repository on main with one commit of README.md."""
    layer, reinitialized = init_repository(tmp_path / "work", "main")
    assert reinitialized is False
    with layer:
        _ = (layer.root / "README.md").write_text("hello\n")
        layer.stage_path("README.md")
        _ = layer.create_commit("Initial commit", author)
        yield layer


def _commit(layer: DulwichObjectLayer, author: Author, name: str, text: str) -> str:
    _ = (layer.root / name).write_text(text)
    layer.stage_path(name)
    return layer.create_commit(f"Add {name}", author)


class TestInitRepository:
    def test_unborn_head_points_at_default_branch(self, tmp_path: Path) -> None:
        layer, _ = init_repository(tmp_path / "new", "trunk")
        with layer:
            assert layer.current_branch() == "trunk"
            assert layer.log() == []
            assert layer.list_branches() == []

    def test_existing_repository_reopened(
        self, dulwich_layer: DulwichObjectLayer
    ) -> None:
        layer, reinitialized = init_repository(dulwich_layer.root, "other")
        with layer:
            assert reinitialized is True
            assert layer.current_branch() == "main"

    def test_implements_protocol(self, dulwich_layer: DulwichObjectLayer) -> None:
        assert isinstance(dulwich_layer, ObjectLayer)


class TestStatusMatrix:
    def test_three_way_rows(self, dulwich_layer: DulwichObjectLayer) -> None:
        root = dulwich_layer.root
        _ = (root / "README.md").write_text("changed\n")
        _ = (root / "staged.txt").write_text("s")
        dulwich_layer.stage_path("staged.txt")
        _ = (root / "untracked.txt").write_text("u")

        assert dulwich_layer.status_matrix() == [
            StatusEntry("README.md", FileState.UNCHANGED, FileState.CHANGED, FileState.UNCHANGED),
            StatusEntry("staged.txt", FileState.ABSENT, FileState.CHANGED, FileState.CHANGED),
            StatusEntry("untracked.txt", FileState.ABSENT, FileState.CHANGED, FileState.ABSENT),
        ]

    def test_gitignored_untracked_files_skipped(
        self, dulwich_layer: DulwichObjectLayer
    ) -> None:
        root = dulwich_layer.root
        _ = (root / ".gitignore").write_text("build/\n")
        (root / "build").mkdir()
        _ = (root / "build" / "out.bin").write_text("x")

        paths = [e.path for e in dulwich_layer.status_matrix()]

        assert ".gitignore" in paths
        assert "build/out.bin" not in paths

    def test_stage_missing_file(self, dulwich_layer: DulwichObjectLayer) -> None:
        with pytest.raises(StagingError, match="did not match any files"):
            dulwich_layer.stage_path("missing.txt")

    def test_tracked_file_matched_by_gitignore(
        self, dulwich_layer: DulwichObjectLayer, author: Author
    ) -> None:
        _ = _commit(dulwich_layer, author, "notes.txt", "a\n")
        _ = (dulwich_layer.root / ".gitignore").write_text("notes.txt\n")
        _ = (dulwich_layer.root / "notes.txt").write_text("b\n")

        dulwich_layer.stage_path("notes.txt")

        assert StatusEntry(
            path="notes.txt",
            head=FileState.UNCHANGED,
            workdir=FileState.CHANGED,
            stage=FileState.CHANGED,
        ) in dulwich_layer.status_matrix()

    def test_untracked_ignored_file_rejected(
        self, dulwich_layer: DulwichObjectLayer
    ) -> None:
        _ = (dulwich_layer.root / ".gitignore").write_text("secret.txt\n")
        _ = (dulwich_layer.root / "secret.txt").write_text("s")

        with pytest.raises(StagingError, match="ignored"):
            dulwich_layer.stage_path("secret.txt")


class TestCommitsAndRefs:
    def test_log_newest_first(
        self, dulwich_layer: DulwichObjectLayer, author: Author
    ) -> None:
        sha = _commit(dulwich_layer, author, "a.txt", "a")

        commits = dulwich_layer.log()

        assert [c.message for c in commits] == ["Add a.txt", "Initial commit"]
        assert commits[0].sha == sha
        assert commits[0].author_name == "Test User"
        assert commits[0].author_email == "test@example.com"
        assert commits[0].parent_shas == (commits[1].sha,)
        assert dulwich_layer.log(depth=1) == commits[:1]

    def test_resolve_expressions(
        self, dulwich_layer: DulwichObjectLayer, author: Author
    ) -> None:
        root_sha = dulwich_layer.resolve_ref("HEAD")
        tip = _commit(dulwich_layer, author, "a.txt", "a")

        assert dulwich_layer.resolve_ref("main") == tip
        assert dulwich_layer.resolve_ref("HEAD~1") == root_sha
        assert dulwich_layer.resolve_ref("HEAD^") == root_sha
        assert dulwich_layer.resolve_ref(tip[:7]) == tip
        with pytest.raises(RefNotFoundError):
            _ = dulwich_layer.resolve_ref("HEAD~2")

    def test_create_branch(self, dulwich_layer: DulwichObjectLayer) -> None:
        sha = dulwich_layer.create_branch("feature")

        assert sha == dulwich_layer.resolve_ref("HEAD")
        assert dulwich_layer.list_branches() == ["feature", "main"]
        with pytest.raises(BranchError, match="already exists"):
            _ = dulwich_layer.create_branch("feature")
        with pytest.raises(BranchError, match="not a valid branch name"):
            _ = dulwich_layer.create_branch("bad..name")

    def test_checkout_unknown_branch(self, dulwich_layer: DulwichObjectLayer) -> None:
        with pytest.raises(CheckoutError):
            dulwich_layer.checkout("nope")

    def test_is_ancestor(
        self, dulwich_layer: DulwichObjectLayer, author: Author
    ) -> None:
        root_sha = dulwich_layer.resolve_ref("HEAD")
        tip = _commit(dulwich_layer, author, "a.txt", "a")

        assert dulwich_layer.is_ancestor(root_sha, tip)
        assert dulwich_layer.is_ancestor(tip, tip)
        assert not dulwich_layer.is_ancestor(tip, root_sha)


class TestRemotes:
    def test_registry(self, dulwich_layer: DulwichObjectLayer) -> None:
        dulwich_layer.add_remote("origin", "https://example.com/a.git")
        dulwich_layer.add_remote("backup", "https://example.com/b.git")

        assert dulwich_layer.list_remotes() == [
            Remote("origin", "https://example.com/a.git"),
            Remote("backup", "https://example.com/b.git"),
        ]
        with pytest.raises(RemoteError, match="already exists"):
            dulwich_layer.add_remote("origin", "https://example.com/c.git")

    def test_remove_drops_tracking_refs(
        self, dulwich_layer: DulwichObjectLayer
    ) -> None:
        dulwich_layer.add_remote("origin", "https://example.com/a.git")
        with Repo(str(dulwich_layer.root)) as repo:
            repo.refs[b"refs/remotes/origin/main"] = repo.head()
        assert dulwich_layer.list_branches("origin") == ["main"]

        dulwich_layer.remove_remote("origin")

        assert dulwich_layer.list_remotes() == []
        assert dulwich_layer.list_branches("origin") == []
        with pytest.raises(RemoteError, match="No such remote"):
            dulwich_layer.remove_remote("origin")

    def test_set_upstream(self, dulwich_layer: DulwichObjectLayer) -> None:
        dulwich_layer.set_upstream("main", "origin")

        with Repo(str(dulwich_layer.root)) as repo:
            config = repo.get_config()
            assert config.get((b"branch", b"main"), b"remote") == b"origin"
            assert config.get((b"branch", b"main"), b"merge") == b"refs/heads/main"
