"""Unit tests for the remote registry and sync controllers."""

import pytest

from gitlite.core import (
    GitHubTokenAuth,
    SyncOperation,
    add_remote,
    classify_sync_error,
    failure_guidance,
    fetch,
    fetch_all,
    list_remotes,
    normalize_remote_url,
    pull,
    push,
    remove_remote,
)
from gitlite.exceptions import RemoteError, SyncError, SyncFailureKind
from gitlite.repository import Credentials, FakeObjectLayer, Remote


class TestNormalizeRemoteUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("git@github.com:org/repo", "https://github.com/org/repo.git"),
            ("git@github.com:org/repo.git", "https://github.com/org/repo.git"),
            ("https://github.com/org/repo.git", "https://github.com/org/repo.git"),
            ("git@gitlab.com:org/repo.git", "git@gitlab.com:org/repo.git"),
            ("/srv/git/repo.git", "/srv/git/repo.git"),
        ],
    )
    def test_rewrites_only_github_ssh(self, url: str, expected: str) -> None:
        assert normalize_remote_url(url) == expected


class TestRemoteRegistry:
    def test_add_stores_normalised_url(self, layer: FakeObjectLayer) -> None:
        stored = add_remote(layer, "origin", "git@github.com:org/repo")

        assert stored == "https://github.com/org/repo.git"
        assert list_remotes(layer) == [
            Remote(name="origin", url="https://github.com/org/repo.git")
        ]

    def test_add_duplicate_rejected(self, layer: FakeObjectLayer) -> None:
        _ = add_remote(layer, "origin", "https://example.com/a.git")
        with pytest.raises(RemoteError, match="already exists"):
            _ = add_remote(layer, "origin", "https://example.com/b.git")

    def test_remove(self, layer: FakeObjectLayer) -> None:
        _ = add_remote(layer, "origin", "https://example.com/a.git")
        layer.remote_branches["origin"] = {"main": layer.branches["main"]}

        remove_remote(layer, "origin")

        assert list_remotes(layer) == []
        assert "origin" not in layer.remote_branches

    def test_remove_unknown(self, layer: FakeObjectLayer) -> None:
        with pytest.raises(RemoteError, match="No such remote"):
            remove_remote(layer, "origin")


class TestGitHubTokenAuth:
    def test_supplies_token_credentials(self) -> None:
        lines: list[str] = []
        auth = GitHubTokenAuth(token="ghp_secret", notify=lines.append)

        credentials = auth.credentials("https://github.com/org/repo.git")

        assert credentials == Credentials(username="token", password="ghp_secret")
        assert lines == ["Using GitHub token for authentication"]

    def test_anonymous_without_token(self) -> None:
        lines: list[str] = []
        auth = GitHubTokenAuth(notify=lines.append)

        assert auth.credentials("https://github.com/org/repo.git") is None
        assert lines == ["No authentication provided (trying as public repo)"]

    def test_failure_never_retries(self) -> None:
        lines: list[str] = []
        auth = GitHubTokenAuth(token="ghp_secret", notify=lines.append)

        assert auth.on_failure("https://github.com/org/repo.git") is None
        assert lines == [
            "Authentication failed.",
            "For private repos, set GITHUB_TOKEN environment variable.",
        ]

    def test_token_hidden_from_repr(self) -> None:
        assert "ghp_secret" not in repr(GitHubTokenAuth(token="ghp_secret"))


class TestClassifySyncError:
    def test_uses_sync_error_kind(self) -> None:
        error = SyncError("nope", kind=SyncFailureKind.NOT_FOUND)
        assert classify_sync_error(error) is SyncFailureKind.NOT_FOUND

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("HTTP 401 returned", SyncFailureKind.AUTH_REQUIRED),
            ("Authentication failed", SyncFailureKind.AUTH_REQUIRED),
            ("unauthorized", SyncFailureKind.AUTH_REQUIRED),
            ("HTTP 404", SyncFailureKind.NOT_FOUND),
            ("repository Not Found", SyncFailureKind.NOT_FOUND),
            ("connection reset", SyncFailureKind.GENERIC),
        ],
    )
    def test_classifies_by_message(
        self, message: str, expected: SyncFailureKind
    ) -> None:
        assert classify_sync_error(RuntimeError(message)) is expected


class TestFailureGuidance:
    def test_auth_required(self) -> None:
        error = SyncError("x", kind=SyncFailureKind.AUTH_REQUIRED)
        assert failure_guidance(SyncOperation.PUSH, error) == [
            "Push failed: Authentication required",
            "This might be a private repository.",
            "For private repos, you need to set a GitHub token:",
            "  export GITHUB_TOKEN=your_personal_access_token",
        ]

    def test_not_found(self) -> None:
        error = SyncError("x", kind=SyncFailureKind.NOT_FOUND)
        assert failure_guidance(SyncOperation.FETCH, error) == [
            "Fetch failed: Repository not found",
            "Make sure the repository exists and the URL is correct",
        ]

    def test_generic_push_adds_access_hint(self) -> None:
        lines = failure_guidance(SyncOperation.PUSH, SyncError("rejected"))
        assert lines == [
            "Push failed: rejected",
            "Make sure the remote repository exists and you have push access",
        ]

    def test_generic_pull(self) -> None:
        assert failure_guidance(SyncOperation.PULL, SyncError("boom")) == [
            "Pull failed: boom"
        ]


@pytest.fixture
def private_origin(layer: FakeObjectLayer) -> FakeObjectLayer:
    layer.remotes["origin"] = "https://github.com/org/private.git"
    layer.private_remotes["origin"] = "ghp_secret"
    return layer


class TestPush:
    def test_private_remote_without_token_changes_nothing(
        self, private_origin: FakeObjectLayer
    ) -> None:
        with pytest.raises(SyncError) as exc_info:
            push(private_origin, GitHubTokenAuth(), set_upstream=True)

        assert classify_sync_error(exc_info.value) is SyncFailureKind.AUTH_REQUIRED
        assert private_origin.pushed == []
        assert private_origin.upstreams == {}
        assert private_origin.remote_branches == {}

    def test_private_remote_with_token(self, private_origin: FakeObjectLayer) -> None:
        push(private_origin, GitHubTokenAuth(token="ghp_secret"))

        assert private_origin.pushed == [("origin", "main")]
        assert private_origin.upstreams == {}

    def test_set_upstream_after_success(self, private_origin: FakeObjectLayer) -> None:
        push(private_origin, GitHubTokenAuth(token="ghp_secret"), set_upstream=True)
        assert private_origin.upstreams == {"main": "origin"}

    def test_unknown_remote(self, layer: FakeObjectLayer) -> None:
        with pytest.raises(SyncError) as exc_info:
            push(layer, GitHubTokenAuth(), remote="nowhere")
        assert classify_sync_error(exc_info.value) is SyncFailureKind.NOT_FOUND


class TestFetchAndPull:
    def test_fetch_updates_tracking_branches(self, layer: FakeObjectLayer) -> None:
        sha = layer.branches["main"]
        layer.remotes["origin"] = "https://example.com/repo.git"
        layer.remote_heads["origin"] = {"main": sha}

        fetch(layer, GitHubTokenAuth())

        assert layer.remote_branches["origin"] == {"main": sha}

    def test_fetch_all_continues_after_failure(self, layer: FakeObjectLayer) -> None:
        layer.remotes = {"origin": "u1", "backup": "u2", "mirror": "u3"}
        layer.fail("sync:backup", SyncError("connection reset", remote="backup"))
        started: list[str] = []

        outcomes = fetch_all(layer, GitHubTokenAuth(), on_start=started.append)

        assert started == ["origin", "backup", "mirror"]
        assert [(o.item, o.ok) for o in outcomes] == [
            ("origin", True),
            ("backup", False),
            ("mirror", True),
        ]
        assert outcomes[1].error == "connection reset"

    def test_fetch_all_reports_failure_before_next_remote(
        self, layer: FakeObjectLayer
    ) -> None:
        layer.remotes = {"origin": "u1", "backup": "u2"}
        error = SyncError(
            "HTTP 401", kind=SyncFailureKind.AUTH_REQUIRED, remote="origin"
        )
        layer.fail("sync:origin", error)
        events: list[str] = []

        _ = fetch_all(
            layer,
            GitHubTokenAuth(),
            on_start=lambda name: events.append(f"start {name}"),
            on_failure=lambda name, e: events.append(
                f"fail {name} {classify_sync_error(e).value}"
            ),
        )

        assert events == ["start origin", "fail origin auth_required", "start backup"]

    def test_pull_fast_forwards(self, layer: FakeObjectLayer) -> None:
        _ = layer.create_branch("upstream-work")
        layer.set_head("upstream-work")
        tip = layer.commit_files("Remote work", {"remote.txt": "r"})
        layer.checkout("main")
        layer.remotes["origin"] = "https://example.com/repo.git"
        layer.remote_heads["origin"] = {"main": tip}

        pull(layer, GitHubTokenAuth())

        assert layer.branches["main"] == tip
        assert layer.workdir["remote.txt"] == "r"

    def test_pull_missing_branch(self, layer: FakeObjectLayer) -> None:
        layer.remotes["origin"] = "https://example.com/repo.git"
        with pytest.raises(SyncError, match="couldn't find remote ref"):
            pull(layer, GitHubTokenAuth(), branch="develop")
