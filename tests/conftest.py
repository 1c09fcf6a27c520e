"""Shared test fixtures for gitlite tests."""

from collections.abc import Iterator

import pytest
from rich.console import Console

from gitlite.cli import CLIContext
from gitlite.repository import Author, FakeObjectLayer

_ISOLATED_ENV = (
    "GITHUB_TOKEN",
    "GITLITE_AUTHOR_EMAIL",
    "GITLITE_AUTHOR_NAME",
    "GITLITE_CONFIG",
    "GITLITE_DEBUG",
    "GITLITE_DEFAULT_BRANCH",
    "GITLITE_LOG_FORMAT",
    "GITLITE_LOG_LEVEL",
    "GITLITE_STRICT_CONFIG",
)


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep user config, tokens and log files out of every test."""
    home = tmp_path_factory.mktemp("home")
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(home / "state"))
    monkeypatch.setenv("GITLITE_LOG_FILE", str(home / "logs" / "cli.log"))
    CLIContext.reset()
    yield
    CLIContext.reset()


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture
def author() -> Author:
    return Author(name="Test User", email="test@example.com")


@pytest.fixture
def layer() -> FakeObjectLayer:
    """In-memory object layer with one commit on main."""
    fake = FakeObjectLayer()
    fake.commit_files("Initial commit", {"README.md": "hello\n"})
    return fake


@pytest.fixture
def unborn_layer() -> FakeObjectLayer:
    """In-memory object layer with no commits."""
    return FakeObjectLayer()
