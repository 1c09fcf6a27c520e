from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from gitlite.cli import create_app


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory the CLI runs in."""
    path = tmp_path / "project"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def gitlite_cli(console: Console) -> Callable[..., int]:
    """Run the CLI through its global-option layer and return the exit code.

    Output goes to the console fixture, which writes to captured stdout.
    """

    def _run(*args: str) -> int:
        app = create_app(console=console, error_console=console)
        try:
            app.meta(list(args))
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 0
        return 0

    return _run


@pytest.fixture
def repo(project: Path, gitlite_cli: Callable[..., int], capsys: pytest.CaptureFixture[str]) -> Path:
    """Initialized repository with the initial commit; output discarded."""
    assert gitlite_cli("init") == 0
    _ = capsys.readouterr()
    return project
