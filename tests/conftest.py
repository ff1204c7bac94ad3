"""Shared pytest fixtures for the lasc test suite.

Provides reusable fixtures for:
- Temporary scaffold targets
- A fake ``go`` command runner that records calls and mimics side effects
- A ``ScaffoldConfig`` pointing at the temporary target
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import pytest

from lasc.config import ScaffoldConfig


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Scaffold target that does not exist yet (the generator creates it)."""
    return tmp_path / "my-function"


@pytest.fixture
def scaffold_config(tmp_project_dir: Path) -> ScaffoldConfig:
    return ScaffoldConfig(root_dir=tmp_project_dir)


# ---------------------------------------------------------------------------
# Fake go toolchain
# ---------------------------------------------------------------------------

GoRunnerFactory = Callable[..., AsyncMock]


@pytest.fixture
def make_go_runner() -> GoRunnerFactory:
    """Factory for an ``AsyncMock`` standing in for ``run_command``.

    The mock writes ``go.mod`` on ``mod init`` and ``go.sum`` on ``mod tidy``
    so later steps see the same files a real toolchain would leave.  Pass
    ``fail_on=["fmt"]`` (arguments after the binary) to make that command
    exit 1 with ``stderr="boom"``.
    """

    def factory(fail_on: list[str] | None = None) -> AsyncMock:
        async def _fake_go(cmd, cwd=None, timeout=None):
            args = list(cmd[1:])
            root = Path(cwd)
            if fail_on is not None and args == fail_on:
                return (1, "", "boom")
            if args[:2] == ["mod", "init"]:
                (root / "go.mod").write_text("module example.com/fn\n\ngo 1.22\n", encoding="utf-8")
            elif args == ["mod", "tidy"]:
                (root / "go.sum").write_text("", encoding="utf-8")
            return (0, "", "")

        return AsyncMock(side_effect=_fake_go)

    return factory


@pytest.fixture
def go_runner(make_go_runner: GoRunnerFactory) -> AsyncMock:
    """A fake go runner on which every command succeeds."""
    return make_go_runner()


@pytest.fixture
def invoked_commands() -> Callable[[AsyncMock], list[list[str]]]:
    """Return a helper listing the arguments (without the binary) of every runner call."""

    def _commands(runner: AsyncMock) -> list[list[str]]:
        return [list(c.args[0][1:]) for c in runner.call_args_list]

    return _commands
