"""Main scaffolding orchestrator.

Runs the fixed scaffold pipeline against one target directory:

1. initialize module   -- ``go mod init`` unless ``go.mod`` already exists
2. build files         -- render the template catalogue (always overwrites)
3. format files        -- ``go fmt``
4. install dependencies -- ``go mod tidy`` then ``go mod download``
5. write function config -- ``config.cue`` unless it already exists

The first failing step stops the run; files written by earlier steps are
left in place.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable

from lasc.config import ScaffoldConfig
from lasc.utils import (
    CommandError,
    check_command,
    console,
    ensure_dir,
    format_duration,
    path_exists,
    print_step,
    run_command,
)

from .function_config import DocumentError, FunctionConfigMaterializer
from .templates import TemplateRenderError, TemplateRenderer, catalogue_targets

CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]

# Failures a step may raise; anything else is a bug and propagates unwrapped.
_STEP_ERRORS = (CommandError, TemplateRenderError, DocumentError, OSError)


# ---------------------------------------------------------------------------
# Exceptions / results
# ---------------------------------------------------------------------------


class ScaffoldError(Exception):
    """Raised when a pipeline step fails; names the step that failed."""

    def __init__(self, step: str, cause: Exception) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"failed to {step}: {cause}")


@dataclass(frozen=True)
class StepResult:
    name: str
    skipped: bool = False
    duration: float = 0.0


@dataclass
class ScaffoldResult:
    """What a completed run did, step by step."""

    root_dir: Path
    steps: list[StepResult] = field(default_factory=list)

    def summary(self) -> dict[str, str]:
        rows = {"Root": str(self.root_dir)}
        for step in self.steps:
            rows[step.name] = "skipped" if step.skipped else f"done ({format_duration(step.duration)})"
        return rows


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Scaffolds a Go Lambda function project into ``config.root_dir``.

    Args:
        config: Run settings.  ``root_dir`` is resolved to an absolute path
            once, here.
        runner: Coroutine with the signature of :func:`lasc.utils.run_command`;
            every external ``go`` invocation goes through it.
        renderer: Template renderer; defaults to the embedded catalogue.
        materializer: Builds the ``config.cue`` contents.
    """

    # (label, method) in execution order; labels appear in error messages.
    _STEPS: tuple[tuple[str, str], ...] = (
        ("initialize module", "init_module"),
        ("build files", "build_files"),
        ("format files", "format_files"),
        ("install dependencies", "install_dependencies"),
        ("write function config", "write_function_config"),
    )

    def __init__(
        self,
        config: ScaffoldConfig,
        runner: CommandRunner = run_command,
        renderer: TemplateRenderer | None = None,
        materializer: FunctionConfigMaterializer | None = None,
    ) -> None:
        self.config = config.model_copy(update={"root_dir": Path(config.root_dir).resolve()})
        self.runner = runner
        self.renderer = renderer or TemplateRenderer()
        self.materializer = materializer or FunctionConfigMaterializer()

    @property
    def root_dir(self) -> Path:
        return self.config.root_dir

    # -- Public API --------------------------------------------------------

    async def generate(self) -> ScaffoldResult:
        """Run every step in order.

        Returns:
            A ``ScaffoldResult`` listing each step and whether it was skipped.

        Raises:
            ScaffoldError: On the first failing step.
        """
        result = ScaffoldResult(root_dir=self.root_dir)
        total = len(self._STEPS)

        for index, (label, method_name) in enumerate(self._STEPS, start=1):
            print_step(index, total, label)
            started = time.monotonic()
            try:
                ran = await getattr(self, method_name)()
            except _STEP_ERRORS as exc:
                raise ScaffoldError(label, exc) from exc
            result.steps.append(
                StepResult(name=label, skipped=not ran, duration=time.monotonic() - started)
            )

        return result

    # -- Steps ---------------------------------------------------------------
    # Each returns True if it did work, False if it was skipped.

    async def init_module(self) -> bool:
        """Create the root directory and run ``go mod init`` if there is no manifest."""
        await asyncio.to_thread(ensure_dir, self.root_dir)

        if path_exists(self.config.manifest_path):
            console.print(f"  [dim]{self.config.manifest_name} exists, skipping[/dim]")
            return False

        cmd = [self.config.go_binary, "mod", "init"]
        if self.config.module_path:
            cmd.append(self.config.module_path)
        await self._run(cmd)
        return True

    async def build_files(self) -> bool:
        """Render the template catalogue into the root directory."""
        written = await self.renderer.render_targets(
            self.root_dir, catalogue_targets(self.root_dir)
        )
        for path in written:
            console.print(f"  [green]+[/green] {path.name}")
        return True

    async def format_files(self) -> bool:
        await self._run([self.config.go_binary, "fmt"])
        return True

    async def install_dependencies(self) -> bool:
        """``go mod tidy`` then ``go mod download``; both must succeed."""
        await self._run([self.config.go_binary, "mod", "tidy"])
        await self._run([self.config.go_binary, "mod", "download"])
        return True

    async def write_function_config(self) -> bool:
        """Write ``config.cue`` unless one is already there.

        The document is rendered before the file is opened, so a rendering
        failure never leaves an empty ``config.cue`` behind.
        """
        dest = self.config.config_path
        if path_exists(dest):
            console.print(f"  [dim]{self.config.config_name} exists, skipping[/dim]")
            return False

        content = self.materializer.render()
        await asyncio.to_thread(_write_text, dest, content)
        console.print(f"  [green]+[/green] {dest.name}")
        return True

    # -- Helpers -------------------------------------------------------------

    async def _run(self, cmd: list[str]) -> None:
        await check_command(
            self.runner, cmd, cwd=self.root_dir, timeout=self.config.command_timeout
        )


def _write_text(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8") as out:
        out.write(content)
