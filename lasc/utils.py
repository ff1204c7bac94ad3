"""Shared utility functions for lasc.

Provides async command execution (the gateway every external ``go`` tool
invocation goes through), file-system helpers and Rich-based progress
reporting.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CommandError(Exception):
    """Raised when an external tool cannot be spawned or exits non-zero."""

    def __init__(self, cmd: list[str], message: str, returncode: int | None = None) -> None:
        self.cmd = cmd
        self.returncode = returncode
        super().__init__(f"`{' '.join(cmd)}` {message}")


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Program and arguments.  No shell is involved.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits for the process however long it takes.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.

    Raises:
        OSError: If the program cannot be spawned (e.g. not on ``PATH``).
    """
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


async def check_command(
    runner,
    cmd: list[str],
    cwd: Path,
    timeout: int | None = None,
) -> str:
    """Run *cmd* through *runner* and raise ``CommandError`` unless it succeeds.

    *runner* has the signature of :func:`run_command`.  Returns stdout.
    """
    try:
        returncode, stdout, stderr = await runner(cmd, cwd=cwd, timeout=timeout)
    except OSError as exc:
        raise CommandError(cmd, f"could not be started: {exc}") from exc

    if returncode != 0:
        detail = f": {stderr}" if stderr else ""
        raise CommandError(cmd, f"exited with status {returncode}{detail}", returncode)
    return stdout


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


def path_exists(path: str | Path) -> bool:
    """Return ``True`` if anything can be stat'ed at *path*."""
    try:
        Path(path).stat()
    except OSError:
        return False
    return True


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step(index: int, total: int, name: str) -> None:
    """Print a dim ``[n/total] name`` progress line."""
    console.print(f"[dim]{escape(f'[{index}/{total}]')}[/dim] [bold cyan]{name}[/bold cyan]")


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(Text(key), Text(str(value)))

    console.print(table)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)
