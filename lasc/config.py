"""lasc configuration.

Typed settings for a scaffold run.  Uses a Pydantic v2 model so values are
validated at construction time and can be built from environment variables
without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class ScaffoldConfig(BaseModel):
    """Settings for one scaffold run against a single target directory."""

    root_dir: Path = Field(default=Path("."), description="Directory the project is generated into")
    go_binary: str = Field(default="go", min_length=1, description="Go toolchain executable")
    module_path: str | None = Field(
        default=None, description="Module path passed to `go mod init` (toolchain default if unset)"
    )
    command_timeout: int | None = Field(
        default=None, ge=1, description="Per-command deadline in seconds; unset waits forever"
    )
    manifest_name: str = Field(default="go.mod")
    config_name: str = Field(default="config.cue")

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def manifest_path(self) -> Path:
        """Module manifest; its presence means the module is initialised."""
        return self.root_dir / self.manifest_name

    @property
    def config_path(self) -> Path:
        """Deployment descriptor; its presence means it must not be rewritten."""
        return self.root_dir / self.config_name

    @classmethod
    def from_env(cls, **overrides: Any) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            LASC_ROOT, LASC_GO_BINARY, LASC_MODULE_PATH, LASC_COMMAND_TIMEOUT.

        Keyword *overrides* win over the environment; ``None`` overrides are
        ignored so unset CLI options fall through.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("LASC_ROOT"):
            kwargs["root_dir"] = Path(os.environ["LASC_ROOT"])
        if os.environ.get("LASC_GO_BINARY"):
            kwargs["go_binary"] = os.environ["LASC_GO_BINARY"]
        if os.environ.get("LASC_MODULE_PATH"):
            kwargs["module_path"] = os.environ["LASC_MODULE_PATH"]
        if os.environ.get("LASC_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["LASC_COMMAND_TIMEOUT"])

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
