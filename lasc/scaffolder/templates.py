"""Jinja2 template rendering for project scaffolding.

The template catalogue is embedded in this module as string constants and
served through a ``DictLoader``; nothing is looked up on disk at run time.
``TemplateRenderer`` renders catalogue entries straight into files under the
scaffold root, always truncating whatever was there before.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from jinja2 import DictLoader, Environment, StrictUndefined, Template, TemplateError


# ---------------------------------------------------------------------------
# Embedded template catalogue
# ---------------------------------------------------------------------------

TEMPLATE_SUFFIX = ".j2"

DOCKERFILE_TEMPLATE = """\
# syntax=docker/dockerfile:1
# Build context: {{ BuildDirectory }}
#   docker build -t <image> {{ BuildDirectory }}

FROM golang:1.22 AS build
WORKDIR /src
COPY go.mod go.sum ./
RUN go mod download
COPY . .
RUN CGO_ENABLED=0 GOOS=linux go build -tags lambda.norpc -o /bootstrap .

FROM public.ecr.aws/lambda/provided:al2023
COPY --from=build /bootstrap ./bootstrap
ENTRYPOINT ["./bootstrap"]
"""

MAIN_GO_TEMPLATE = """\
package main

import (
	"context"
	"encoding/json"

	"github.com/aws/aws-lambda-go/lambda"
)

func handler(ctx context.Context, event json.RawMessage) (json.RawMessage, error) {
	return event, nil
}

func main() {
	lambda.Start(handler)
}
"""

TEMPLATES: dict[str, str] = {
    "Dockerfile.j2": DOCKERFILE_TEMPLATE,
    "main.go.j2": MAIN_GO_TEMPLATE,
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TemplateRenderError(Exception):
    """Raised when the catalogue cannot be parsed or a target cannot be written."""


# ---------------------------------------------------------------------------
# Render targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateTarget:
    """One catalogue template, where it goes, and what it is rendered with."""

    template_name: str
    destination: str
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def for_template(cls, template_name: str, params: Mapping[str, Any] | None = None) -> "TemplateTarget":
        """Build a target whose destination is *template_name* minus ``.j2``."""
        return cls(
            template_name=template_name,
            destination=strip_template_suffix(template_name),
            params=dict(params or {}),
        )


def strip_template_suffix(template_name: str) -> str:
    """``"main.go.j2"`` -> ``"main.go"``; names without the suffix are unchanged."""
    if template_name.endswith(TEMPLATE_SUFFIX):
        return template_name[: -len(TEMPLATE_SUFFIX)]
    return template_name


def catalogue_targets(build_directory: str | Path) -> list[TemplateTarget]:
    """The fixed set of files rendered into every scaffold.

    Args:
        build_directory: Absolute path of the scaffold root; it becomes the
            Docker build context referenced from the Dockerfile.
    """
    return [
        TemplateTarget.for_template("Dockerfile.j2", {"BuildDirectory": str(build_directory)}),
        TemplateTarget.for_template("main.go.j2"),
    ]


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the embedded Jinja2 catalogue for project scaffolding.

    Referencing a parameter the context does not provide is an error
    (``StrictUndefined``) rather than an empty string.
    """

    def __init__(self, templates: Mapping[str, str] | None = None) -> None:
        self.templates = dict(TEMPLATES if templates is None else templates)
        self.env = Environment(
            loader=DictLoader(self.templates),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def list_templates(self) -> list[str]:
        """Return the sorted catalogue template names."""
        return sorted(self.env.list_templates())

    def load_all(self) -> dict[str, Template]:
        """Parse every catalogue template up front.

        Raises:
            TemplateRenderError: If any template has a syntax error.  Nothing
                has been written when this is raised.
        """
        try:
            return {name: self.env.get_template(name) for name in self.list_templates()}
        except TemplateError as exc:
            raise TemplateRenderError(f"cannot parse templates: {exc}") from exc

    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """Render a single template to a string."""
        try:
            return self.env.get_template(template_name).render(**context)
        except TemplateError as exc:
            raise TemplateRenderError(
                f"failed to execute template ({template_name}): {exc}"
            ) from exc

    async def render_targets(self, root: Path, targets: list[TemplateTarget]) -> list[Path]:
        """Render every target into *root*, in order.

        The whole catalogue is parsed before the first destination is opened.
        The first failure aborts the remaining targets; a half-written file
        may be left behind.

        Returns:
            The written destination paths.
        """
        compiled = self.load_all()
        written: list[Path] = []
        for target in targets:
            template = compiled.get(target.template_name)
            if template is None:
                raise TemplateRenderError(f"unknown template: {target.template_name}")
            dest = Path(root) / target.destination
            await asyncio.to_thread(_stream_to_file, template, dest, target)
            written.append(dest)
        return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _stream_to_file(template: Template, dest: Path, target: TemplateTarget) -> None:
    """Truncate-create *dest* and stream the rendered template into it.

    Parent directories are not created.
    """
    try:
        out = open(dest, "w", encoding="utf-8")
    except OSError as exc:
        raise TemplateRenderError(f"cannot open file {dest}: {exc}") from exc

    with out:
        try:
            template.stream(**target.params).dump(out)
        except TemplateError as exc:
            raise TemplateRenderError(
                f"failed to execute template ({target.template_name}): {exc}"
            ) from exc
