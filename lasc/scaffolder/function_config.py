"""Deployment descriptor (``config.cue``) generation.

The descriptor is declared as an explicit, ordered schema of typed fields.
``encode_schema`` turns the schema into a ``Document`` in which every field
is an unset slot, ``Document.fill_path`` sets defaults by dotted field path,
and ``format_document`` prints the result as CUE.  Fields without a default
stay unset and are printed as their type (``FunctionName: string``) so the
operator has to supply them before deploying.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DocumentError(Exception):
    """Raised for invalid field paths, mistyped values or unprintable documents."""


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class Kind(str, Enum):
    """Scalar field types, named as CUE spells them."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"

    def accepts(self, value: Any) -> bool:
        # bool is an int subclass; keep the two apart.
        if self is Kind.BOOL:
            return isinstance(value, bool)
        if self is Kind.INT:
            return isinstance(value, int) and not isinstance(value, bool)
        return isinstance(value, str)


class SchemaField(BaseModel):
    """A named field: either a scalar ``kind`` or a nested struct of ``children``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    kind: Kind | None = None
    children: tuple["SchemaField", ...] = ()

    @model_validator(mode="after")
    def _scalar_or_struct(self) -> "SchemaField":
        if (self.kind is None) == (not self.children):
            raise ValueError(f"field {self.name!r} must have exactly one of kind or children")
        return self


FUNCTION_INPUT_SCHEMA: tuple[SchemaField, ...] = (
    SchemaField(name="FunctionName", kind=Kind.STRING),
    SchemaField(name="PackageType", kind=Kind.STRING),
    SchemaField(name="Role", kind=Kind.STRING),
    SchemaField(name="MemorySize", kind=Kind.INT),
    SchemaField(name="Publish", kind=Kind.BOOL),
    SchemaField(name="Timeout", kind=Kind.INT),
    SchemaField(
        name="Code",
        children=(SchemaField(name="ImageUri", kind=Kind.STRING),),
    ),
)

# Field path -> default.  FunctionName, Role and Code.ImageUri have none.
FUNCTION_CONFIG_DEFAULTS: dict[str, Any] = {
    "PackageType": "Image",
    "MemorySize": 128,
    "Timeout": 10,
    "Publish": True,
}


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Slot:
    """A scalar field in a document; ``value is None`` means unset."""

    kind: Kind
    value: Any = None

    @property
    def is_set(self) -> bool:
        return self.value is not None


class Document:
    """An ordered struct of ``Slot`` and nested ``Document`` entries.

    Documents are immutable: ``fill_path`` returns a new document.
    """

    def __init__(self, entries: Mapping[str, "Slot | Document"]) -> None:
        self._entries: dict[str, Slot | Document] = dict(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, label: str) -> "Slot | Document":
        return self._entries[label]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Document({self._entries!r})"

    def items(self) -> list[tuple[str, "Slot | Document"]]:
        return list(self._entries.items())

    def lookup(self, path: str) -> "Slot | Document":
        """Return the entry at dotted *path* (e.g. ``"Code.ImageUri"``)."""
        node: Slot | Document = self
        for label in parse_path(path):
            if not isinstance(node, Document) or label not in node._entries:
                raise DocumentError(f"field not found: {path}")
            node = node._entries[label]
        return node

    def fill_path(self, path: str, value: Any) -> "Document":
        """Return a copy of this document with the scalar at *path* set to *value*.

        Raises:
            DocumentError: If the path does not name a scalar field, the
                value does not match the field's kind, or the field already
                holds a different value.
        """
        return self._fill(parse_path(path), path, value)

    def _fill(self, labels: list[str], path: str, value: Any) -> "Document":
        head, rest = labels[0], labels[1:]
        if head not in self._entries:
            raise DocumentError(f"field not found: {path}")
        entry = self._entries[head]

        if rest:
            if not isinstance(entry, Document):
                raise DocumentError(f"{path}: {head} is not a struct")
            replacement: Slot | Document = entry._fill(rest, path, value)
        else:
            if isinstance(entry, Document):
                raise DocumentError(f"{path}: cannot fill a struct with a scalar")
            if not entry.kind.accepts(value):
                raise DocumentError(
                    f"{path}: conflicting values {entry.kind.value} and {value!r}"
                )
            if entry.is_set and entry.value != value:
                raise DocumentError(
                    f"{path}: conflicting values {entry.value!r} and {value!r}"
                )
            replacement = Slot(kind=entry.kind, value=value)

        return Document({**self._entries, head: replacement})

    def to_dict(self) -> dict[str, Any]:
        """Plain nested dict; unset slots map to ``None``."""
        return {
            label: entry.to_dict() if isinstance(entry, Document) else entry.value
            for label, entry in self._entries.items()
        }


def parse_path(path: str) -> list[str]:
    """Split a dotted field path, rejecting empty segments."""
    labels = path.split(".")
    if not path or any(not label for label in labels):
        raise DocumentError(f"invalid field path: {path!r}")
    return labels


def encode_schema(schema: tuple[SchemaField, ...]) -> Document:
    """Encode *schema* as a document of unset slots, preserving field order and names."""
    entries: dict[str, Slot | Document] = {}
    for schema_field in schema:
        if schema_field.name in entries:
            raise DocumentError(f"duplicate field: {schema_field.name}")
        if schema_field.children:
            entries[schema_field.name] = encode_schema(schema_field.children)
        else:
            entries[schema_field.name] = Slot(kind=schema_field.kind)
    return Document(entries)


# ---------------------------------------------------------------------------
# CUE formatting
# ---------------------------------------------------------------------------

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def format_document(document: Document, indent: int = 2) -> str:
    """Print *document* as CUE source ending in exactly one newline.

    Top-level fields are emitted without enclosing braces, one per line in
    declaration order.  Labels are quoted only when they are not plain
    identifiers.
    """
    if indent < 1:
        raise DocumentError(f"indent must be positive, got {indent}")
    lines: list[str] = []
    _format_entries(document, 0, indent, lines)
    return "\n".join(lines) + "\n"


def _format_entries(document: Document, depth: int, indent: int, lines: list[str]) -> None:
    pad = " " * (indent * depth)
    for label, entry in document.items():
        key = _format_label(label)
        if isinstance(entry, Document):
            if not len(entry):
                lines.append(f"{pad}{key}: {{}}")
                continue
            lines.append(f"{pad}{key}: {{")
            _format_entries(entry, depth + 1, indent, lines)
            lines.append(f"{pad}}}")
        else:
            lines.append(f"{pad}{key}: {_format_value(label, entry)}")


def _format_label(label: str) -> str:
    # A leading underscore makes a hidden field in CUE.
    if _IDENTIFIER_RE.match(label) and not label.startswith("_"):
        return label
    return json.dumps(label, ensure_ascii=False)


def _format_value(label: str, slot: Slot) -> str:
    if not slot.is_set:
        return slot.kind.value
    value = slot.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    raise DocumentError(f"failed to format CUE node: {label}: unsupported value {value!r}")


# ---------------------------------------------------------------------------
# Materializer
# ---------------------------------------------------------------------------


class FunctionConfigMaterializer:
    """Builds and prints the deployment descriptor with its defaults filled in."""

    def __init__(
        self,
        schema: tuple[SchemaField, ...] = FUNCTION_INPUT_SCHEMA,
        defaults: Mapping[str, Any] | None = None,
        indent: int = 2,
    ) -> None:
        self.schema = schema
        self.defaults = dict(FUNCTION_CONFIG_DEFAULTS if defaults is None else defaults)
        self.indent = indent

    def build_document(self) -> Document:
        """Encode the schema and fill every default, in insertion order."""
        document = encode_schema(self.schema)
        for path, value in self.defaults.items():
            document = document.fill_path(path, value)
        return document

    def render(self) -> str:
        """Return the formatted descriptor text."""
        return format_document(self.build_document(), indent=self.indent)
