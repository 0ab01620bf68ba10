"""Core data types shared by the resolver, linter and combiner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

__all__ = [
    "PathEntry",
    "SchemaPath",
    "Location",
    "NodeKind",
    "Severity",
    "Reference",
    "ReferenceEdge",
    "LintFinding",
    "encode_pointer",
]

PathEntry = Union[str, int]
SchemaPath = tuple[PathEntry, ...]


def encode_pointer(path: SchemaPath) -> str:
    """Render a path as an RFC 6901 JSON Pointer (``""`` for the root)."""
    return "".join(
        "/" + str(entry).replace("~", "~0").replace("/", "~1") for entry in path
    )


@dataclass(frozen=True)
class Location:
    """A position inside one schema document."""

    document_id: str
    path: SchemaPath = ()

    def child(self, *entries: PathEntry) -> Location:
        return Location(self.document_id, self.path + entries)

    @property
    def pointer(self) -> str:
        return encode_pointer(self.path)

    def __str__(self) -> str:
        return f"{self.document_id}#{self.pointer}"


class NodeKind(str, Enum):
    """Shape of a schema node, in classification precedence order."""

    REFERENCE = "reference"
    COMPOSITION = "composition"
    ENUMERATION = "enumeration"
    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    BOOLEAN = "boolean"
    EMPTY = "empty"


class Severity(str, Enum):
    """Lint finding severity. Only errors block combining."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Reference:
    """A parsed ``$ref``: target document plus a path inside it.

    ``local`` marks a same-document ("self") reference; ``document_id`` is
    then already bound to the referencing document.
    """

    document_id: str
    path: SchemaPath
    raw: str
    local: bool = False

    @property
    def target(self) -> Location:
        return Location(self.document_id, self.path)


@dataclass(frozen=True)
class ReferenceEdge:
    """One resolved hop from a reference node to the subschema it names."""

    source: Location
    target: Location
    reference: Reference


@dataclass(frozen=True)
class LintFinding:
    """One problem reported by the linter."""

    severity: Severity
    location: Location
    message: str
    rule: str = field(default="")

    def __str__(self) -> str:
        return f"{self.severity.value} {self.location} [{self.rule}] {self.message}"
