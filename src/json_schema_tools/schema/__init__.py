"""Schema tree model, reference parsing and resolution.

Example usage::

    from json_schema_tools.schema import SchemaDocument, build_graph

    graph = build_graph([SchemaDocument.from_value(value, "A")])
"""

from __future__ import annotations

from json_schema_tools.schema.loader import SchemaLoader
from json_schema_tools.schema.ref_resolver import ReferenceGraph, build_graph, resolve
from json_schema_tools.schema.refs import parse_reference
from json_schema_tools.schema.tree import SchemaDocument, SchemaNode
from json_schema_tools.schema.types import (
    LintFinding,
    Location,
    NodeKind,
    Reference,
    ReferenceEdge,
    Severity,
)

__all__ = [
    "LintFinding",
    "Location",
    "NodeKind",
    "Reference",
    "ReferenceEdge",
    "ReferenceGraph",
    "SchemaDocument",
    "SchemaLoader",
    "SchemaNode",
    "Severity",
    "build_graph",
    "parse_reference",
    "resolve",
]
