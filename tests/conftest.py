"""Shared test fixtures for json-schema-tools tests."""

from __future__ import annotations

from typing import Any

import pytest

from json_schema_tools.schema.tree import SchemaDocument


def make_document(value: Any, document_id: str = "main") -> SchemaDocument:
    return SchemaDocument.from_value(value, document_id)


@pytest.fixture
def point_document() -> SchemaDocument:
    """Document "A" holding a reusable Point definition."""
    return make_document(
        {
            "$defs": {
                "Point": {
                    "type": "object",
                    "properties": {
                        "x": {"type": "number"},
                        "y": {"type": "number"},
                    },
                    "required": ["x", "y"],
                },
            },
        },
        "A",
    )


@pytest.fixture
def line_document() -> SchemaDocument:
    """Document "B" whose Line references A's Point twice."""
    return make_document(
        {
            "$defs": {
                "Line": {
                    "type": "object",
                    "properties": {
                        "start": {"$ref": "A#/$defs/Point"},
                        "end": {"$ref": "A#/$defs/Point"},
                    },
                },
            },
        },
        "B",
    )


@pytest.fixture
def tree_document() -> SchemaDocument:
    """A recursive schema: a Node whose children are Nodes."""
    return make_document(
        {
            "type": "object",
            "properties": {"root": {"$ref": "#/$defs/Node"}},
            "$defs": {
                "Node": {
                    "type": "object",
                    "properties": {
                        "value": {"type": "string"},
                        "children": {"type": "array", "items": {"$ref": "#/$defs/Node"}},
                    },
                },
            },
        },
        "tree",
    )
