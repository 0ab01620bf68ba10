"""In-memory schema tree model: documents and read-only node views."""

from __future__ import annotations

import copy
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from json_schema_tools.errors import SchemaParseError
from json_schema_tools.schema.types import Location, NodeKind, PathEntry, SchemaPath

__all__ = [
    "MAP_KEYWORDS",
    "LIST_KEYWORDS",
    "SINGLE_KEYWORDS",
    "COMPOSITION_KEYWORDS",
    "DEFS_KEYS",
    "PRIMITIVE_TYPES",
    "SchemaDocument",
    "SchemaNode",
    "is_schema",
    "is_schema_path",
    "subschema_entries",
]

# Keywords whose value is a name -> subschema mapping.
MAP_KEYWORDS = ("properties", "patternProperties", "$defs", "definitions")
# Keywords whose value is a list of subschemas.
LIST_KEYWORDS = ("allOf", "oneOf", "anyOf", "prefixItems")
# Keywords whose value is a single subschema ("items" may also be a list).
SINGLE_KEYWORDS = (
    "items",
    "additionalProperties",
    "not",
    "contains",
    "propertyNames",
    "if",
    "then",
    "else",
)
COMPOSITION_KEYWORDS = ("allOf", "oneOf", "anyOf")
DEFS_KEYS = ("$defs", "definitions")
PRIMITIVE_TYPES = frozenset(
    {"string", "integer", "number", "boolean", "array", "object", "null"}
)


def is_schema(value: Any) -> bool:
    """JSON Schema allows objects and the boolean schemas true/false."""
    return isinstance(value, (dict, bool))


def subschema_entries(value: Any) -> Iterator[tuple[SchemaPath, Any]]:
    """Yield (relative path, subschema) for every direct subschema of value.

    Entries come out in declaration order. Keyword values that are data
    (enum, const, examples, required, ...) are never yielded.
    """
    if not isinstance(value, dict):
        return
    for key, child in value.items():
        if key in MAP_KEYWORDS:
            if isinstance(child, dict):
                for name, sub in child.items():
                    if is_schema(sub):
                        yield (key, name), sub
        elif key in LIST_KEYWORDS or (key == "items" and isinstance(child, list)):
            if isinstance(child, list):
                for index, sub in enumerate(child):
                    if is_schema(sub):
                        yield (key, index), sub
        elif key in SINGLE_KEYWORDS and is_schema(child):
            yield (key,), child


def is_schema_path(root: Any, path: SchemaPath) -> bool:
    """Check that path addresses a subschema position of root."""
    if not is_schema(root):
        return False
    value = root
    i = 0
    while i < len(path):
        key = path[i]
        if not isinstance(value, dict) or key not in value:
            return False
        child = value[key]
        if key in MAP_KEYWORDS:
            if i + 1 >= len(path) or not isinstance(child, dict):
                return False
            name = path[i + 1]
            if name not in child:
                return False
            value = child[name]
            i += 2
        elif key in LIST_KEYWORDS or (key == "items" and isinstance(child, list)):
            if i + 1 >= len(path) or not isinstance(child, list):
                return False
            index = path[i + 1]
            if not isinstance(index, int) or not 0 <= index < len(child):
                return False
            value = child[index]
            i += 2
        elif key in SINGLE_KEYWORDS:
            value = child
            i += 1
        else:
            return False
        if not is_schema(value):
            return False
    return True


@dataclass(frozen=True)
class SchemaDocument:
    """A named schema tree.

    ``root`` is owned by the document: ``from_value`` deep-copies the
    caller's tree and nothing in this package mutates it afterwards.
    """

    document_id: str
    root: Any

    @classmethod
    def from_value(cls, value: Any, document_id: str | None = None) -> SchemaDocument:
        """Build a document from a parsed JSON value.

        The identifier defaults to the document's ``$id``.
        """
        if document_id is None:
            declared = value.get("$id") if isinstance(value, dict) else None
            if not isinstance(declared, str) or not declared:
                raise SchemaParseError(
                    message="Schema document has no identifier and no '$id'"
                )
            document_id = declared
        if not is_schema(value):
            raise SchemaParseError(
                message=f"Schema document '{document_id}' must be an object or boolean, "
                f"got {type(value).__name__}"
            )
        return cls(document_id=document_id, root=copy.deepcopy(value))

    def __hash__(self) -> int:
        return hash(self.document_id)

    @property
    def defs(self) -> dict[str, Any]:
        """Definition name -> subschema over all defs tables of the root."""
        result: dict[str, Any] = {}
        for name, (_, value) in self.definitions().items():
            result[name] = value
        return result

    def definitions(self) -> dict[str, tuple[Location, Any]]:
        """Definition name -> (location, subschema), ``$defs`` winning over ``definitions``."""
        result: dict[str, tuple[Location, Any]] = {}
        if not isinstance(self.root, dict):
            return result
        for defs_key in DEFS_KEYS:
            table = self.root.get(defs_key)
            if not isinstance(table, dict):
                continue
            for name, value in table.items():
                if name not in result and is_schema(value):
                    result[name] = (Location(self.document_id, (defs_key, name)), value)
        return result

    @property
    def location(self) -> Location:
        return Location(self.document_id)

    def node(self, path: SchemaPath = ()) -> SchemaNode:
        """Return a view of the subschema at path (which must exist)."""
        value = self.root
        for entry in path:
            value = value[entry]
        return SchemaNode(self, path, value)

    def is_definition(self, path: SchemaPath) -> bool:
        """True when path names an entry of a root-level defs table."""
        return (
            len(path) == 2
            and path[0] in DEFS_KEYS
            and isinstance(self.root, dict)
            and isinstance(self.root.get(path[0]), dict)
            and path[1] in self.root[path[0]]
        )


class SchemaNode:
    """Read-only view of one subschema inside a document."""

    __slots__ = ("document", "path", "value")

    def __init__(self, document: SchemaDocument, path: SchemaPath, value: Any) -> None:
        self.document = document
        self.path = path
        self.value = value

    def __repr__(self) -> str:
        return f"SchemaNode({self.location}, kind={self.kind().value})"

    @property
    def location(self) -> Location:
        return Location(self.document.document_id, self.path)

    def _child(self, *entries: PathEntry) -> SchemaNode:
        value = self.value
        for entry in entries:
            value = value[entry]
        return SchemaNode(self.document, self.path + entries, value)

    def keywords(self) -> list[str]:
        return list(self.value) if isinstance(self.value, dict) else []

    def declared_types(self) -> tuple[str, ...]:
        if not isinstance(self.value, dict):
            return ()
        declared = self.value.get("type")
        if isinstance(declared, str):
            return (declared,)
        if isinstance(declared, list):
            return tuple(t for t in declared if isinstance(t, str))
        return ()

    def kind(self) -> NodeKind:
        value = self.value
        if isinstance(value, bool):
            return NodeKind.BOOLEAN
        if not isinstance(value, dict):
            return NodeKind.EMPTY
        if "$ref" in value:
            return NodeKind.REFERENCE
        if any(k in value for k in COMPOSITION_KEYWORDS):
            return NodeKind.COMPOSITION
        if "enum" in value or "const" in value:
            return NodeKind.ENUMERATION
        types = self.declared_types()
        if "object" in types or "properties" in value:
            return NodeKind.OBJECT
        if "array" in types or "items" in value:
            return NodeKind.ARRAY
        if types:
            return NodeKind.PRIMITIVE
        return NodeKind.EMPTY

    def as_object_properties(self) -> dict[str, SchemaNode] | None:
        if not isinstance(self.value, dict):
            return None
        properties = self.value.get("properties")
        if not isinstance(properties, dict):
            return None
        return {
            name: self._child("properties", name)
            for name, sub in properties.items()
            if is_schema(sub)
        }

    def as_array_items(self) -> SchemaNode | list[SchemaNode] | None:
        if not isinstance(self.value, dict) or "items" not in self.value:
            return None
        items = self.value["items"]
        if isinstance(items, list):
            return [self._child("items", i) for i, sub in enumerate(items) if is_schema(sub)]
        if is_schema(items):
            return self._child("items")
        return None

    def as_reference(self) -> Any | None:
        """The raw ``$ref`` value, or None when this is not a reference node."""
        if isinstance(self.value, dict):
            return self.value.get("$ref")
        return None

    def as_composition(self) -> tuple[str, list[SchemaNode]] | None:
        """(keyword, branches) for the first composition keyword present."""
        if not isinstance(self.value, dict):
            return None
        for keyword in COMPOSITION_KEYWORDS:
            if keyword in self.value:
                branches = self.value[keyword]
                if not isinstance(branches, list):
                    return keyword, []
                return keyword, [
                    self._child(keyword, i) for i, sub in enumerate(branches) if is_schema(sub)
                ]
        return None

    def as_primitive(self) -> tuple[str, ...] | None:
        if self.kind() != NodeKind.PRIMITIVE:
            return None
        return self.declared_types()

    def as_enumeration(self) -> list[Any] | None:
        if not isinstance(self.value, dict):
            return None
        if "enum" in self.value:
            values = self.value["enum"]
            return list(values) if isinstance(values, list) else None
        if "const" in self.value:
            return [self.value["const"]]
        return None

    def children(self) -> Iterator[SchemaNode]:
        for entries, value in subschema_entries(self.value):
            yield SchemaNode(self.document, self.path + entries, value)

    def walk(self) -> Iterator[SchemaNode]:
        """Pre-order traversal, children in declaration order."""
        yield self
        for child in self.children():
            yield from child.walk()
