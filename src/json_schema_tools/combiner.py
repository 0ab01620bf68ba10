"""Combine a set of cross-referencing schemas into one self-contained schema.

Combining runs in two passes over the reference graph:

1. Closure: starting from the root document, follow every reference edge.
   Targets that are named definitions (or other documents' roots) get one
   slot in the merged defs table the first time they are reached; anonymous
   targets are traversed in place because they will be inlined.
2. Copy: every slot and finally the root are copy-constructed with all
   ``$ref`` values rewritten to local pointers into the merged defs table.

The combine either returns a complete :class:`MergedOutput` or raises
:class:`CombinerError`; input documents are never modified.
"""

from __future__ import annotations

import copy
import logging
import re
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from json_schema_tools.errors import CombinerError, CombinerErrorKind, ResolverError
from json_schema_tools.schema.ref_resolver import ReferenceGraph, build_graph
from json_schema_tools.schema.refs import format_local_reference
from json_schema_tools.schema.tree import (
    DEFS_KEYS,
    LIST_KEYWORDS,
    MAP_KEYWORDS,
    SINGLE_KEYWORDS,
    SchemaDocument,
    SchemaNode,
    is_schema,
    subschema_entries,
)
from json_schema_tools.schema.types import Location, NodeKind, ReferenceEdge, SchemaPath

logger = logging.getLogger(__name__)

__all__ = ["MergedOutput", "combine"]

# Dropped from copied definitions: a nested $id would change the base URI
# that the rewritten "#/..." pointers resolve against.
_STRIPPED_KEYWORDS = ("$id", "$schema")


@dataclass
class MergedOutput:
    """The result of a combine: one schema with a single defs table."""

    document_id: str
    schema: Any
    slots: dict[str, Location] = field(default_factory=dict)

    def as_document(self) -> SchemaDocument:
        return SchemaDocument.from_value(self.schema, self.document_id)


def _sanitize(text: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]+", "_", text).strip("_")


def _document_stem(document_id: str) -> str:
    last = document_id.rstrip("/").rsplit("/", 1)[-1]
    return _sanitize(last.split(".", 1)[0]) or "schema"


class _Combiner:
    def __init__(
        self,
        root: SchemaDocument,
        graph: ReferenceGraph,
        prefixes: dict[str, str],
        defs_key: str,
    ) -> None:
        self._root = root
        self._graph = graph
        self._prefixes = prefixes
        self._defs_key = defs_key
        self._edges: dict[Location, ReferenceEdge] = {}
        self._slots: dict[Location, str] = {}
        self._taken: dict[str, Location] = {}
        self._queue: deque[Location] = deque()
        self._queued: set[Location] = set()
        self._inlined: set[Location] = set()

    # -- closure ----------------------------------------------------------

    def _document(self, document_id: str) -> SchemaDocument:
        if document_id == self._root.document_id:
            return self._root
        document = self._graph.document(document_id)
        if document is None:
            raise CombinerError(
                CombinerErrorKind.UNRESOLVABLE_REFERENCE,
                Location(document_id),
                f"document '{document_id}' is not part of the reference graph",
            )
        return document

    def _node(self, location: Location) -> SchemaNode:
        return self._document(location.document_id).node(location.path)

    def _is_root(self, location: Location) -> bool:
        return location.document_id == self._root.document_id and not location.path

    def _is_named(self, location: Location) -> bool:
        if not location.path:
            return True
        return self._document(location.document_id).is_definition(location.path)

    def _assign(self, location: Location) -> str:
        existing = self._slots.get(location)
        if existing is not None:
            return existing
        if location.path:
            name = str(location.path[1])
        else:
            name = _document_stem(location.document_id)
        base = self._prefixes.get(location.document_id, "") + name
        name = base
        if name in self._taken:
            name = f"{base}_{_sanitize(location.document_id) or 'doc'}"
            candidate, counter = name, 2
            while candidate in self._taken:
                candidate = f"{name}_{counter}"
                counter += 1
            name = candidate
        self._slots[location] = name
        self._taken[name] = location
        logger.debug("Assigned definition slot '%s' to %s", name, location)
        return name

    def _enqueue(self, location: Location) -> None:
        self._assign(location)
        if location not in self._queued:
            self._queued.add(location)
            self._queue.append(location)

    def _edge(self, node: SchemaNode) -> ReferenceEdge:
        location = node.location
        edge = self._edges.get(location)
        if edge is None:
            try:
                edge = self._graph.target_of(node)
            except ResolverError as e:
                raise CombinerError(
                    CombinerErrorKind.UNRESOLVABLE_REFERENCE,
                    location,
                    f"reference {e.reference!r} cannot be resolved: {e.reason}",
                    cause=e,
                ) from e
            self._edges[location] = edge
        return edge

    def _visit(
        self,
        document: SchemaDocument,
        path: SchemaPath,
        value: Any,
        inlining: tuple[Location, ...],
    ) -> None:
        node = SchemaNode(document, path, value)
        if node.kind() == NodeKind.REFERENCE:
            self._follow(node, inlining)
        for entries, child in subschema_entries(value):
            if not path and entries[0] in DEFS_KEYS:
                continue
            self._visit(document, path + entries, child, inlining)

    def _follow(self, node: SchemaNode, inlining: tuple[Location, ...]) -> None:
        target = self._edge(node).target
        if self._is_root(target):
            return
        if self._is_named(target):
            self._enqueue(target)
            return
        if target in inlining:
            raise CombinerError(
                CombinerErrorKind.UNBOUNDED_CLOSURE,
                node.location,
                f"anonymous subschema {target} references itself without "
                "passing through a named definition",
            )
        if target in self._inlined:
            return
        target_node = self._node(target)
        self._visit(target_node.document, target.path, target_node.value, inlining + (target,))
        self._inlined.add(target)

    def _close(self) -> None:
        for location, _ in self._root.definitions().values():
            self._enqueue(location)
        self._visit(self._root, (), self._root.root, ())
        while self._queue:
            location = self._queue.popleft()
            node = self._node(location)
            self._visit(node.document, location.path, node.value, ())

    # -- copy -------------------------------------------------------------

    def _copy(self, document: SchemaDocument, path: SchemaPath, value: Any) -> Any:
        if not isinstance(value, dict):
            return copy.deepcopy(value)
        if "$ref" in value:
            return self._copy_reference(document, path, value)
        return self._copy_keywords(document, path, value)

    def _copy_keywords(
        self, document: SchemaDocument, path: SchemaPath, value: dict[str, Any]
    ) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, child in value.items():
            if not path and key in DEFS_KEYS:
                continue
            if key in MAP_KEYWORDS and isinstance(child, dict):
                result[key] = {
                    name: self._copy(document, path + (key, name), sub)
                    if is_schema(sub)
                    else copy.deepcopy(sub)
                    for name, sub in child.items()
                }
            elif (key in LIST_KEYWORDS or key == "items") and isinstance(child, list):
                result[key] = [
                    self._copy(document, path + (key, i), sub)
                    if is_schema(sub)
                    else copy.deepcopy(sub)
                    for i, sub in enumerate(child)
                ]
            elif key in SINGLE_KEYWORDS and is_schema(child):
                result[key] = self._copy(document, path + (key,), child)
            else:
                result[key] = copy.deepcopy(child)
        return result

    def _copy_reference(
        self, document: SchemaDocument, path: SchemaPath, value: dict[str, Any]
    ) -> Any:
        target = self._edge(SchemaNode(document, path, value)).target
        siblings = self._copy_keywords(
            document, path, {k: v for k, v in value.items() if k != "$ref"}
        )

        if self._is_root(target):
            rewritten = "#"
        elif self._is_named(target):
            rewritten = format_local_reference(self._defs_key, self._slots[target])
        else:
            target_node = self._node(target)
            inlined = self._copy(target_node.document, target.path, target_node.value)
            if not siblings:
                return inlined
            if isinstance(inlined, dict):
                inlined.update(siblings)
                return inlined
            return {"allOf": [inlined], **siblings}

        # root-level defs tables were dropped from siblings
        result: dict[str, Any] = {}
        for key in value:
            if key == "$ref":
                result[key] = rewritten
            elif key in siblings:
                result[key] = siblings[key]
        return result

    def _copy_definition(self, location: Location) -> Any:
        node = self._node(location)
        body = self._copy(node.document, location.path, node.value)
        if isinstance(body, dict):
            for key in _STRIPPED_KEYWORDS:
                body.pop(key, None)
        return body

    def run(self) -> MergedOutput:
        self._close()

        defs = {name: self._copy_definition(location) for location, name in self._slots.items()}
        merged = self._copy(self._root, (), self._root.root)
        if defs:
            if not isinstance(merged, dict):
                merged = {"allOf": [merged]}
            merged[self._defs_key] = defs

        logger.info(
            "Combined '%s': %d definitions from %d documents",
            self._root.document_id,
            len(defs),
            len({location.document_id for location in self._slots} | {self._root.document_id}),
        )
        return MergedOutput(
            document_id=self._root.document_id,
            schema=merged,
            slots={name: location for location, name in self._slots.items()},
        )


def _with_root(
    root_document: SchemaDocument, documents: Iterable[SchemaDocument]
) -> list[SchemaDocument]:
    result = [d for d in documents if d.document_id != root_document.document_id]
    result.append(root_document)
    return result


def combine(
    root_document: SchemaDocument,
    all_documents: Iterable[SchemaDocument] = (),
    graph: ReferenceGraph | None = None,
    *,
    prefixes: dict[str, str] | None = None,
    defs_key: str = "$defs",
) -> MergedOutput:
    """Merge root_document and everything it reaches into one schema.

    Args:
        root_document: Document whose root becomes the merged root. All of
            its own definitions are kept under their original names.
        all_documents: Documents that references may point into.
        graph: A prebuilt reference graph. When omitted a non-strict graph
            over ``all_documents`` plus the root is built.
        prefixes: Optional document id -> prefix prepended to the names of
            definitions pulled from that document.
        defs_key: Name of the merged definitions table.

    Raises:
        CombinerError: UNRESOLVABLE_REFERENCE for a reachable reference the
            resolver could not resolve, UNBOUNDED_CLOSURE for anonymous
            subschemas that reference each other in a cycle.
    """
    if graph is None:
        graph = build_graph(_with_root(root_document, all_documents), strict=False)
    return _Combiner(root_document, graph, dict(prefixes or {}), defs_key).run()
