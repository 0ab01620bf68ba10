"""$ref resolution across a set of schema documents.

The resolver resolves exactly one hop per reference node and records the
result as an edge of a :class:`ReferenceGraph`. Chains and cycles are left
in the graph for consumers to traverse with their own visiting sets.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from json_schema_tools.errors import DuplicateDocumentError, ErrorKind, ResolverError
from json_schema_tools.schema.refs import parse_reference
from json_schema_tools.schema.tree import SchemaDocument, SchemaNode, is_schema_path
from json_schema_tools.schema.types import (
    Location,
    NodeKind,
    PathEntry,
    Reference,
    ReferenceEdge,
)

logger = logging.getLogger(__name__)

__all__ = ["ReferenceGraph", "build_graph", "resolve"]


class ReferenceGraph:
    """Reference edges between (document, path) locations of one resolver run."""

    def __init__(self, documents: dict[str, SchemaDocument]) -> None:
        self._documents = documents
        self._edges: dict[Location, ReferenceEdge] = {}
        self._failures: dict[Location, ResolverError] = {}

    @property
    def documents(self) -> dict[str, SchemaDocument]:
        return dict(self._documents)

    @property
    def edges(self) -> list[ReferenceEdge]:
        return list(self._edges.values())

    @property
    def failures(self) -> dict[Location, ResolverError]:
        return dict(self._failures)

    def document(self, document_id: str) -> SchemaDocument | None:
        return self._documents.get(document_id)

    def edge_at(self, location: Location) -> ReferenceEdge | None:
        return self._edges.get(location)

    def failure_at(self, location: Location) -> ResolverError | None:
        return self._failures.get(location)

    def edges_within(self, location: Location) -> list[ReferenceEdge]:
        """Edges whose reference node lies inside the subtree at location."""
        depth = len(location.path)
        return [
            edge
            for edge in self._edges.values()
            if edge.source.document_id == location.document_id
            and edge.source.path[:depth] == location.path
        ]

    def target_of(self, node: SchemaNode) -> ReferenceEdge:
        """Return the edge leaving a reference node.

        Raises the recorded ResolverError for a reference that failed during
        ``build_graph``. Nodes of documents outside the run are resolved on
        demand against the run's documents.
        """
        location = node.location
        edge = self._edges.get(location)
        if edge is not None:
            return edge
        failure = self._failures.get(location)
        if failure is not None:
            raise failure
        return _resolve_node(self, node)

    def reachable(self, start: Location) -> list[Location]:
        """Targets transitively reachable from the subtree at start.

        Each target is listed once, in first-visit order.
        """
        visited: set[Location] = set()
        order: list[Location] = []
        pending = [start]
        while pending:
            current = pending.pop()
            for edge in reversed(self.edges_within(current)):
                if edge.target not in visited:
                    visited.add(edge.target)
                    order.append(edge.target)
                    pending.append(edge.target)
        return order


def _is_index(segment: PathEntry, length: int) -> bool:
    if isinstance(segment, int):
        return 0 <= segment < length
    if not (segment.isascii() and segment.isdigit()):
        return False
    if len(segment) > 1 and segment.startswith("0"):
        return False
    return int(segment) < length


def _walk(document: SchemaDocument, reference: Reference) -> SchemaNode:
    value = document.root
    path: list[PathEntry] = []
    for segment in reference.path:
        if isinstance(value, dict) and segment in value:
            value = value[segment]
            path.append(segment)
        elif isinstance(value, list) and _is_index(segment, len(value)):
            index = int(segment)
            value = value[index]
            path.append(index)
        else:
            raise ResolverError(
                ErrorKind.DANGLING_REFERENCE,
                reference.raw,
                f"segment '{segment}' not found in document '{document.document_id}'",
            )
    normalized = tuple(path)
    if not is_schema_path(document.root, normalized):
        raise ResolverError(
            ErrorKind.UNSUPPORTED_REFERENCE_FORM,
            reference.raw,
            "target is not a subschema position",
        )
    return SchemaNode(document, normalized, value)


def resolve(graph: ReferenceGraph, reference: Reference) -> SchemaNode:
    """Resolve one reference to the subschema it points at (one hop)."""
    document = graph.document(reference.document_id)
    if document is None:
        raise ResolverError(
            ErrorKind.UNKNOWN_DOCUMENT,
            reference.raw,
            f"document '{reference.document_id}' was not supplied",
        )
    return _walk(document, reference)


def _resolve_node(graph: ReferenceGraph, node: SchemaNode) -> ReferenceEdge:
    location = node.location
    try:
        reference = parse_reference(node.as_reference(), node.document.document_id)
        if reference.local:
            target = _walk(node.document, reference)
        else:
            target = resolve(graph, reference)
    except ResolverError as e:
        raise e.at(location) from None
    return ReferenceEdge(source=location, target=target.location, reference=reference)


def build_graph(
    documents: Iterable[SchemaDocument], *, strict: bool = True
) -> ReferenceGraph:
    """Resolve every reference of every document into a ReferenceGraph.

    Documents are processed in identifier order and nodes in pre-order, so
    the graph is the same whatever order the documents arrive in.

    Raises:
        DuplicateDocumentError: two different documents share an identifier.
        ResolverError: a reference failed and ``strict`` is set. With
            ``strict=False`` failures are recorded in ``graph.failures``.
    """
    by_id: dict[str, SchemaDocument] = {}
    for document in sorted(documents, key=lambda d: d.document_id):
        existing = by_id.get(document.document_id)
        if existing is not None and existing != document:
            raise DuplicateDocumentError(document_id=document.document_id)
        by_id[document.document_id] = document

    graph = ReferenceGraph(by_id)
    for document in by_id.values():
        for node in document.node().walk():
            if node.kind() != NodeKind.REFERENCE:
                continue
            try:
                edge = _resolve_node(graph, node)
            except ResolverError as e:
                if strict:
                    raise
                logger.info("Recording unresolved reference: %s", e)
                graph._failures[node.location] = e
            else:
                graph._edges[node.location] = edge

    logger.debug(
        "Built reference graph: %d documents, %d edges, %d failures",
        len(by_id),
        len(graph._edges),
        len(graph._failures),
    )
    return graph
