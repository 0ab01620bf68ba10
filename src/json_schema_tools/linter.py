"""Schema linting against the supported keyword subset.

Linting is read-only and never raises for problems in the schema itself:
everything is reported as a :class:`LintFinding`, in pre-order of the
document with children in declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from json_schema_tools.config import LintPolicy
from json_schema_tools.errors import ResolverError
from json_schema_tools.schema.ref_resolver import ReferenceGraph, build_graph
from json_schema_tools.schema.tree import (
    COMPOSITION_KEYWORDS,
    PRIMITIVE_TYPES,
    SchemaDocument,
    SchemaNode,
)
from json_schema_tools.schema.types import LintFinding, NodeKind, Severity

logger = logging.getLogger(__name__)

__all__ = ["lint", "has_errors"]

# Canonical keyword order for the key-order rule. Unlisted keywords sit
# between "required" and "examples" and are not ordered among themselves.
_KEY_ORDER = (
    "$id",
    "title",
    "description",
    "$comment",
    "type",
    "additionalProperties",
    "properties",
    "required",
)
_UNLISTED_RANK = len(_KEY_ORDER)
_LAST_RANK = _UNLISTED_RANK + 1

_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: (isinstance(v, int) and not isinstance(v, bool))
    or (isinstance(v, float) and v.is_integer()),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "null": lambda v: v is None,
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, dict),
}


class _Collector:
    def __init__(self) -> None:
        self.findings: list[LintFinding] = []

    def error(self, node: SchemaNode, rule: str, message: str) -> None:
        self.findings.append(LintFinding(Severity.ERROR, node.location, message, rule))

    def warning(self, node: SchemaNode, rule: str, message: str) -> None:
        self.findings.append(LintFinding(Severity.WARNING, node.location, message, rule))


def lint(
    document: SchemaDocument,
    graph: ReferenceGraph | None = None,
    policy: LintPolicy | None = None,
) -> list[LintFinding]:
    """Lint one document.

    Args:
        document: The document to check.
        graph: Reference graph used to check ``$ref`` targets. When omitted,
            a non-strict graph over this document alone is built, so
            cross-document references report as unknown documents.
        policy: Keyword allowlist and optional rules; defaults to LintPolicy().

    Returns:
        Findings in deterministic document order.
    """
    if policy is None:
        policy = LintPolicy()
    if graph is None:
        graph = build_graph([document], strict=False)

    out = _Collector()
    for node in document.node().walk():
        if isinstance(node.value, dict):
            _check_node(node, graph, policy, out)

    errors = sum(1 for f in out.findings if f.severity == Severity.ERROR)
    logger.debug(
        "Linted '%s': %d errors, %d warnings",
        document.document_id,
        errors,
        len(out.findings) - errors,
    )
    return out.findings


def has_errors(findings: Iterable[LintFinding]) -> bool:
    """True when any finding should block combining."""
    return any(f.severity == Severity.ERROR for f in findings)


def _check_node(
    node: SchemaNode, graph: ReferenceGraph, policy: LintPolicy, out: _Collector
) -> None:
    value: dict[str, Any] = node.value

    for keyword in value:
        if not policy.allows(keyword):
            out.error(node, "unsupported-keyword", f"unsupported keyword '{keyword}'")

    _check_types(node, out)

    if "$ref" in value:
        try:
            graph.target_of(node)
        except ResolverError as e:
            out.error(
                node,
                "unresolved-reference",
                f"unresolved reference {e.reference!r}: {e.reason}",
            )

    for keyword in COMPOSITION_KEYWORDS:
        if keyword in value:
            branches = value[keyword]
            if not isinstance(branches, list) or not branches:
                out.error(
                    node,
                    "empty-composition",
                    f"'{keyword}' must contain at least one subschema",
                )

    _check_enumeration(node, out)
    _check_required(node, out)

    if policy.check_key_order:
        _check_key_order(node, out)
    if node.kind() == NodeKind.OBJECT:
        _check_object_style(node, policy, out)


def _check_types(node: SchemaNode, out: _Collector) -> None:
    if "type" not in node.value:
        return
    declared = node.value["type"]
    names = [declared] if isinstance(declared, str) else declared
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        out.error(node, "unknown-type", "'type' must be a string or a list of strings")
        return
    for name in names:
        if name not in PRIMITIVE_TYPES:
            out.error(node, "unknown-type", f"unknown type '{name}'")


def _check_enumeration(node: SchemaNode, out: _Collector) -> None:
    value = node.value
    if "enum" in value:
        values = value["enum"]
        if not isinstance(values, list) or not values:
            out.error(node, "empty-enum", "'enum' must be a non-empty list")
            return
    elif "const" in value:
        values = [value["const"]]
    else:
        return

    types = [t for t in node.declared_types() if t in _TYPE_CHECKS]
    seen: set[tuple[type, Any]] = set()
    for item in values:
        if isinstance(item, (dict, list)):
            out.warning(node, "enum-value", f"enum value {item!r} is not a primitive value")
            continue
        if types and not any(_TYPE_CHECKS[t](item) for t in types):
            out.warning(
                node,
                "enum-value",
                f"enum value {item!r} does not match declared type {' | '.join(types)}",
            )
        key = (type(item), item)
        if key in seen:
            out.warning(node, "duplicate-enum-value", f"enum value {item!r} is listed twice")
        seen.add(key)


def _check_required(node: SchemaNode, out: _Collector) -> None:
    if "required" not in node.value:
        return
    required = node.value["required"]
    if not isinstance(required, list):
        out.error(node, "undeclared-required", "'required' must be a list of property names")
        return
    properties = node.value.get("properties")
    declared = properties if isinstance(properties, dict) else {}
    for name in required:
        if not isinstance(name, str) or name not in declared:
            out.error(
                node,
                "undeclared-required",
                f"required property {name!r} is not declared in 'properties'",
            )


def _key_rank(key: str) -> int:
    if key in _KEY_ORDER:
        return _KEY_ORDER.index(key)
    if key == "examples":
        return _LAST_RANK
    return _UNLISTED_RANK


def _check_key_order(node: SchemaNode, out: _Collector) -> None:
    keys = list(node.value)
    for first, second in zip(keys, keys[1:]):
        if _key_rank(first) > _key_rank(second):
            out.warning(node, "key-order", f"key '{second}' should come before '{first}'")
            return


def _check_object_style(node: SchemaNode, policy: LintPolicy, out: _Collector) -> None:
    value = node.value
    properties = value.get("properties")
    properties = properties if isinstance(properties, dict) else {}
    required = value.get("required")
    required = required if isinstance(required, list) else []

    if policy.warn_unrestricted_objects and value.get("additionalProperties") is not False:
        out.warning(
            node,
            "unrestricted-object",
            "object allows additional properties; set 'additionalProperties: false'",
        )

    if policy.warn_optional_properties:
        for name in properties:
            if name not in required:
                out.warning(node, "optional-property", f"property '{name}' is optional")

    if policy.check_required_order:
        declared_order = [name for name in properties if name in required]
        listed_order = [name for name in required if name in properties]
        if declared_order != listed_order:
            out.warning(
                node,
                "required-order",
                "'required' does not follow the declaration order of 'properties'",
            )
