"""Parsing of ``$ref`` strings into document/path references."""

from __future__ import annotations

import re
from typing import Any

from json_schema_tools.errors import ErrorKind, ResolverError
from json_schema_tools.schema.types import Reference, SchemaPath

__all__ = ["parse_reference", "format_local_reference", "decode_pointer"]

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def decode_pointer(pointer: str) -> SchemaPath:
    """Split an RFC 6901 JSON Pointer into unescaped segments.

    Segments stay strings; list indexes are normalised by the resolver.
    """
    if not pointer:
        return ()
    segments = pointer.split("/")[1:]
    return tuple(s.replace("~1", "/").replace("~0", "~") for s in segments)


def format_local_reference(defs_key: str, name: str) -> str:
    escaped = name.replace("~", "~0").replace("/", "~1")
    return f"#/{defs_key}/{escaped}"


def _unsupported(raw: Any, reason: str) -> ResolverError:
    return ResolverError(ErrorKind.UNSUPPORTED_REFERENCE_FORM, raw, reason)


def parse_reference(raw: Any, source_document_id: str) -> Reference:
    """Parse a ``$ref`` value found in document ``source_document_id``.

    Supported shapes are ``#<pointer>`` (same document), ``<id>#<pointer>``
    and ``<id>`` (root of another supplied document). Anything that would
    need a fetch (a URI scheme, a network authority, a query) is rejected.
    """
    if not isinstance(raw, str):
        raise _unsupported(raw, f"$ref must be a string, got {type(raw).__name__}")
    if _SCHEME_PATTERN.match(raw):
        raise _unsupported(raw, "absolute URIs with a scheme are not supported")
    if raw.startswith("//"):
        raise _unsupported(raw, "network-path references are not supported")
    if "?" in raw:
        raise _unsupported(raw, "references with a query are not supported")

    document_part, hash_sign, fragment = raw.partition("#")
    if hash_sign and fragment and not fragment.startswith("/"):
        raise _unsupported(raw, "only JSON Pointer fragments are supported, not anchors")
    if "#" in fragment:
        raise _unsupported(raw, "reference contains more than one '#'")

    path = decode_pointer(fragment)
    if not document_part:
        return Reference(document_id=source_document_id, path=path, raw=raw, local=True)
    return Reference(
        document_id=document_part,
        path=path,
        raw=raw,
        local=document_part == source_document_id,
    )
