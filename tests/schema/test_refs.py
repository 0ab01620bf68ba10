"""Tests for $ref string parsing."""

from __future__ import annotations

import pytest

from json_schema_tools.errors import ErrorKind, ResolverError
from json_schema_tools.schema.refs import decode_pointer, format_local_reference, parse_reference
from json_schema_tools.schema.types import Location


class TestSupportedForms:
    def test_local_fragment(self) -> None:
        ref = parse_reference("#/$defs/qux", "/schemas/main")
        assert ref.local
        assert ref.target == Location("/schemas/main", ("$defs", "qux"))

    def test_document_and_fragment(self) -> None:
        ref = parse_reference("/foo/bar/baz#/$defs/qux", "/schemas/main")
        assert not ref.local
        assert ref.document_id == "/foo/bar/baz"
        assert ref.path == ("$defs", "qux")

    def test_document_only(self) -> None:
        ref = parse_reference("/foo/bar/baz", "/schemas/main")
        assert ref.document_id == "/foo/bar/baz"
        assert ref.path == ()

    def test_bare_document_name(self) -> None:
        ref = parse_reference("A#/$defs/Point", "B")
        assert ref.target == Location("A", ("$defs", "Point"))

    def test_explicit_self_document_is_local(self) -> None:
        assert parse_reference("B#/$defs/Line", "B").local

    def test_root_pointer(self) -> None:
        ref = parse_reference("#", "doc")
        assert ref.local
        assert ref.path == ()

    def test_deep_pointer(self) -> None:
        ref = parse_reference("#/$defs/Foo/properties/bar", "doc")
        assert ref.path == ("$defs", "Foo", "properties", "bar")


class TestUnsupportedForms:
    @pytest.mark.parametrize(
        "raw",
        [
            "https://example.com/schema.json",
            "file:///tmp/schema.json",
            "urn:example:schema",
            "//example.com/schema",
            "/schemas/a?version=2",
            "#anchor",
            "a#/b#/c",
        ],
    )
    def test_rejected(self, raw: str) -> None:
        with pytest.raises(ResolverError) as exc_info:
            parse_reference(raw, "doc")
        assert exc_info.value.kind == ErrorKind.UNSUPPORTED_REFERENCE_FORM

    def test_non_string_ref(self) -> None:
        with pytest.raises(ResolverError) as exc_info:
            parse_reference({"nested": True}, "doc")
        assert exc_info.value.kind == ErrorKind.UNSUPPORTED_REFERENCE_FORM


class TestPointers:
    def test_escapes_are_decoded(self) -> None:
        assert decode_pointer("/a~1b/c~0d") == ("a/b", "c~d")

    def test_empty_pointer(self) -> None:
        assert decode_pointer("") == ()

    def test_format_local_reference_escapes(self) -> None:
        assert format_local_reference("$defs", "a/b") == "#/$defs/a~1b"
        assert format_local_reference("$defs", "Point") == "#/$defs/Point"

    def test_location_renders_pointer(self) -> None:
        assert str(Location("doc", ("$defs", "a/b", 0))) == "doc#/$defs/a~1b/0"
