"""Error hierarchy for json-schema-tools."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from json_schema_tools.schema.types import Location

__all__ = [
    "SchemaToolError",
    "ConfigNotFoundError",
    "ConfigError",
    "SchemaNotFoundError",
    "SchemaParseError",
    "DuplicateDocumentError",
    "ErrorKind",
    "ResolverError",
    "CombinerErrorKind",
    "CombinerError",
    "ErrorCodes",
]


class SchemaToolError(Exception):
    """Base error for all json-schema-tools errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigNotFoundError(SchemaToolError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class ConfigError(SchemaToolError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class SchemaNotFoundError(SchemaToolError):
    """Raised when a schema file cannot be found."""

    def __init__(self, schema_id: str, **kwargs: Any) -> None:
        super().__init__(
            code="SCHEMA_NOT_FOUND",
            message=f"Schema not found: {schema_id}",
            details={"schema_id": schema_id},
            **kwargs,
        )


class SchemaParseError(SchemaToolError):
    """Raised when a schema file has invalid syntax."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="SCHEMA_PARSE_ERROR", message=message, **kwargs)


class DuplicateDocumentError(SchemaToolError):
    """Raised when two documents of one resolver run share an identifier."""

    def __init__(self, document_id: str, **kwargs: Any) -> None:
        super().__init__(
            code="DUPLICATE_DOCUMENT",
            message=f"Duplicate document identifier: {document_id}",
            details={"document_id": document_id},
            **kwargs,
        )


class ErrorKind(str, Enum):
    """Why a reference could not be resolved."""

    UNKNOWN_DOCUMENT = "unknown_document"
    DANGLING_REFERENCE = "dangling_reference"
    UNSUPPORTED_REFERENCE_FORM = "unsupported_reference_form"


_RESOLVER_CODES = {
    ErrorKind.UNKNOWN_DOCUMENT: "REF_UNKNOWN_DOCUMENT",
    ErrorKind.DANGLING_REFERENCE: "REF_DANGLING",
    ErrorKind.UNSUPPORTED_REFERENCE_FORM: "REF_UNSUPPORTED_FORM",
}


class ResolverError(SchemaToolError):
    """Raised when a $ref cannot be resolved to a subschema."""

    def __init__(
        self,
        kind: ErrorKind,
        reference: Any,
        reason: str,
        location: Location | None = None,
        **kwargs: Any,
    ) -> None:
        where = f" at {location}" if location is not None else ""
        super().__init__(
            code=_RESOLVER_CODES[kind],
            message=f"Cannot resolve reference {reference!r}{where}: {reason}",
            details={
                "kind": kind.value,
                "reference": reference,
                "reason": reason,
                "location": str(location) if location is not None else None,
            },
            **kwargs,
        )
        self.kind = kind
        self.reference = reference
        self.reason = reason
        self.location = location

    def at(self, location: Location) -> ResolverError:
        """Return a copy of this error attached to the referencing location."""
        return ResolverError(self.kind, self.reference, self.reason, location=location)


class CombinerErrorKind(str, Enum):
    """Why a combine was aborted."""

    UNRESOLVABLE_REFERENCE = "unresolvable_reference"
    UNBOUNDED_CLOSURE = "unbounded_closure"


class CombinerError(SchemaToolError):
    """Raised when a set of schemas cannot be merged into one document."""

    def __init__(
        self,
        kind: CombinerErrorKind,
        location: Location,
        reason: str,
        **kwargs: Any,
    ) -> None:
        code = (
            "COMBINE_UNRESOLVABLE_REFERENCE"
            if kind == CombinerErrorKind.UNRESOLVABLE_REFERENCE
            else "COMBINE_UNBOUNDED_CLOSURE"
        )
        super().__init__(
            code=code,
            message=f"Cannot combine at {location}: {reason}",
            details={"kind": kind.value, "location": str(location), "reason": reason},
            **kwargs,
        )
        self.kind = kind
        self.location = location
        self.reason = reason


class ErrorCodes:
    """All error codes as constants.

    Use these instead of hardcoding error code strings.

    Example:
        if error.code == ErrorCodes.REF_UNKNOWN_DOCUMENT:
            report_missing_document()
    """

    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    SCHEMA_NOT_FOUND = "SCHEMA_NOT_FOUND"
    SCHEMA_PARSE_ERROR = "SCHEMA_PARSE_ERROR"
    DUPLICATE_DOCUMENT = "DUPLICATE_DOCUMENT"
    REF_UNKNOWN_DOCUMENT = "REF_UNKNOWN_DOCUMENT"
    REF_DANGLING = "REF_DANGLING"
    REF_UNSUPPORTED_FORM = "REF_UNSUPPORTED_FORM"
    COMBINE_UNRESOLVABLE_REFERENCE = "COMBINE_UNRESOLVABLE_REFERENCE"
    COMBINE_UNBOUNDED_CLOSURE = "COMBINE_UNBOUNDED_CLOSURE"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
