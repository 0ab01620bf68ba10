"""json-schema-tools - lint and combine JSON Schema documents."""

from __future__ import annotations

# Schema model and resolution
from json_schema_tools.schema import (
    LintFinding,
    Location,
    NodeKind,
    Reference,
    ReferenceEdge,
    ReferenceGraph,
    SchemaDocument,
    SchemaLoader,
    SchemaNode,
    Severity,
    build_graph,
    parse_reference,
    resolve,
)

# Linting and combining
from json_schema_tools.combiner import MergedOutput, combine
from json_schema_tools.linter import has_errors, lint

# Config
from json_schema_tools.config import CombineSettings, Config, LintPolicy

# Errors
from json_schema_tools.errors import (
    CombinerError,
    CombinerErrorKind,
    ConfigError,
    ConfigNotFoundError,
    DuplicateDocumentError,
    ErrorCodes,
    ErrorKind,
    ResolverError,
    SchemaNotFoundError,
    SchemaParseError,
    SchemaToolError,
)

__version__ = "0.1.0"

__all__ = [
    # Schema model and resolution
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
    # Linting and combining
    "MergedOutput",
    "combine",
    "has_errors",
    "lint",
    # Config
    "CombineSettings",
    "Config",
    "LintPolicy",
    # Errors
    "CombinerError",
    "CombinerErrorKind",
    "ConfigError",
    "ConfigNotFoundError",
    "DuplicateDocumentError",
    "ErrorCodes",
    "ErrorKind",
    "ResolverError",
    "SchemaNotFoundError",
    "SchemaParseError",
    "SchemaToolError",
]
