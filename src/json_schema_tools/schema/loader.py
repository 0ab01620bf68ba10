"""SchemaLoader: reads schema files into SchemaDocuments."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from json_schema_tools.errors import SchemaNotFoundError, SchemaParseError
from json_schema_tools.schema.tree import SchemaDocument

__all__ = ["SchemaLoader"]

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class SchemaLoader:
    """Loads JSON or YAML schema files.

    A document's identifier is its ``$id`` when it declares one, otherwise
    ``/`` followed by the file path relative to ``root`` without suffixes,
    e.g. ``/common/point`` for ``<root>/common/point.schema.json``.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root).resolve() if root is not None else Path.cwd()

    def document_id_for(self, file_path: Path) -> str:
        resolved = file_path.resolve()
        try:
            relative = resolved.relative_to(self._root)
        except ValueError:
            relative = Path(resolved.name)
        stem = relative.name.split(".", 1)[0] or relative.name
        return "/" + relative.with_name(stem).as_posix()

    def _parse(self, file_path: Path) -> Any:
        try:
            content = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaParseError(message=f"Cannot read {file_path}: {e}", cause=e) from e

        if not content.strip():
            raise SchemaParseError(message=f"Schema file {file_path} is empty")

        if file_path.suffix in _YAML_SUFFIXES:
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise SchemaParseError(message=f"Invalid YAML in {file_path}: {e}", cause=e) from e
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise SchemaParseError(message=f"Invalid JSON in {file_path}: {e}", cause=e) from e

    def load(self, path: str | Path, document_id: str | None = None) -> SchemaDocument:
        """Load one schema file."""
        file_path = Path(path)
        if not file_path.is_absolute():
            file_path = self._root / file_path
        if not file_path.exists():
            raise SchemaNotFoundError(schema_id=str(path))

        data = self._parse(file_path)
        if not isinstance(data, (dict, bool)):
            raise SchemaParseError(
                message=f"Schema file {file_path} must contain an object, got {type(data).__name__}"
            )

        if document_id is None:
            declared = data.get("$id") if isinstance(data, dict) else None
            document_id = declared if isinstance(declared, str) and declared else self.document_id_for(file_path)

        logger.debug("Loaded schema '%s' from %s", document_id, file_path)
        return SchemaDocument.from_value(data, document_id)

    def load_all(self, paths: Iterable[str | Path]) -> list[SchemaDocument]:
        return [self.load(path) for path in paths]
