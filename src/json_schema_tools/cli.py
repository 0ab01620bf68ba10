"""Command line interface: ``json-schema-tools lint`` and ``json-schema-tools combine``."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from json_schema_tools.combiner import combine
from json_schema_tools.config import CombineSettings, Config, LintPolicy
from json_schema_tools.errors import SchemaToolError
from json_schema_tools.linter import has_errors, lint
from json_schema_tools.schema.loader import SchemaLoader
from json_schema_tools.schema.ref_resolver import build_graph

logger = logging.getLogger(__name__)


def _log_level(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def _parse_prefixes(values: tuple[str, ...]) -> dict[str, str]:
    prefixes: dict[str, str] = {}
    for value in values:
        document_id, sep, prefix = value.partition("=")
        if not sep or not document_id:
            raise click.BadParameter(f"expected DOCUMENT=PREFIX, got '{value}'", param_hint="--prefix")
        prefixes[document_id] = prefix
    return prefixes


@click.group()
@click.version_option(package_name="json-schema-tools")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, config_path: Path | None) -> None:
    """Lint and combine JSON Schema documents."""
    logging.basicConfig(
        level=_log_level(verbose),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        ctx.obj = Config.load(config_path) if config_path is not None else Config()
    except SchemaToolError as e:
        raise click.ClickException(str(e)) from e


schema_option = click.option(
    "-s",
    "--schema",
    "schema_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Main schema path",
)
referenced_option = click.option(
    "-r",
    "--referenced",
    "referenced_paths",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Referenced schema path (repeatable)",
)


@main.command("lint")
@schema_option
@referenced_option
@click.pass_obj
def lint_command(config: Config, schema_path: Path, referenced_paths: tuple[Path, ...]) -> None:
    """Report findings for the main schema; exit 1 on any error."""
    try:
        policy: LintPolicy = config.lint_policy()
        loader = SchemaLoader(config.get("schema.root", "."))
        document = loader.load(schema_path)
        referenced = loader.load_all(referenced_paths)
        graph = build_graph([document, *referenced], strict=False)
    except SchemaToolError as e:
        raise click.ClickException(str(e)) from e

    findings = lint(document, graph, policy)
    for finding in findings:
        click.echo(str(finding))
    if has_errors(findings):
        sys.exit(1)


@main.command("combine")
@schema_option
@referenced_option
@click.option("-p", "--prefix", "prefix_values", multiple=True, help="DOCUMENT=PREFIX for definition names")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the merged schema here instead of stdout",
)
@click.pass_obj
def combine_command(
    config: Config,
    schema_path: Path,
    referenced_paths: tuple[Path, ...],
    prefix_values: tuple[str, ...],
    output_path: Path | None,
) -> None:
    """Merge the main schema and its references into one schema."""
    try:
        settings: CombineSettings = config.combine_settings()
        prefixes = {**settings.prefixes, **_parse_prefixes(prefix_values)}
        loader = SchemaLoader(config.get("schema.root", "."))
        document = loader.load(schema_path)
        referenced = loader.load_all(referenced_paths)
        merged = combine(
            document,
            referenced,
            prefixes=prefixes,
            defs_key=settings.defs_key,
        )
    except SchemaToolError as e:
        raise click.ClickException(str(e)) from e

    text = json.dumps(merged.schema, indent=2, ensure_ascii=False)
    if output_path is None:
        click.echo(text)
    else:
        output_path.write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote merged schema to %s", output_path)


if __name__ == "__main__":
    main()
