"""Command-line interface for gql-docsplit."""

import asyncio
import json
import logging
import os
from pathlib import Path

import click
import httpx
from graphql import print_ast

from .core.executor import GraphQLExecutor, GraphQLResponseError
from .core.generator import ModuleGenerator
from .core.hooks import AddHeaderHook, HookRunner
from .core.loader import DocumentLoader
from .core.parser import ParseError, ResolutionError
from .core.splitter import MissingOperationNameError

GRAPHQL_SUFFIXES = (".graphql", ".gql")

LOAD_ERRORS = (ParseError, ResolutionError, MissingOperationNameError)


def collect_sources(source_path: Path) -> list[Path]:
    """Collect all GraphQL files from a file or directory path."""
    if source_path.is_file():
        return [source_path]
    files = []
    for root, _, filenames in os.walk(source_path):
        for filename in filenames:
            if filename.endswith(GRAPHQL_SUFFIXES):
                files.append(Path(root) / filename)
    return sorted(files)


def load_or_fail(loader: DocumentLoader, path: Path):
    """Load ``path``, turning load errors into a ClickException."""
    try:
        return loader.load_file(str(path))
    except LOAD_ERRORS as e:
        raise click.ClickException(str(e)) from e


def configure_logging(verbose: bool):
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@click.group()
@click.version_option()
def main():
    """Split multi-operation GraphQL documents.

    Expands #import directives and produces one minimal document per
    named operation.
    """
    pass


@main.command()
@click.option(
    "--source",
    "-s",
    required=True,
    type=click.Path(exists=True),
    help="Path to a GraphQL file or a directory of .graphql/.gql files.",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(),
    help="Output directory for the split documents.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def split(source: str, output: str, verbose: bool):
    """Write one .graphql file per operation.

    Each source produces <stem>.graphql with the whole document and
    <stem>.<Operation>.graphql for every operation of a multi-operation
    document. Files in subdirectories of the source directory are written
    to the same subdirectories of the output directory.

    Examples:

        gql-docsplit split --source ./queries --output ./build/queries

        gql-docsplit split -s ./feed.graphql -o ./build
    """
    configure_logging(verbose)
    source_path = Path(source).resolve()
    output_path = Path(output).resolve()
    output_path.mkdir(parents=True, exist_ok=True)

    loader = DocumentLoader()
    files = collect_sources(source_path)
    base = source_path.parent if source_path.is_file() else source_path
    click.echo(f"Splitting {len(files)} file(s)...")

    written = 0
    for path in files:
        loaded = load_or_fail(loader, path)
        stem = path.stem
        # Mirror the source tree so equal stems in different directories stay apart
        out_dir = output_path / path.parent.relative_to(base)
        out_dir.mkdir(parents=True, exist_ok=True)

        (out_dir / f"{stem}.graphql").write_text(print_ast(loaded.document) + "\n")
        written += 1
        for name, document in loaded.operations.items():
            (out_dir / f"{stem}.{name}.graphql").write_text(print_ast(document) + "\n")
            written += 1

        if verbose:
            click.echo(f"  {path.relative_to(base)}: {len(loaded.operations)} operation(s)")
            for reference in loaded.imports:
                click.echo(f"    imports {reference}")

    click.echo(f"Done! Wrote {written} document(s) to {output_path}")


@main.command()
@click.option(
    "--source",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a GraphQL file.",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False),
    help="Output file for the generated module (e.g., queries.py).",
)
@click.option(
    "--template-dir",
    "-t",
    type=click.Path(exists=True, file_okay=False),
    help="Directory with templates overriding the built-in ones.",
)
@click.option(
    "--header",
    default=None,
    help="Header line to prepend to the generated module.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(source: str, output: str, template_dir: str | None, header: str | None, verbose: bool):
    """Generate a Python module holding the split documents.

    Examples:

        gql-docsplit generate -s ./feed.graphql -o ./app/feed_queries.py

        gql-docsplit generate -s ./feed.graphql -o ./feed.py --header "# noqa"
    """
    configure_logging(verbose)
    hooks = HookRunner()
    if header:
        hooks.add_post_hook(AddHeaderHook(header))

    loaded = load_or_fail(DocumentLoader(), Path(source).resolve())
    if verbose:
        click.echo(f"  Definitions: {len(loaded.document.definitions)}")
        click.echo(f"  Operations: {len(loaded.operations)}")

    click.echo("Generating module...")
    generator = ModuleGenerator(loaded, template_dir=template_dir, hooks=hooks)
    try:
        generator.write(str(Path(output).resolve()))
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Done! Generated {output}")


@main.command()
@click.option(
    "--source",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a GraphQL file.",
)
def inspect(source: str):
    """List operations and the definitions each one pulls in."""
    loaded = load_or_fail(DocumentLoader(), Path(source).resolve())

    if not loaded.is_split:
        names = [d.name.value for d in loaded.document.definitions if getattr(d, "name", None)]
        click.echo(f"Single document: {', '.join(names) or '(anonymous)'}")
        return

    for name, document in loaded.operations.items():
        included = [d.name.value for d in document.definitions[1:]]
        click.echo(f"{name}: {', '.join(included) or '-'}")


@main.command()
@click.option(
    "--source",
    "-s",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a GraphQL file.",
)
@click.option(
    "--url",
    "-u",
    required=True,
    envvar="GQL_DOCSPLIT_URL",
    help="GraphQL endpoint URL (or GQL_DOCSPLIT_URL).",
)
@click.option(
    "--operation",
    "-n",
    default=None,
    help="Operation to run; required when the file holds several.",
)
@click.option(
    "--variables",
    default=None,
    help="Operation variables as a JSON object.",
)
@click.option(
    "--header",
    "-H",
    "headers",
    multiple=True,
    help='Extra request header, e.g. -H "Authorization: Bearer TOKEN".',
)
@click.option(
    "--timeout",
    default=30.0,
    show_default=True,
    help="Request timeout in seconds.",
)
def execute(
    source: str,
    url: str,
    operation: str | None,
    variables: str | None,
    headers: tuple[str, ...],
    timeout: float,
):
    """Run one operation against an endpoint and print the result.

    Examples:

        gql-docsplit execute -s ./feed.graphql -u https://api.example.com/graphql -n FeedQuery
    """
    loaded = load_or_fail(DocumentLoader(), Path(source).resolve())
    if loaded.is_split and operation is None:
        raise click.UsageError(
            f"--operation is required, choose one of: {', '.join(loaded.operation_names)}"
        )
    try:
        loaded.document_for(operation)
    except KeyError as e:
        raise click.BadParameter(f"Unknown operation: {operation}", param_hint="--operation") from e

    try:
        parsed_variables = json.loads(variables) if variables else None
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint="--variables") from e

    request_headers = {}
    for header in headers:
        name, sep, value = header.partition(":")
        if not sep:
            raise click.BadParameter(f"Expected 'Name: value', got {header!r}", param_hint="--header")
        request_headers[name.strip()] = value.strip()

    async def run():
        async with GraphQLExecutor(url, request_headers, timeout=timeout) as executor:
            return await executor.execute_operation(loaded, operation, parsed_variables)

    try:
        data = asyncio.run(run())
    except (GraphQLResponseError, httpx.HTTPError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(data, indent=2))


if __name__ == "__main__":
    main()
