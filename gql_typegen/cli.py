"""Command-line interface for gql-typegen."""

import logging
from pathlib import Path

import click
from graphql import GraphQLError

from . import __version__
from .core.cache import FileCache
from .core.errors import CodegenError
from .core.generator import load_generator
from .core.options import CodegenMode, CodegenOptions, DeprecationStrategy, TargetLanguage


@click.group()
@click.version_option(__version__)
def main():
    """Generate typed models for GraphQL operations.

    Reads a schema and a query document and writes one module per
    operation (Python) or one module per query file (Rust).
    """
    pass


@main.command()
@click.option(
    "--schema",
    "-s",
    "schema_path",
    required=True,
    type=click.Path(exists=True),
    help="Path to the schema: SDL file, introspection JSON or directory of SDL files.",
)
@click.option(
    "--query",
    "-q",
    "query_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the query document.",
)
@click.option(
    "--operation",
    "-n",
    "operation_name",
    default=None,
    help="Only generate this operation (default: all operations in the document).",
)
@click.option(
    "--target",
    "-t",
    type=click.Choice([t.value for t in TargetLanguage], case_sensitive=False),
    default=TargetLanguage.PYTHON.value,
    show_default=True,
    help="Target language.",
)
@click.option(
    "--deprecation-strategy",
    type=click.Choice([s.value for s in DeprecationStrategy], case_sensitive=False),
    default=DeprecationStrategy.WARN.value,
    show_default=True,
    help="What to do with deprecated fields.",
)
@click.option(
    "--additional-derives",
    default=None,
    help="Comma-separated extra derives for Rust response types, e.g. 'PartialEq,Debug'.",
)
@click.option(
    "--module-visibility",
    default="pub",
    show_default=True,
    help="Visibility of generated Rust modules.",
)
@click.option(
    "--output-directory",
    "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Output directory (default: the directory of the query file).",
)
@click.option(
    "--no-formatting",
    is_flag=True,
    help="Do not run ruff or rustfmt on the generated code.",
)
@click.option(
    "--header",
    default=None,
    help="Text prepended to every generated file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(
    schema_path: str,
    query_path: str,
    operation_name: str | None,
    target: str,
    deprecation_strategy: str,
    additional_derives: str | None,
    module_visibility: str,
    output_directory: str | None,
    no_formatting: bool,
    header: str | None,
    verbose: bool,
):
    """Generate models for the operations of a query document.

    Examples:

        gql-typegen generate --schema ./schema.graphql --query ./queries/user.graphql

        gql-typegen generate -s ./schema.json -q ./user.graphql -n UserQuery -o ./generated

        gql-typegen generate -s ./schema -q ./user.graphql --target rust --additional-derives Debug
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    query_file = Path(query_path).resolve()
    output_path = Path(output_directory).resolve() if output_directory else query_file.parent

    options = CodegenOptions(
        selected_operation_name=operation_name,
        deprecation_strategy=DeprecationStrategy.parse(deprecation_strategy),
        module_visibility=module_visibility,
        target_language=TargetLanguage.parse(target),
        format_output=not no_formatting,
        output_directory=output_path,
        mode=CodegenMode.CLI,
        header=header,
    )
    if additional_derives:
        options.set_additional_derives(additional_derives)

    if verbose:
        click.echo(f"Schema: {Path(schema_path).resolve()}")
        click.echo(f"Query: {query_file}")
        click.echo(f"Output: {output_path}")

    try:
        click.echo("Generating code...")
        generator = load_generator(
            schema_path,
            query_file,
            options,
            schema_cache=FileCache(),
            query_cache=FileCache(),
        )
        written = generator.generate(query_file.stem)
    except (CodegenError, GraphQLError) as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        for path in written:
            click.echo(f"  Wrote {path}")

    click.echo(f"Done! Generated {len(written)} file(s) in {output_path}")


if __name__ == "__main__":
    main()
