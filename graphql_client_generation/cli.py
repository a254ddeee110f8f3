"""Command-line interface for graphql-client-generation."""

import asyncio
import json
import os
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path

import click
import httpx
import uvicorn
from pydantic import ValidationError

from . import __version__
from .config import Settings, get_settings
from .core.auth import auth_from_token
from .core.errors import GenerationError
from .core.executor import GraphQLError, GraphQLExecutor
from .core.parser import SchemaParser
from .core.pipeline import GenerationPipeline
from .core.query_builder import FieldSelection, QueryBuilder
from .logging import LogConfig

ARCHIVE_SUFFIXES = (".zip", ".tar.gz", ".tgz")


def extract_archive(archive_path: Path) -> str:
    """Extract archive to temp directory. Returns path to extracted content.

    The temp directory is removed again if extraction fails.
    """
    name = archive_path.name.lower()
    if not name.endswith(ARCHIVE_SUFFIXES):
        raise ValueError(f"Unsupported archive format: {archive_path.suffix}")

    temp_dir = tempfile.mkdtemp()
    try:
        if name.endswith(".zip"):
            with zipfile.ZipFile(archive_path, "r") as zip_ref:
                zip_ref.extractall(temp_dir)
        else:
            with tarfile.open(archive_path, "r:gz") as tar_ref:
                tar_ref.extractall(temp_dir, filter="data")
    except (zipfile.BadZipFile, tarfile.TarError, OSError) as e:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise ValueError(f"Invalid archive {archive_path.name}: {e}") from e
    return temp_dir


def parse_variables(pairs: tuple[str, ...]) -> dict:
    """Turn ``NAME=VALUE`` pairs into variables; values are JSON when they parse as JSON."""
    variables = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint="--var")
        try:
            variables[name] = json.loads(raw)
        except json.JSONDecodeError:
            variables[name] = raw
    return variables


def parse_scalar_types(pairs: tuple[str, ...]) -> dict[str, str] | None:
    """Turn ``SCALAR=python.path`` pairs into the scalar_types setting."""
    if not pairs:
        return None
    scalar_types = {}
    for pair in pairs:
        name, sep, path = pair.partition("=")
        if not sep or not name or not path:
            raise click.BadParameter(f"expected SCALAR=TYPE, got {pair!r}", param_hint="--scalar")
        scalar_types[name] = path
    return scalar_types

def load_settings(**overrides) -> Settings:
    """Load settings, turning validation failures into a CLI error."""
    try:
        return get_settings(**overrides)
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration:\n{e}") from e


@click.group()
@click.version_option(version=__version__, prog_name="graphql-client-generation")
@click.option("--log-level", default=None, help="Override the configured log level (DEBUG, INFO, ...).")
def main(log_level: str | None):
    """Generate typed Python GraphQL client bindings from a schema file."""
    LogConfig.from_settings(load_settings(), level=log_level).setup()


@main.command()
@click.option(
    "--schema-folder",
    "-s",
    type=click.Path(),
    help="Folder holding the schema, a schema file, or an archive (.zip, .tar.gz, .tgz).",
)
@click.option("--schema-pattern", "-p", help="Glob for schema files inside the folder.")
@click.option("--package-name", "-k", help="Dotted name of the generated package.")
@click.option("--output-dir", "-o", type=click.Path(), help="Root directory for the generated package.")
@click.option("--client-name", "-n", help="Name of the generated client class.")
@click.option(
    "--template-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Directory of Jinja2 templates overriding the built-in ones.",
)
@click.option("--header", help="Comment prepended to every generated module.")
@click.option(
    "--exclude",
    "exclude",
    multiple=True,
    help="Glob of schema type names to leave out, e.g. 'Internal*'; repeatable.",
)
@click.option("--scalar", "scalars", multiple=True, help="Custom scalar mapping SCALAR=python.Type; repeatable.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
def generate(
    schema_folder: str | None,
    schema_pattern: str | None,
    package_name: str | None,
    output_dir: str | None,
    client_name: str | None,
    template_dir: str | None,
    header: str | None,
    exclude: tuple[str, ...],
    scalars: tuple[str, ...],
    verbose: bool,
):
    """Generate client bindings from the configured schema.

    Options override the [tool.graphql-client-generation] table of
    pyproject.toml and GQLGEN_* environment variables.

    Examples:

        graphql-client-generation generate

        graphql-client-generation generate -s ./schema -p "**/*.graphqls" -k acme.api

        graphql-client-generation generate -s ./schema.tgz -p "**/*.graphql" -o ./build
    """
    settings = load_settings(
        schema_file_folder=schema_folder,
        schema_file_pattern=schema_pattern,
        package_name=package_name,
        output_dir=output_dir,
        client_name=client_name,
        template_dir=template_dir,
        file_header=header,
        exclude_types=list(exclude) or None,
        scalar_types=parse_scalar_types(scalars),
    )

    temp_dir = None
    try:
        folder = Path(settings.schema_file_folder)
        if folder.is_file() and folder.name.lower().endswith(ARCHIVE_SUFFIXES):
            click.echo(f"Extracting archive {folder.name}...")
            temp_dir = extract_archive(folder)
            settings = settings.model_copy(update={"schema_file_folder": temp_dir})
            if verbose:
                click.echo(f"  Extracted to: {temp_dir}")

        if verbose:
            click.echo(f"Schema: {settings.schema_file_folder} ({settings.schema_file_pattern})")
            click.echo(f"Package: {settings.package_name}")
            click.echo(f"Output: {Path(settings.output_dir).resolve()}")

        click.echo("Generating code...")
        result = GenerationPipeline(settings).run()

        if verbose:
            for name, count in result.counts.items():
                click.echo(f"  {name.capitalize()}: {count}")

        click.echo(f"Done! Generated {result.package_name} in {result.package_dir}")
    except (GenerationError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    finally:
        if temp_dir:
            shutil.rmtree(temp_dir)


@main.command("show-query")
@click.argument("operation_path")
@click.option("--mutation", "-m", is_flag=True, help="Look the path up among mutations.")
@click.option("--minimal", is_flag=True, help="Select only __typename and identifying fields.")
@click.option("--select", "selected", multiple=True, help="Dot path of a field to select; repeatable.")
@click.option("--schema-folder", "-s", type=click.Path(), help="Folder holding the schema.")
@click.option("--schema-pattern", "-p", help="Glob for schema files inside the folder.")
def show_query(
    operation_path: str,
    mutation: bool,
    minimal: bool,
    selected: tuple[str, ...],
    schema_folder: str | None,
    schema_pattern: str | None,
):
    """Print the GraphQL document a generated method sends.

    OPERATION_PATH is dotted, e.g. policy.internetFirewall.addRule

    Examples:

        graphql-client-generation show-query user --select id --select friends.name
    """
    settings = load_settings(schema_file_folder=schema_folder, schema_file_pattern=schema_pattern)
    try:
        ir = SchemaParser(settings.schema_file_folder, settings.schema_file_pattern).parse_all()
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    path = operation_path.split(".")
    operations = ir.mutations if mutation else ir.queries
    operation = next((op for op in operations if op.path == path), None)
    if operation is None:
        kind = "mutation" if mutation else "query"
        raise click.ClickException(f"Unknown {kind}: {operation_path}")

    if selected:
        fields = FieldSelection.select(*selected)
    elif minimal:
        fields = FieldSelection.MINIMAL
    else:
        fields = FieldSelection.ALL

    click.echo(QueryBuilder(ir).build(operation, fields))


@main.command()
@click.argument("operation_path")
@click.option("--url", help="GraphQL endpoint; defaults to the endpoint_url setting.")
@click.option("--var", "variables", multiple=True, help="Variable as NAME=VALUE, VALUE read as JSON if it parses; repeatable.")
@click.option("--token", help="Credential sent as a bearer token; defaults to the api_token setting.")
@click.option("--api-key-header", help="Send the token raw in this header instead.")
@click.option("--mutation", "-m", is_flag=True, help="Look the path up among mutations.")
@click.option("--minimal", is_flag=True, help="Select only __typename and identifying fields.")
@click.option("--schema-folder", "-s", type=click.Path(), help="Folder holding the schema.")
@click.option("--schema-pattern", "-p", help="Glob for schema files inside the folder.")
def execute(
    operation_path: str,
    url: str | None,
    variables: tuple[str, ...],
    token: str | None,
    api_key_header: str | None,
    mutation: bool,
    minimal: bool,
    schema_folder: str | None,
    schema_pattern: str | None,
):
    """Run one operation against an endpoint and print the result as JSON.

    OPERATION_PATH is dotted, e.g. account.updateStatus

    Examples:

        graphql-client-generation execute user --url http://localhost:4000/graphql --var id=1

        GQLGEN_API_TOKEN=secret graphql-client-generation execute -m account.close --var id=1
    """
    settings = load_settings(
        schema_file_folder=schema_folder,
        schema_file_pattern=schema_pattern,
        endpoint_url=url,
        api_token=token,
        api_key_header=api_key_header,
    )
    if not settings.endpoint_url:
        raise click.ClickException("No endpoint; pass --url or set GQLGEN_ENDPOINT_URL")
    values = parse_variables(variables)

    try:
        ir = SchemaParser(settings.schema_file_folder, settings.schema_file_pattern).parse_all()
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    executor = GraphQLExecutor(
        settings.endpoint_url,
        auth=auth_from_token(settings.api_token, settings.api_key_header),
        schema=ir,
    )

    async def run():
        try:
            return await executor.execute_operation(
                operation_path.split("."),
                values,
                FieldSelection.MINIMAL if minimal else FieldSelection.ALL,
                operation_type="mutation" if mutation else "query",
            )
        finally:
            await executor.close()

    try:
        result = asyncio.run(run())
    except (GraphQLError, ValueError, httpx.HTTPError) as e:
        raise click.ClickException(str(e)) from e

    click.echo(json.dumps(result, indent=2))


@main.command()
@click.option("--host", help="Interface to bind.")
@click.option("--port", type=int, help="Port to listen on.")
@click.option("--reload/--no-reload", default=None, help="Restart on code changes (development).")
def serve(host: str | None, port: int | None, reload: bool | None):
    """Run the web service.

    Options are handed to the app factory as GQLGEN_* environment variables,
    so the worker (and any reloader process) sees the same settings.
    """
    settings = load_settings(host=host, port=port, reload=reload)
    for name, value in (("HOST", host), ("PORT", port), ("RELOAD", reload)):
        if value is not None:
            os.environ[f"GQLGEN_{name}"] = str(value).lower() if isinstance(value, bool) else str(value)

    click.echo(f"Serving {settings.app_name} on {settings.host}:{settings.port}")
    uvicorn.run(
        "graphql_client_generation.web.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    main()
