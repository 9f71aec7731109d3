"""Command-line interface for gql-tsgen."""

import logging
from pathlib import Path

import click

from .config import GeneratorConfig, load_config, save_config
from .core.compiler import Compiler
from .core.lexer import tokenize
from .errors import GqlTsgenError


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def apply_overrides(config: GeneratorConfig, **overrides) -> GeneratorConfig:
    """Return a copy of config with command-line values applied."""
    sections = {
        "schema": ("input", "schemas"),
        "operations": ("input", "operations"),
        "authorization": ("input", "authorization"),
        "output": ("output", "location"),
        "suffix": ("output", "suffix"),
        "strict": ("generation", "strict"),
    }
    config = config.model_copy(deep=True)
    for option, value in overrides.items():
        if value is None or value is False:
            continue
        section, attribute = sections[option]
        setattr(getattr(config, section), attribute, value)
    return config


@click.group()
@click.version_option(package_name="gql-tsgen")
def main():
    """GraphQL to TypeScript code generator.

    Generate zod validators and typed client methods from GraphQL
    operations and a schema.
    """
    pass


@main.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Config file (default: gqlc.json, .toml, .yaml or .yml in the working directory).",
)
@click.option("--schema", "-s", help="Schema file, directory, archive or introspection URL.")
@click.option("--operations", "-p", help="Operations file or directory.")
@click.option("--output", "-o", help="Output directory for generated code.")
@click.option("--suffix", help="Suffix of the generated file names (default: _gqlc).")
@click.option("--authorization", "-a", help="Authorization header for introspection.")
@click.option("--strict", is_flag=True, help="Fail on unknown fields and types.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
def generate(
    config_path: str | None,
    schema: str | None,
    operations: str | None,
    output: str | None,
    suffix: str | None,
    authorization: str | None,
    strict: bool,
    verbose: bool,
):
    """Generate the schema and operations modules.

    Examples:

        gql-tsgen generate

        gql-tsgen generate -s ./schema.graphql -p ./operations -o ./src/graphql

        gql-tsgen generate -s https://api.example.com/graphql -a "Bearer $TOKEN"
    """
    configure_logging(verbose)

    try:
        config = apply_overrides(
            load_config(config_path),
            schema=schema,
            operations=operations,
            authorization=authorization,
            output=output,
            suffix=suffix,
            strict=strict,
        )

        if verbose:
            click.echo(f"Schema: {config.input.schemas}")
            click.echo(f"Operations: {config.input.operations}")
            click.echo(f"Output: {Path(config.output.location).resolve()}")

        click.echo("Generating code...")
        compiler = Compiler(config)
        written = compiler.run()
    except (GqlTsgenError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    for path in written:
        click.echo(f"  Wrote {path}")
    click.echo(f"Done! Generated code in {config.output.location}")


@main.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "toml", "yaml"]),
    default="json",
    show_default=True,
    help="Config file format.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(fmt: str, force: bool):
    """Write a default config file to the working directory."""
    target = Path(f"gqlc.{fmt}")
    if target.exists() and not force:
        raise click.ClickException(f"{target} already exists (use --force to overwrite)")
    path = save_config(GeneratorConfig(), fmt)
    click.echo(f"Wrote {path}")


@main.command()
@click.argument("file", type=click.File("r", encoding="utf-8"))
def tokens(file):
    """Print the token stream of a GraphQL file."""
    for token in tokenize(file.read()):
        click.echo(str(token))


if __name__ == "__main__":
    main()
