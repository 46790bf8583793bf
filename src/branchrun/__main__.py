"""CLI utilities for branchrun.

Prints the JSON Schema that branches served by a Tree follow, and the
settings an execution instance would resolve from the environment.
"""

from click import echo, group
from yaml import safe_dump

from branchrun.jsonschema import SchemaGenerator
from branchrun.settings import ENV_PREFIX, RunSettings


@group(help='Command-line utilities for the branchrun execution core.')
def cli() -> None:
    """Root CLI group for branchrun tools."""
    return None


@cli.command(
    name='schema',
    help='Print the JSON Schema of branches to standard output.',
)
def print_schema() -> None:
    """Generate and print the JSON Schema."""
    echo(SchemaGenerator.make_schema())


@cli.command(
    name='settings',
    help=f'Print the effective settings, read from {ENV_PREFIX}* variables, as YAML.',
)
def print_settings() -> None:
    """Resolve and print the runtime settings."""
    echo(safe_dump(RunSettings().model_dump(), sort_keys=True), nl=False)


if __name__ == '__main__':
    cli()
