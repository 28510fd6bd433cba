"""mobinstall schema command - Export JSON Schema."""

from __future__ import annotations

import click

from mobinstall_cli.output import error, success


@click.group()
def schema() -> None:
    """Manage JSON Schema for IDE support.

    **Commands:**

    - `mobinstall schema export` - Export BuildDescription (build.yaml) JSON Schema
    """
    pass


@schema.command("export")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default="./schemas/build-description.schema.json",
    help="Output path [default: ./schemas/build-description.schema.json]",
)
def export_schema(output_path: str) -> None:
    """Export BuildDescription JSON Schema.

    Examples:

        mobinstall schema export

        mobinstall schema export --output custom/path/schema.json
    """
    from mobinstall_core import export_build_description_schema

    try:
        export_build_description_schema(output_path)
    except PermissionError:
        error(f"Cannot write to: {output_path}")
        raise SystemExit(2) from None

    success(f"Schema exported to {output_path}")
