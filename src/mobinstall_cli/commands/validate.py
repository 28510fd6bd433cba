"""mobinstall validate command - Check a build description."""

from __future__ import annotations

import click

from mobinstall_cli.output import error, info, success


@click.command()
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./build.yaml",
    help="Path to build.yaml [default: ./build.yaml]",
)
def validate(file_path: str) -> None:
    """Validate a build description.

    Checks build.yaml against the BuildDescription schema, then analyzes
    the target and reports every configuration error (missing manifest,
    missing or non-Java stub application, ...) at once.

    Examples:

        mobinstall validate

        mobinstall validate --file path/to/build.yaml
    """
    from mobinstall_cli.errors import format_analysis_error, load_build_description
    from mobinstall_core import assemble_from_description
    from mobinstall_core.errors import AnalysisError, GraphConstructionError

    description = load_build_description(file_path)

    try:
        result = assemble_from_description(description)
    except AnalysisError as e:
        error(f"Invalid target {description.label}:\n{format_analysis_error(e)}")
        raise SystemExit(1) from None
    except GraphConstructionError as e:
        error(f"Cannot build target {description.label}: {e.user_message}")
        raise SystemExit(1) from None

    success(f"Build description valid: {description.label}")
    info(f"  {len(result.graph)} actions, {len(result.splits.all_split_apks)} split apks")
