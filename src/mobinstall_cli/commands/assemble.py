"""mobinstall assemble command - Build the mobile-install action graph."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.table import Table

from mobinstall_cli import output
from mobinstall_cli.output import error, success

if TYPE_CHECKING:
    from mobinstall_core import MobileInstallResult


def graph_document(label: str, result: MobileInstallResult) -> dict[str, Any]:
    """Render an assembly result as a JSON-serializable document.

    Actions are listed in registration order.
    """
    return {
        "target": label,
        "actions": [action.model_dump(mode="json") for action in result.graph.actions],
        "output_groups": result.output_groups.to_dict(),
        "split_apks": [a.exec_path for a in result.splits.all_split_apks],
    }


def _print_summary(label: str, result: MobileInstallResult) -> None:
    actions = Table(title=f"Actions of {label}")
    actions.add_column("Mnemonic")
    actions.add_column("Count", justify="right")
    for mnemonic, count in sorted(Counter(a.mnemonic for a in result.graph.actions).items()):
        actions.add_row(mnemonic, str(count))

    groups = Table(title="Output groups")
    groups.add_column("Group")
    groups.add_column("Artifacts")
    for name, artifacts in result.output_groups.items():
        groups.add_row(name, "\n".join(a.exec_path for a in artifacts))

    output.console.print(actions)
    output.console.print(groups)


@click.command()
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./build.yaml",
    help="Path to build.yaml [default: ./build.yaml]",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(),
    default=None,
    help="Write the graph JSON to this path instead of stdout.",
)
@click.option("--summary", is_flag=True, default=False, help="Print a summary table instead.")
def assemble(file_path: str, output_path: str | None, summary: bool) -> None:
    """Assemble the mobile-install action graph of a target.

    Writes every declared action and the mobile-install output groups as
    JSON. Nothing is executed.

    Examples:

        mobinstall assemble --file build.yaml

        mobinstall assemble --file build.yaml --output graph.json

        mobinstall assemble --summary
    """
    from mobinstall_cli.errors import (
        format_analysis_error,
        handle_permission_error,
        load_build_description,
    )
    from mobinstall_core import assemble_from_description
    from mobinstall_core.errors import AnalysisError, GraphConstructionError

    description = load_build_description(file_path)

    try:
        result = assemble_from_description(description)
    except AnalysisError as e:
        error(f"Cannot assemble {description.label}:\n{format_analysis_error(e)}")
        raise SystemExit(1) from None
    except GraphConstructionError as e:
        error(f"Cannot assemble {description.label}: {e.user_message}")
        raise SystemExit(1) from None

    if summary:
        _print_summary(description.label, result)
        return

    document = json.dumps(graph_document(description.label, result), indent=2)
    if output_path is None:
        click.echo(document)
        return

    path = Path(output_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(document + "\n")
    except PermissionError:
        handle_permission_error(output_path)
    success(f"Graph of {description.label} written to {path}")
