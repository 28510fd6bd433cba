"""JSON Schema export for build descriptions.

Exports a JSON Schema Draft 2020-12 document generated from the
BuildDescription Pydantic model, for editor completion and validation
of build.yaml files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from mobinstall_core.schemas import BuildDescription

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
BUILD_DESCRIPTION_SCHEMA_ID = "https://mobinstall.dev/schemas/build-description.schema.json"


def export_build_description_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the BuildDescription JSON Schema.

    Args:
        output_path: Optional path to write the schema to. Parent
            directories are created as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_build_description_schema()
        >>> schema["$schema"]
        'https://json-schema.org/draft/2020-12/schema'
    """
    schema = BuildDescription.model_json_schema()

    schema["$schema"] = SCHEMA_DIALECT
    schema["$id"] = BUILD_DESCRIPTION_SCHEMA_ID

    if "additionalProperties" not in schema:
        schema["additionalProperties"] = False

    if output_path is not None:
        _write_schema_file(schema, output_path)

    return schema


def _write_schema_file(schema: dict[str, Any], output_path: Path | str) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2) + "\n")
