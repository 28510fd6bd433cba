"""CLI error handling for mobinstall-cli.

Wraps mobinstall-core exceptions into user-friendly messages with
appropriate exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click
import yaml
from pydantic import ValidationError as PydanticValidationError

from mobinstall_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from mobinstall_core import BuildDescription
    from mobinstall_core.errors import AnalysisError


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (validation, configuration)
EXIT_SYSTEM_ERROR = 2  # System error (missing file, permissions)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting."""
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - dexing.java_resource_jar: Field required"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]
    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")
    return "\n".join(lines)


def format_analysis_error(err: AnalysisError) -> str:
    """Format the configuration errors collected during analysis."""
    lines = [f"Found {len(err.errors)} configuration error(s):"]
    lines.extend(f"  - {e}" for e in err.errors)
    return "\n".join(lines)


def handle_yaml_error(err: yaml.YAMLError, file_path: str) -> NoReturn:
    """Raise a CLIError for a YAML parsing error, with line information when known."""
    error_msg = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        problem = getattr(err, "problem", None)
        error_msg = f"YAML syntax error at line {mark.line + 1}, column {mark.column + 1}: {problem}"
    raise CLIError(f"Invalid YAML in {file_path}: {error_msg}")


def handle_file_not_found(file_path: str) -> NoReturn:
    raise CLIError(
        f"File not found: {file_path}\n\nUse --file to specify the build description.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "write") -> NoReturn:
    raise CLIError(f"Permission denied: cannot {operation} {path}", exit_code=EXIT_SYSTEM_ERROR)


def load_build_description(file_path: str) -> BuildDescription:
    """Load a build description, turning load failures into CLIErrors.

    Raises:
        CLIError: If the file is missing, unparsable or invalid.
    """
    from mobinstall_core import BuildDescription

    path = Path(file_path)
    if not path.exists():
        handle_file_not_found(file_path)
    try:
        return BuildDescription.from_yaml(path)
    except FileNotFoundError:
        handle_file_not_found(file_path)
    except yaml.YAMLError as e:
        handle_yaml_error(e, file_path)
    except PydanticValidationError as e:
        raise CLIError(
            f"Invalid build description in {file_path}:\n{format_pydantic_error(e)}"
        ) from None
