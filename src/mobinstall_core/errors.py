"""Exception hierarchy for mobinstall-core.

This module defines the exception classes raised while constructing the
mobile-install action graph:
- MobileInstallError: Base exception for all mobinstall errors
- ConfigurationError: A prerequisite is missing or lacks a capability
- AnalysisError: Raised at a checkpoint when configuration errors were collected
- GraphConstructionError: An internal graph invariant was violated
- ToolNotFoundError: A required tool reference cannot be resolved

Configuration errors are collected on the rule context rather than raised
immediately, so that independent problems in different branches are
reported together at the next checkpoint. Graph construction errors are
fatal and raised on the spot.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

logger = structlog.get_logger(__name__)


class MobileInstallError(Exception):
    """Base exception for mobinstall.

    Args:
        user_message: Message safe to display to the user.
        internal_details: Optional technical details, logged but never
            part of the user-facing message.

    Example:
        >>> raise MobileInstallError(
        ...     "Mobile-install graph could not be built",
        ...     internal_details="registry scope //app:bin already sealed",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "mobinstall_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(MobileInstallError):
    """A referenced prerequisite is missing or lacks a required capability.

    Reported against a specific rule attribute of a specific target.

    Attributes:
        attribute: Name of the offending attribute (e.g. "$incremental_stub_application").
        target_label: Label of the target being analyzed.

    Example:
        >>> err = ConfigurationError(
        ...     "Stub application cannot be found",
        ...     attribute="$incremental_stub_application",
        ...     target_label="//java/com/example:app",
        ... )
        >>> str(err)
        "Stub application cannot be found (target //java/com/example:app, attribute '$incremental_stub_application')"
    """

    def __init__(
        self,
        user_message: str,
        *,
        attribute: str,
        target_label: str,
        internal_details: str | None = None,
    ) -> None:
        full_message = f"{user_message} (target {target_label}, attribute '{attribute}')"
        super().__init__(full_message, internal_details=internal_details)

        self.message = user_message
        self.attribute = attribute
        self.target_label = target_label


class AnalysisError(MobileInstallError):
    """Raised at a checkpoint when configuration errors have been reported.

    Carries every collected ConfigurationError so callers can show all of
    them at once.

    Attributes:
        errors: The collected configuration errors, in report order.
    """

    def __init__(self, errors: Iterable[ConfigurationError]) -> None:
        self.errors: tuple[ConfigurationError, ...] = tuple(errors)
        count = len(self.errors)
        noun = "error" if count == 1 else "errors"
        lines = [f"Analysis of target failed with {count} configuration {noun}"]
        lines.extend(f"  - {error.user_message}" for error in self.errors)
        super().__init__("\n".join(lines))


class GraphConstructionError(MobileInstallError):
    """Raised when an internal invariant of the action graph is violated.

    Use this exception when:
    - Two actions declare the same output artifact
    - The registered actions contain a dependency cycle
    - An output group name is registered twice
    - An install action is requested without its required inputs
    """

    pass


class ToolNotFoundError(GraphConstructionError):
    """Raised when a tool reference cannot be resolved from the toolchain.

    Attributes:
        tool: Name of the missing tool.
    """

    def __init__(self, tool: str, *, internal_details: str | None = None) -> None:
        super().__init__(
            f"Required tool '{tool}' is not configured in the toolchain",
            internal_details=internal_details,
        )
        self.tool = tool
