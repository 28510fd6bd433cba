"""Target labels and artifact handles.

An Artifact is an opaque, immutable handle on one build-produced (or
source) file. Derived artifacts are only ever issued by the
ArtifactRegistry; source artifacts come straight from the build
description.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ArtifactRoot = Literal["source", "bin"]
"""Where an artifact lives: checked-in source tree or the output tree."""


class Label(BaseModel):
    """Identity of a build target, written as ``//package:name``.

    Attributes:
        package: Package path without the leading ``//``.
        name: Target name within the package.

    Example:
        >>> label = Label.parse("//java/com/example:app")
        >>> label.package, label.name
        ('java/com/example', 'app')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    package: str = Field(default="", description="Package path without leading //")
    name: str = Field(..., min_length=1, description="Target name")

    @field_validator("package")
    @classmethod
    def _validate_package(cls, value: str) -> str:
        if value.startswith("/") or value.endswith("/"):
            raise ValueError(f"package must not start or end with '/': {value!r}")
        return value

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if ":" in value or value.startswith("/"):
            raise ValueError(f"invalid target name: {value!r}")
        return value

    @classmethod
    def parse(cls, raw: str) -> Label:
        """Parse a label string.

        ``//pkg`` is shorthand for ``//pkg:<last path segment>``.

        Raises:
            ValueError: If the string is not an absolute label.
        """
        if not raw.startswith("//"):
            raise ValueError(f"label must start with '//': {raw!r}")
        body = raw[2:]
        if ":" in body:
            package, name = body.split(":", 1)
        else:
            package, name = body, body.rsplit("/", 1)[-1]
        return cls(package=package, name=name)

    def __str__(self) -> str:
        return f"//{self.package}:{self.name}"


class Artifact(BaseModel):
    """Handle on one file known to the build graph.

    Artifacts are compared and hashed by value, so the same path requested
    twice from one registry yields equal handles.

    Attributes:
        exec_path: Path of the file relative to the execution root.
        root: "source" for checked-in inputs, "bin" for derived outputs.
        owner: Label string of the target that declared the artifact.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    exec_path: str = Field(..., min_length=1, description="Path relative to the execution root")
    root: ArtifactRoot = Field(default="source", description="Artifact root")
    owner: str | None = Field(default=None, description="Label of the declaring target")

    @model_validator(mode="before")
    @classmethod
    def _from_path(cls, data: Any) -> Any:
        # Build descriptions list source files as plain paths.
        if isinstance(data, str):
            return {"exec_path": data}
        return data

    @classmethod
    def source(cls, exec_path: str) -> Artifact:
        """Create a handle on a checked-in source file."""
        return cls(exec_path=exec_path, root="source")

    @property
    def basename(self) -> str:
        return self.exec_path.rsplit("/", 1)[-1]

    @property
    def is_source(self) -> bool:
        return self.root == "source"

    def __str__(self) -> str:
        return self.exec_path
