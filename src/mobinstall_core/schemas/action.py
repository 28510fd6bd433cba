"""Declarative action model.

An Action describes a unit of work for the external executor: which tool
to run, on which inputs, producing which outputs, with which command
line. Constructing an Action never runs anything.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mobinstall_core.schemas.artifact import Artifact


class Action(BaseModel):
    """One node of the action graph.

    Spawn actions carry an ``executable``; file-write actions carry
    ``content`` instead and no executable.

    Attributes:
        mnemonic: Short action kind identifier (e.g. "AndroidInstall").
        progress_message: Message shown by the executor while running.
        executable: Tool invoked by the action (None for file writes).
        tools: Additional tools the executable needs at runtime.
        inputs: Ordered input artifacts.
        outputs: Output artifacts, each produced by this action only.
        arguments: Rendered command line, without the executable.
        use_param_file: Whether arguments are passed through a params file.
        execute_unconditionally: Never skip or cache this action.
        execution_info: Executor hints, e.g. {"local": ""}.
        content: File content for file-write actions.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mnemonic: str = Field(..., min_length=1, description="Action kind identifier")
    progress_message: str = Field(default="", description="Executor progress message")
    executable: Artifact | None = Field(default=None, description="Executable tool")
    tools: tuple[Artifact, ...] = Field(default=(), description="Runtime tools")
    inputs: tuple[Artifact, ...] = Field(default=(), description="Ordered inputs")
    outputs: tuple[Artifact, ...] = Field(..., min_length=1, description="Outputs")
    arguments: tuple[str, ...] = Field(default=(), description="Command line arguments")
    use_param_file: bool = Field(default=False, description="Pass arguments via params file")
    execute_unconditionally: bool = Field(default=False, description="Always rerun")
    execution_info: dict[str, str] = Field(default_factory=dict, description="Executor hints")
    content: str | None = Field(default=None, description="File-write content")

    @model_validator(mode="after")
    def _check_kind(self) -> Action:
        if self.executable is None and self.content is None:
            raise ValueError("action needs either an executable or file content")
        if self.executable is not None and self.content is not None:
            raise ValueError("spawn actions cannot carry file content")
        if set(self.inputs) & set(self.outputs):
            raise ValueError(f"action {self.mnemonic} consumes its own output")
        return self

    @property
    def is_file_write(self) -> bool:
        return self.executable is None

    @property
    def runs_locally(self) -> bool:
        return "local" in self.execution_info

    def all_inputs(self) -> tuple[Artifact, ...]:
        """Inputs, executable and tools: everything that must exist before the action runs."""
        extra = [self.executable] if self.executable is not None else []
        seen: dict[Artifact, None] = dict.fromkeys([*self.inputs, *extra, *self.tools])
        return tuple(seen)

    def flag_values(self, flag: str) -> list[str]:
        """Return every value passed after ``flag`` on the command line.

        Example:
            >>> action.flag_values("--split_apk")
            ['bazel-out/bin/app/_mobile_install/app/android_resources.apk', ...]
        """
        args = self.arguments
        return [args[i + 1] for i, arg in enumerate(args[:-1]) if arg == flag]
