"""Builders for spawn and file-write actions."""

from __future__ import annotations

from collections.abc import Iterable

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.schemas.action import Action
from mobinstall_core.schemas.artifact import Artifact


class CommandLine:
    """Incrementally rendered command line.

    Example:
        >>> CommandLine().add("package").add_exec_path("-F", out).build()
        ('package', '-F', 'bazel-out/bin/app/split_dex1.ap_')
    """

    def __init__(self) -> None:
        self._args: list[str] = []

    def add(self, *args: str) -> CommandLine:
        self._args.extend(args)
        return self

    def add_exec_path(self, flag: str | Artifact, artifact: Artifact | None = None) -> CommandLine:
        """Add ``flag path`` or, with a single artifact argument, just the path."""
        if isinstance(flag, Artifact):
            self._args.append(flag.exec_path)
        else:
            if artifact is None:
                raise GraphConstructionError(f"No artifact given for flag {flag}")
            self._args.extend((flag, artifact.exec_path))
        return self

    def add_exec_paths(self, artifacts: Iterable[Artifact], flag: str | None = None) -> CommandLine:
        """Add each path, each preceded by ``flag`` when one is given."""
        for artifact in artifacts:
            if flag is not None:
                self._args.append(flag)
            self._args.append(artifact.exec_path)
        return self

    def add_formatted(self, template: str, *values: object) -> CommandLine:
        self._args.append(template % tuple(str(v) for v in values))
        return self

    def build(self) -> tuple[str, ...]:
        return tuple(self._args)


class SpawnActionBuilder:
    """Fluent builder for actions that run a tool."""

    def __init__(self, mnemonic: str) -> None:
        self._mnemonic = mnemonic
        self._progress_message = ""
        self._executable: Artifact | None = None
        self._tools: list[Artifact] = []
        self._inputs: list[Artifact] = []
        self._outputs: list[Artifact] = []
        self._command_line = CommandLine()
        self._use_param_file = False
        self._unconditional = False
        self._execution_info: dict[str, str] = {}

    def set_progress_message(self, template: str, *values: object) -> SpawnActionBuilder:
        self._progress_message = template % values if values else template
        return self

    def set_executable(self, executable: Artifact) -> SpawnActionBuilder:
        self._executable = executable
        return self

    def add_tool(self, tool: Artifact) -> SpawnActionBuilder:
        if tool not in self._tools:
            self._tools.append(tool)
        return self

    def add_input(self, artifact: Artifact) -> SpawnActionBuilder:
        if artifact not in self._inputs:
            self._inputs.append(artifact)
        return self

    def add_inputs(self, artifacts: Iterable[Artifact]) -> SpawnActionBuilder:
        for artifact in artifacts:
            self.add_input(artifact)
        return self

    def add_output(self, artifact: Artifact) -> SpawnActionBuilder:
        self._outputs.append(artifact)
        return self

    def set_command_line(self, command_line: CommandLine) -> SpawnActionBuilder:
        self._command_line = command_line
        return self

    def use_param_file(self) -> SpawnActionBuilder:
        self._use_param_file = True
        return self

    def execute_unconditionally(self) -> SpawnActionBuilder:
        self._unconditional = True
        return self

    def set_execution_info(self, info: dict[str, str]) -> SpawnActionBuilder:
        self._execution_info = dict(info)
        return self

    def build(self) -> Action:
        if self._executable is None:
            raise GraphConstructionError(f"Action {self._mnemonic} has no executable")
        return Action(
            mnemonic=self._mnemonic,
            progress_message=self._progress_message,
            executable=self._executable,
            tools=tuple(self._tools),
            inputs=tuple(self._inputs),
            outputs=tuple(self._outputs),
            arguments=self._command_line.build(),
            use_param_file=self._use_param_file,
            execute_unconditionally=self._unconditional,
            execution_info=self._execution_info,
        )


def file_write_action(
    mnemonic: str,
    output: Artifact,
    content: str,
    *,
    inputs: Iterable[Artifact] = (),
    execute_unconditionally: bool = False,
) -> Action:
    """Build an action that writes ``content`` to ``output``."""
    return Action(
        mnemonic=mnemonic,
        progress_message=f"Writing {output.basename}",
        inputs=tuple(inputs),
        outputs=(output,),
        content=content,
        execute_unconditionally=execute_unconditionally,
    )
