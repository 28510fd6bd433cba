"""Actions that install the application on a device.

Install actions always run: whether a device is attached, or what is
installed on it, cannot be observed by the build, so the executor must
never consider an install action up to date. They also run locally,
next to the attached device.

Command line flags are part of the install tool's contract and must be
kept exactly as spelled here.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

import structlog

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.registry import ImplicitOutputs
from mobinstall_core.graph.spawn import CommandLine, SpawnActionBuilder, file_write_action
from mobinstall_core.schemas.action import Action
from mobinstall_core.schemas.artifact import Artifact
from mobinstall_core.schemas.config import MobileInstallConfig
from mobinstall_core.schemas.inputs import NativeLibs

logger = structlog.get_logger(__name__)

INSTALL_MNEMONIC = "AndroidInstall"
LOCAL_EXECUTION = {"local": ""}


class DeploymentMode(str, Enum):
    """How the application is pushed to the device.

    Attributes:
        FULL: Install the complete incremental apk, then push code and resources.
        INCREMENTAL: Push only changed code and resources to an installed app.
        SPLIT: Install the application as a set of split apks.
    """

    FULL = "full"
    INCREMENTAL = "incremental"
    SPLIT = "split"

    @property
    def marker_template(self) -> str:
        return {
            DeploymentMode.FULL: ImplicitOutputs.FULL_DEPLOY_MARKER,
            DeploymentMode.INCREMENTAL: ImplicitOutputs.INCREMENTAL_DEPLOY_MARKER,
            DeploymentMode.SPLIT: ImplicitOutputs.SPLIT_DEPLOY_MARKER,
        }[self]


def build_dex_manifest_action(ctx: RuleContext, shard_dex_zips: Sequence[Artifact]) -> Artifact:
    """Register the action listing the dex shards for the install tool."""
    dex_manifest = ctx.implicit_output(ImplicitOutputs.DEX_MANIFEST)
    ctx.register_action(
        SpawnActionBuilder("AndroidDexManifest")
        .set_progress_message("Generating incremental installation manifest for %s", ctx.label)
        .set_executable(ctx.tool("build_incremental_dexmanifest"))
        .add_inputs(shard_dex_zips)
        .add_output(dex_manifest)
        .set_command_line(
            CommandLine().add_exec_path(dex_manifest).add_exec_paths(shard_dex_zips)
        )
        .use_param_file()
        .build()
    )
    return dex_manifest


def render_adb_args(config: MobileInstallConfig) -> str:
    """Render the flag file handed to the install tool via ``--flagfile``.

    Example:
        >>> render_adb_args(MobileInstallConfig(device="emulator-5554", start_type="cold"))
        '--extra_adb_arg=-s\\n--extra_adb_arg=emulator-5554\\n--start=cold\\n'
    """
    lines: list[str] = []
    if config.device:
        lines.extend(["--extra_adb_arg=-s", f"--extra_adb_arg={config.device}"])
    lines.extend(f"--extra_adb_arg={arg}" for arg in config.adb_args)
    lines.append(f"--start={config.start_type}")
    return "\n".join(lines) + "\n"


def build_args_file_action(ctx: RuleContext) -> Artifact:
    """Register the action writing the adb flag file.

    Device selection may change between builds without any input changing,
    so the file is rewritten on every request.
    """
    args_file = ctx.implicit_output(ImplicitOutputs.MOBILE_INSTALL_ARGS)
    ctx.register_action(
        file_write_action(
            "WriteAdbArgs",
            args_file,
            render_adb_args(ctx.config),
            execute_unconditionally=True,
        )
    )
    return args_file


def _install_builder(ctx: RuleContext, marker: Artifact, progress: str) -> SpawnActionBuilder:
    return (
        SpawnActionBuilder(INSTALL_MNEMONIC)
        .set_executable(ctx.tool("incremental_install"))
        .add_tool(ctx.tool("adb"))
        .execute_unconditionally()
        .set_execution_info(LOCAL_EXECUTION)
        .set_progress_message(progress)
        .add_output(marker)
    )


def _build_incremental_install(
    ctx: RuleContext,
    incremental: bool,
    *,
    marker: Artifact,
    args_file: Artifact,
    stub_data: Artifact,
    dex_manifest: Artifact,
    resource_apk: Artifact,
    apk: Artifact | None,
    native_libs: NativeLibs | None,
) -> Action:
    adb = ctx.tool("adb")
    suffix = " incrementally" if incremental else ""
    builder = (
        _install_builder(ctx, marker, f"Installing {ctx.label}{suffix}")
        .add_input(dex_manifest)
        .add_input(resource_apk)
        .add_input(stub_data)
        .add_input(args_file)
    )
    command_line = (
        CommandLine()
        .add_exec_path("--output_marker", marker)
        .add_exec_path("--dexmanifest", dex_manifest)
        .add_exec_path("--resource_apk", resource_apk)
        .add_exec_path("--stub_datafile", stub_data)
        .add_exec_path("--adb", adb)
        .add_exec_path("--flagfile", args_file)
    )

    if not incremental:
        if apk is None:
            raise GraphConstructionError("A full install requires the incremental apk")
        builder.add_input(apk)
        command_line.add_exec_path("--apk", apk)

    if not ctx.policy.bundles_native_libs and native_libs is not None:
        for arch, lib in native_libs.entries():
            builder.add_input(lib)
            command_line.add("--native_lib").add_formatted("%s:%s", arch, lib)

    return builder.set_command_line(command_line).build()


def _build_split_install(
    ctx: RuleContext,
    *,
    marker: Artifact,
    args_file: Artifact,
    stub_data: Artifact,
    split_main_apk: Artifact,
    split_apks: Sequence[Artifact],
) -> Action:
    adb = ctx.tool("adb")
    builder = (
        _install_builder(ctx, marker, f"Installing {ctx.label} using split apks")
        .add_input(stub_data)
        .add_input(args_file)
        .add_input(split_main_apk)
    )
    command_line = (
        CommandLine()
        .add_exec_path("--output_marker", marker)
        .add_exec_path("--stub_datafile", stub_data)
        .add_exec_path("--adb", adb)
        .add_exec_path("--flagfile", args_file)
        .add_exec_path("--split_main_apk", split_main_apk)
    )
    for split_apk in split_apks:
        builder.add_input(split_apk)
        command_line.add_exec_path("--split_apk", split_apk)

    return builder.set_command_line(command_line).build()


def build_install_action(
    ctx: RuleContext,
    mode: DeploymentMode,
    *,
    marker: Artifact,
    args_file: Artifact,
    stub_data: Artifact,
    dex_manifest: Artifact | None = None,
    resource_apk: Artifact | None = None,
    apk: Artifact | None = None,
    native_libs: NativeLibs | None = None,
    split_main_apk: Artifact | None = None,
    split_apks: Sequence[Artifact] = (),
) -> Action:
    """Build and register the install action for ``mode``.

    FULL and INCREMENTAL installs take the dex manifest and the resource
    package; FULL additionally installs ``apk``. With incremental native
    libraries, every library is handed over individually, tagged with its
    architecture. SPLIT installs take the main split and every other split.

    Raises:
        GraphConstructionError: If an input required by ``mode`` is missing.
        ToolNotFoundError: If the install tool or adb is not configured.
    """
    if mode is DeploymentMode.SPLIT:
        if split_main_apk is None:
            raise GraphConstructionError("A split install requires the main split apk")
        action = _build_split_install(
            ctx,
            marker=marker,
            args_file=args_file,
            stub_data=stub_data,
            split_main_apk=split_main_apk,
            split_apks=split_apks,
        )
    else:
        if dex_manifest is None or resource_apk is None:
            raise GraphConstructionError(
                f"A {mode.value} install requires the dex manifest and resource apk"
            )
        action = _build_incremental_install(
            ctx,
            mode is DeploymentMode.INCREMENTAL,
            marker=marker,
            args_file=args_file,
            stub_data=stub_data,
            dex_manifest=dex_manifest,
            resource_apk=resource_apk,
            apk=apk,
            native_libs=native_libs,
        )

    ctx.register_action(action)
    logger.info(
        "install_action_built",
        target=str(ctx.label),
        mode=mode.value,
        inputs=len(action.inputs),
    )
    return action
