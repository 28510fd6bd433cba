"""Stub application dex for incremental and split installs."""

from __future__ import annotations

import structlog

from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.spawn import CommandLine, SpawnActionBuilder
from mobinstall_core.schemas.artifact import Artifact
from mobinstall_core.schemas.inputs import (
    SPLIT_STUB_APPLICATION_ATTRIBUTE,
    STUB_APPLICATION_ATTRIBUTE,
    Prerequisite,
)

logger = structlog.get_logger(__name__)


def stub_attribute(split: bool) -> str:
    return SPLIT_STUB_APPLICATION_ATTRIBUTE if split else STUB_APPLICATION_ATTRIBUTE


def resolve_stub_prerequisite(ctx: RuleContext, split: bool) -> Prerequisite | None:
    """Look up the stub prerequisite, reporting it if missing or not a Java target."""
    attribute = stub_attribute(split)
    dep = ctx.prerequisite(attribute)
    if dep is None:
        ctx.attribute_error(attribute, "Stub application cannot be found")
        return None
    if dep.java is None:
        ctx.attribute_error(attribute, f"'{dep.label}' should be a Java target")
        return None
    return dep


def _desugar(ctx: RuleContext, jars: tuple[Artifact, ...], prefix: str) -> tuple[Artifact, ...]:
    android_jar = ctx.tool("android_jar")
    desugared: list[Artifact] = []
    for index, jar in enumerate(jars):
        output = ctx.mobile_install_artifact(f"{prefix}_desugared/{index}_{jar.basename}")
        ctx.register_action(
            SpawnActionBuilder("Desugar")
            .set_progress_message("Desugaring %s for mobile-install stub", jar.basename)
            .set_executable(ctx.tool("desugar"))
            .add_input(jar)
            .add_input(android_jar)
            .add_output(output)
            .set_command_line(
                CommandLine()
                .add_exec_path("--input", jar)
                .add_exec_path("--output", output)
                .add_exec_path("--bootclasspath_entry", android_jar)
            )
            .use_param_file()
            .build()
        )
        desugared.append(output)
    return tuple(desugared)


def build_stub_application(ctx: RuleContext, split: bool) -> Artifact | None:
    """Build the dex of the stub application.

    Args:
        ctx: Analysis context of the binary.
        split: Build the split-install stub instead of the incremental one.

    Returns:
        The stub ``classes.dex``, or None when the prerequisite is missing or
        is not a Java target. The error is recorded on ``ctx``; callers check
        it at their next checkpoint.
    """
    dep = resolve_stub_prerequisite(ctx, split)
    if dep is None or dep.java is None:
        return None

    prefix = "split_stub" if split else "stub"
    runtime_jars = dep.java.runtime_jars
    if ctx.policy.desugar:
        runtime_jars = _desugar(ctx, runtime_jars, prefix)

    deploy_jar = ctx.mobile_install_artifact(f"{prefix}_deploy.jar")
    jar_command = (
        CommandLine()
        .add_exec_path("--output", deploy_jar)
        .add("--sources")
        .add_exec_paths(runtime_jars)
        .add("--normalize", "--compression")
    )
    if ctx.policy.check_desugar_deps:
        jar_command.add("--check_desugar_deps")
    ctx.register_action(
        SpawnActionBuilder("JavaDeployJar")
        .set_progress_message("Building deploy jar %s", deploy_jar.exec_path)
        .set_executable(ctx.tool("singlejar"))
        .add_inputs(runtime_jars)
        .add_output(deploy_jar)
        .set_command_line(jar_command)
        .use_param_file()
        .build()
    )

    stub_dex = ctx.mobile_install_artifact(f"{prefix}_application/classes.dex")
    ctx.register_action(
        SpawnActionBuilder("AndroidDexer")
        .set_progress_message("Converting %s to dex format", deploy_jar.exec_path)
        .set_executable(ctx.tool("dexer"))
        .add_input(deploy_jar)
        .add_output(stub_dex)
        .set_command_line(
            CommandLine()
            .add("--dex", "--num-threads=1")
            .add_formatted("--output=%s", stub_dex)
            .add_exec_path(deploy_jar)
        )
        .build()
    )
    logger.debug("stub_dex_built", target=str(ctx.label), split=split, dep=dep.label)
    return stub_dex
