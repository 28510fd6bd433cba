"""Resource packages for incremental and split installs.

Both strategies produce the same pair of packages: one "incremental"
package built from the stubbed manifest, and one "android_resources"
package built from a code-less split manifest, used as the resource-only
split. Which strategy runs is decided by the resolved policy, never by
looking at the raw flags here.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog
from pydantic import BaseModel, ConfigDict

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.registry import ImplicitOutputs
from mobinstall_core.graph.spawn import CommandLine, SpawnActionBuilder
from mobinstall_core.mobile_install.manifest import (
    add_mobile_install_stub_application,
    create_split_manifest,
)
from mobinstall_core.schemas.artifact import Artifact
from mobinstall_core.schemas.config import ResourceStrategy, tokenize_extensions
from mobinstall_core.schemas.inputs import (
    ApplicationManifest,
    ResourceContainer,
    ResourceDependencies,
    ResourcePackage,
)

logger = structlog.get_logger(__name__)

SPLIT_RESOURCES_NAME = "android_resources"


class MobileInstallResourceApks(BaseModel):
    """Resource packages built for mobile-install.

    Attributes:
        incremental: Package used by the incremental and full installs.
        split: Package of the resource-only split.
        stub_data: Data file telling the stub which application to load.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    incremental: ResourcePackage
    split: ResourcePackage
    stub_data: Artifact


def _data_flag(container: ResourceContainer) -> str:
    manifest = container.manifest.exec_path if container.manifest else ""
    symbols = container.symbols.exec_path if container.symbols else ""
    resources = "#".join(a.exec_path for a in container.resources)
    assets = "#".join(a.exec_path for a in container.assets)
    return f"{resources}:{assets}:{manifest}:{symbols}"


def check_resource_inputs(
    ctx: RuleContext, manifest: ApplicationManifest | None, deps: ResourceDependencies
) -> None:
    if manifest is None:
        ctx.attribute_error("manifest", "A manifest is required to build mobile-install resources")
    for container in deps.all_containers():
        if container.manifest is None:
            ctx.attribute_error(
                "resource_files",
                f"Resource dependency '{container.label}' does not provide a manifest",
            )


def _process_decoupled(
    ctx: RuleContext,
    manifest: Artifact,
    output: Artifact,
    deps: ResourceDependencies,
    prefix: str,
) -> ResourcePackage:
    """Validate and package resources without generating the resource symbol class."""
    command_line = (
        CommandLine()
        .add("--tool", "AAPT2_PACKAGE", "--")
        .add_exec_path("--manifest", manifest)
        .add_exec_path("--packagePath", output)
        .add_exec_path("--androidJar", ctx.tool("android_jar"))
        .add("--packageType", "INCREMENTAL")
        .add("--debug")
    )
    for container in deps.all_containers():
        command_line.add("--data", _data_flag(container))

    ctx.register_action(
        SpawnActionBuilder("AndroidIncrementalResources")
        .set_progress_message("Processing %s resources for %s", prefix, ctx.label)
        .set_executable(ctx.tool("resources_busybox"))
        .add_input(manifest)
        .add_input(ctx.tool("android_jar"))
        .add_inputs(a for c in deps.all_containers() for a in c.artifacts())
        .add_output(output)
        .set_command_line(command_line)
        .use_param_file()
        .build()
    )
    return ResourcePackage(artifact=output, manifest=manifest, r_class_jar=None)


def _pack_legacy(
    ctx: RuleContext,
    manifest: Artifact,
    output: Artifact,
    deps: ResourceDependencies,
    prefix: str,
    extensions: tuple[str, ...],
) -> ResourcePackage:
    """Package data and resources in one step, the pre-decoupling way."""
    proguard_config = ctx.registry.unique_directory_artifact(
        "proguard", f"{prefix}_proguard.cfg"
    )
    command_line = (
        CommandLine()
        .add("--tool", "PACKAGE", "--")
        .add_exec_path("--manifest", manifest)
        .add_exec_path("--packagePath", output)
        .add_exec_path("--androidJar", ctx.tool("android_jar"))
        .add_exec_path("--aapt", ctx.tool("aapt"))
        .add_exec_path("--proguardOutput", proguard_config)
        .add("--packageType", "INCREMENTAL")
        .add("--debug")
    )
    for extension in extensions:
        command_line.add("--uncompressedExtension", extension)
    if ctx.policy.crunch_png:
        command_line.add("--useAaptCruncher=yes")
    else:
        command_line.add("--useAaptCruncher=no")
    for container in deps.all_containers():
        command_line.add("--data", _data_flag(container))

    ctx.register_action(
        SpawnActionBuilder("AndroidIncrementalResources")
        .set_progress_message("Packaging %s resources for %s", prefix, ctx.label)
        .set_executable(ctx.tool("resources_busybox"))
        .add_tool(ctx.tool("aapt"))
        .add_input(manifest)
        .add_input(ctx.tool("android_jar"))
        .add_inputs(a for c in deps.all_containers() for a in c.artifacts())
        .add_output(output)
        .add_output(proguard_config)
        .set_command_line(command_line)
        .use_param_file()
        .build()
    )
    return ResourcePackage(artifact=output, manifest=manifest, r_class_jar=None)


def _build_decoupled(
    ctx: RuleContext, manifest: ApplicationManifest, deps: ResourceDependencies
) -> MobileInstallResourceApks:
    stubbed = add_mobile_install_stub_application(ctx, manifest)
    incremental = _process_decoupled(
        ctx,
        stubbed.manifest,
        ctx.implicit_output(ImplicitOutputs.INCREMENTAL_RESOURCES_APK),
        deps,
        "incremental",
    )
    split_manifest = create_split_manifest(ctx, manifest, SPLIT_RESOURCES_NAME, has_code=False)
    split = _process_decoupled(
        ctx,
        split_manifest,
        ctx.mobile_install_artifact(f"{SPLIT_RESOURCES_NAME}.ap_"),
        deps,
        "incremental_split",
    )
    ctx.assert_no_errors()
    return MobileInstallResourceApks(
        incremental=incremental, split=split, stub_data=stubbed.stub_data
    )


def _build_legacy(
    ctx: RuleContext, manifest: ApplicationManifest, deps: ResourceDependencies
) -> MobileInstallResourceApks:
    extensions: tuple[str, ...] = ()
    try:
        extensions = tokenize_extensions(ctx.policy.nocompress_extensions)
    except ValueError as exc:
        ctx.attribute_error("nocompress_extensions", f"Unable to tokenize extensions: {exc}")
    ctx.assert_no_errors()

    stubbed = add_mobile_install_stub_application(ctx, manifest)
    incremental = _pack_legacy(
        ctx,
        stubbed.manifest,
        ctx.implicit_output(ImplicitOutputs.INCREMENTAL_RESOURCES_APK),
        deps,
        "incremental",
        extensions,
    )
    ctx.assert_no_errors()

    split_manifest = create_split_manifest(ctx, manifest, SPLIT_RESOURCES_NAME, has_code=False)
    split = _pack_legacy(
        ctx,
        split_manifest,
        ctx.mobile_install_artifact(f"{SPLIT_RESOURCES_NAME}.ap_"),
        deps,
        "incremental_split",
        extensions,
    )
    ctx.assert_no_errors()
    return MobileInstallResourceApks(
        incremental=incremental, split=split, stub_data=stubbed.stub_data
    )


ResourceBuilder = Callable[
    [RuleContext, ApplicationManifest, ResourceDependencies], MobileInstallResourceApks
]

_STRATEGIES: dict[ResourceStrategy, ResourceBuilder] = {
    "decoupled": _build_decoupled,
    "legacy": _build_legacy,
}


def build_incremental_resource_packages(
    ctx: RuleContext,
    manifest: ApplicationManifest | None,
    resource_deps: ResourceDependencies,
) -> MobileInstallResourceApks:
    """Build the incremental and split resource packages.

    Args:
        ctx: Analysis context of the binary.
        manifest: Base application manifest.
        resource_deps: Resolved resource dependencies.

    Returns:
        The incremental package and the "android_resources" split package.

    Raises:
        AnalysisError: If the manifest or a dependency could not be
            resolved; no packaging action is registered in that case.
    """
    check_resource_inputs(ctx, manifest, resource_deps)
    ctx.assert_no_errors()
    if manifest is None:
        raise GraphConstructionError("Manifest check passed without a manifest")

    strategy = ctx.policy.resource_strategy
    result = _STRATEGIES[strategy](ctx, manifest, resource_deps)
    logger.info(
        "resource_packages_built",
        target=str(ctx.label),
        strategy=strategy,
        incremental=result.incremental.artifact.exec_path,
        split=result.split.artifact.exec_path,
    )
    return result
