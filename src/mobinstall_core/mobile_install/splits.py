"""Decomposition of an application into independently installable splits.

Split order is a convention of this module: the resource-only split comes
first so the package manager sees every resource before any split whose
manifest references it, then one split per dex shard, then the native
and Java resource splits. The main split is built last and listed last.
Split membership depends only on static inputs (shard count, native libs,
configuration), never on anything discovered while actions run.
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel, ConfigDict, Field

from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.spawn import CommandLine, SpawnActionBuilder
from mobinstall_core.mobile_install.apk import ApkActionsBuilder
from mobinstall_core.mobile_install.manifest import create_split_manifest
from mobinstall_core.mobile_install.resources import SPLIT_RESOURCES_NAME
from mobinstall_core.mobile_install.stub import build_stub_application
from mobinstall_core.schemas.artifact import Artifact
from mobinstall_core.schemas.inputs import (
    ApplicationManifest,
    DexingOutput,
    NativeLibs,
    ResourcePackage,
)

logger = structlog.get_logger(__name__)

NATIVE_SPLIT = "native"
JAVA_RESOURCES_SPLIT = "java_resources"
SPLIT_MAIN = "split_main"


def dex_split_name(shard_index: int) -> str:
    """Name of the split carrying the dex shard at ``shard_index`` (0-based)."""
    return f"dex{shard_index + 1}"


class SplitDecomposition(BaseModel):
    """The split apks of one application.

    Attributes:
        split_apks: Every split except the main one, resource split first.
        split_main_apk: The main split, carrying the stub application.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    split_apks: tuple[Artifact, ...] = Field(..., min_length=1)
    split_main_apk: Artifact

    @property
    def all_split_apks(self) -> tuple[Artifact, ...]:
        return (*self.split_apks, self.split_main_apk)


def create_split_apk_resources(
    ctx: RuleContext, manifest: ApplicationManifest, split_name: str, has_code: bool
) -> Artifact:
    """Package the manifest of split ``split_name`` into a resource archive."""
    split_manifest = create_split_manifest(ctx, manifest, split_name, has_code)
    split_resources = ctx.mobile_install_artifact(f"split_{split_name}.ap_")
    android_jar = ctx.tool("android_jar")
    ctx.register_action(
        SpawnActionBuilder("AaptSplitResourceApk")
        .set_progress_message("Generating resource apk for split %s", split_name)
        .set_executable(ctx.tool("aapt"))
        .add_input(split_manifest)
        .add_input(android_jar)
        .add_output(split_resources)
        .set_command_line(
            CommandLine()
            .add("package")
            .add_exec_path("-F", split_resources)
            .add_exec_path("-M", split_manifest)
            .add_exec_path("-I", android_jar)
        )
        .build()
    )
    return split_resources


def strip_resources(ctx: RuleContext, resource_apk: ResourcePackage) -> Artifact:
    """Register the action removing every resource entry from the main package."""
    stripped = ctx.mobile_install_artifact(f"{SPLIT_MAIN}.ap_")
    ctx.register_action(
        SpawnActionBuilder("AndroidStripResources")
        .set_progress_message("Stripping resources from split main apk")
        .set_executable(ctx.tool("strip_resources"))
        .add_input(resource_apk.artifact)
        .add_output(stripped)
        .set_command_line(
            CommandLine()
            .add_exec_path("--input_resource_apk", resource_apk.artifact)
            .add_exec_path("--output_resource_apk", stripped)
        )
        .build()
    )
    return stripped


def decompose_splits(
    ctx: RuleContext,
    *,
    dexing_output: DexingOutput,
    native_libs: NativeLibs,
    native_libs_aars: tuple[Artifact, ...],
    split_resource_apk: ResourcePackage,
    resource_apk: ResourcePackage,
    manifest: ApplicationManifest,
    signing_key: Artifact,
) -> SplitDecomposition:
    """Build every split apk of the application.

    Args:
        ctx: Analysis context of the binary.
        dexing_output: Dex shards and merged Java resources.
        native_libs: Native libraries per architecture; may be empty, the
            native split is built regardless.
        native_libs_aars: Native library archives from AAR dependencies,
            packaged into the main split.
        split_resource_apk: The "android_resources" package.
        resource_apk: Resource package of the regular binary.
        manifest: Application manifest splits derive their manifests from.
        signing_key: Key every split is signed with.

    Returns:
        The ordered split apks and the main split.

    Raises:
        AnalysisError: If the split stub application cannot be built.
    """
    split_apks: list[Artifact] = []

    resource_split = (
        ApkActionsBuilder("split Android resource apk")
        .add_input_zip(split_resource_apk.artifact)
        .set_signed_apk(ctx.mobile_install_artifact(f"{SPLIT_RESOURCES_NAME}.apk"))
        .set_signing_key(signing_key)
        .register_actions(ctx)
    )
    split_apks.append(resource_split)

    for index, shard in enumerate(dexing_output.shard_dex_zips):
        name = dex_split_name(index)
        resources = create_split_apk_resources(ctx, manifest, name, has_code=True)
        split_apks.append(
            ApkActionsBuilder(f"split dex apk {index + 1}")
            .set_classes_dex(shard)
            .add_input_zip(resources)
            .set_signed_apk(ctx.mobile_install_artifact(f"{name}.apk"))
            .set_signing_key(signing_key)
            .register_actions(ctx)
        )

    native_resources = create_split_apk_resources(ctx, manifest, NATIVE_SPLIT, has_code=False)
    split_apks.append(
        ApkActionsBuilder("split native apk")
        .add_input_zip(native_resources)
        .set_native_libs(native_libs)
        .set_signed_apk(ctx.mobile_install_artifact(f"{NATIVE_SPLIT}.apk"))
        .set_signing_key(signing_key)
        .register_actions(ctx)
    )

    java_resources = create_split_apk_resources(
        ctx, manifest, JAVA_RESOURCES_SPLIT, has_code=False
    )
    split_apks.append(
        ApkActionsBuilder("split Java resource apk")
        .add_input_zip(java_resources)
        .set_java_resource_zip(dexing_output.java_resource_jar)
        .set_signed_apk(ctx.mobile_install_artifact(f"{JAVA_RESOURCES_SPLIT}.apk"))
        .set_signing_key(signing_key)
        .register_actions(ctx)
    )

    main_resources = strip_resources(ctx, resource_apk)
    split_stub_dex = build_stub_application(ctx, split=True)
    ctx.assert_no_errors()
    assert split_stub_dex is not None

    split_main_apk = (
        ApkActionsBuilder("split main apk")
        .set_classes_dex(split_stub_dex)
        .add_input_zip(main_resources)
        .add_input_zips(native_libs_aars)
        .set_signed_apk(ctx.mobile_install_artifact(f"{SPLIT_MAIN}.apk"))
        .set_signing_key(signing_key)
        .register_actions(ctx)
    )

    logger.info(
        "split_decomposed",
        target=str(ctx.label),
        dex_splits=len(dexing_output.shard_dex_zips),
        total=len(split_apks) + 1,
    )
    return SplitDecomposition(split_apks=tuple(split_apks), split_main_apk=split_main_apk)
