"""Packaging and signing of apks.

Every apk built for mobile-install goes through ApkActionsBuilder: one
action assembles the unsigned archive, a second signs it with the
target's signing key. Nothing leaves this module unsigned.
"""

from __future__ import annotations

from collections.abc import Iterable

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.spawn import CommandLine, SpawnActionBuilder
from mobinstall_core.schemas.artifact import Artifact
from mobinstall_core.schemas.inputs import NativeLibs


class ApkActionsBuilder:
    """Collects the contents of one apk and registers the actions building it.

    Example:
        >>> (
        ...     ApkActionsBuilder("split dex apk 1")
        ...     .set_classes_dex(shard)
        ...     .add_input_zip(split_resources)
        ...     .set_signed_apk(ctx.mobile_install_artifact("dex1.apk"))
        ...     .set_signing_key(signing_key)
        ...     .register_actions(ctx)
        ... )
    """

    def __init__(self, description: str) -> None:
        self.description = description
        self._classes_dex: Artifact | None = None
        self._input_zips: list[Artifact] = []
        self._java_resource_zip: Artifact | None = None
        self._java_resource_file: Artifact | None = None
        self._native_libs: NativeLibs | None = None
        self._signed_apk: Artifact | None = None
        self._signing_key: Artifact | None = None

    def set_classes_dex(self, dex: Artifact) -> ApkActionsBuilder:
        self._classes_dex = dex
        return self

    def add_input_zip(self, zip_file: Artifact) -> ApkActionsBuilder:
        self._input_zips.append(zip_file)
        return self

    def add_input_zips(self, zip_files: Iterable[Artifact]) -> ApkActionsBuilder:
        self._input_zips.extend(zip_files)
        return self

    def set_java_resource_zip(self, zip_file: Artifact) -> ApkActionsBuilder:
        self._java_resource_zip = zip_file
        return self

    def set_java_resource_file(self, resource_file: Artifact) -> ApkActionsBuilder:
        self._java_resource_file = resource_file
        return self

    def set_native_libs(self, native_libs: NativeLibs) -> ApkActionsBuilder:
        self._native_libs = native_libs
        return self

    def set_signed_apk(self, apk: Artifact) -> ApkActionsBuilder:
        self._signed_apk = apk
        return self

    def set_signing_key(self, key: Artifact) -> ApkActionsBuilder:
        self._signing_key = key
        return self

    def _extracted_java_resources(self, ctx: RuleContext, signed_apk: Artifact) -> Artifact | None:
        """Strip class files from the Java resource zip when an extractor is configured."""
        if self._java_resource_zip is None:
            return None
        extractor = ctx.toolchain.resource_extractor
        if extractor is None:
            return self._java_resource_zip
        extracted = ctx.mobile_install_artifact(
            f"{signed_apk.basename}_extracted_{self._java_resource_zip.basename}"
        )
        ctx.register_action(
            SpawnActionBuilder("ResourceExtractor")
            .set_progress_message("Extracting Java resources from %s", self._java_resource_zip)
            .set_executable(extractor)
            .add_input(self._java_resource_zip)
            .add_output(extracted)
            .set_command_line(
                CommandLine().add_exec_path(self._java_resource_zip).add_exec_path(extracted)
            )
            .build()
        )
        return extracted

    def register_actions(self, ctx: RuleContext) -> Artifact:
        """Register the build and sign actions.

        Returns:
            The signed apk.

        Raises:
            GraphConstructionError: If no output apk or signing key was set.
        """
        if self._signed_apk is None:
            raise GraphConstructionError(f"No output apk set for {self.description}")
        if self._signing_key is None:
            raise GraphConstructionError(f"No signing key set for {self.description}")
        signed_apk = self._signed_apk

        unsigned_apk = ctx.mobile_install_artifact(f"unsigned/{signed_apk.basename}")
        java_resources = self._extracted_java_resources(ctx, signed_apk)

        builder = (
            SpawnActionBuilder("AndroidApkBuilder")
            .set_progress_message("Generating unsigned %s", self.description)
            .set_executable(ctx.tool("apkbuilder"))
            .add_output(unsigned_apk)
        )
        command_line = CommandLine().add_exec_path(unsigned_apk).add("-u")

        if self._classes_dex is not None:
            builder.add_input(self._classes_dex)
            flag = "-f" if self._classes_dex.exec_path.endswith(".dex") else "-z"
            command_line.add_exec_path(flag, self._classes_dex)
        if java_resources is not None:
            builder.add_input(java_resources)
            command_line.add_exec_path("-rj", java_resources)
        if self._java_resource_file is not None:
            builder.add_input(self._java_resource_file)
            command_line.add_exec_path("-rf", self._java_resource_file)
        if self._native_libs is not None:
            for arch, lib in self._native_libs.entries():
                builder.add_input(lib)
                command_line.add("-nf").add_formatted("lib/%s/%s=%s", arch, lib.basename, lib)
        for zip_file in self._input_zips:
            builder.add_input(zip_file)
            command_line.add_exec_path("-z", zip_file)

        ctx.register_action(builder.set_command_line(command_line).build())

        ctx.register_action(
            SpawnActionBuilder("AndroidApkSigner")
            .set_progress_message("Signing and aligning %s", self.description)
            .set_executable(ctx.tool("apksigner"))
            .add_input(unsigned_apk)
            .add_input(self._signing_key)
            .add_output(signed_apk)
            .set_command_line(
                CommandLine()
                .add("sign", "--v1-signing-enabled", "true", "--v2-signing-enabled", "true")
                .add_exec_path("--ks", self._signing_key)
                .add("--ks-pass", "pass:android")
                .add_exec_path("--out", signed_apk)
                .add_exec_path(unsigned_apk)
            )
            .build()
        )
        return signed_apk


def signing_key_of(ctx: RuleContext, apk: Artifact) -> Artifact | None:
    """Return the key the producing signer action signs ``apk`` with."""
    action = ctx.graph.producer_of(apk)
    if action is None or action.mnemonic != "AndroidApkSigner":
        return None
    key_paths = action.flag_values("--ks")
    for artifact in action.inputs:
        if artifact.exec_path in key_paths:
            return artifact
    return None
