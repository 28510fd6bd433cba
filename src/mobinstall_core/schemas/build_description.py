"""Build description of one android binary target.

The build description is the YAML document the command line works from.
It names the target, the outputs of the compilation pipeline, the stub
prerequisites, the toolchain and the configuration flags.

Example build.yaml:

    label: //java/com/example:app
    manifest:
      manifest: java/com/example/AndroidManifest.xml
      package: com.example
    resource_apk:
      artifact: bazel-out/bin/java/com/example/app.ap_
      manifest: bazel-out/bin/java/com/example/app_processed_manifest/AndroidManifest.xml
    dexing:
      shard_dex_zips: [bazel-out/bin/java/com/example/shard1.dex.zip]
      java_resource_jar: bazel-out/bin/java/com/example/app_files/java_resources.jar
    native_libs:
      arm64-v8a: [bazel-out/bin/jni/arm64-v8a/libnative.so]
    signing_key: tools/android/debug_keystore
    stub_application:
      label: //tools/android/incremental_stub_application
      java: {runtime_jars: [bazel-out/bin/tools/android/libstub.jar]}
    toolchain: {...}
    config:
      incremental_native_libs: true
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mobinstall_core.graph.registry import DEFAULT_BIN_DIR
from mobinstall_core.schemas.artifact import Artifact, Label
from mobinstall_core.schemas.config import MobileInstallConfig, Toolchain
from mobinstall_core.schemas.inputs import (
    SPLIT_STUB_APPLICATION_ATTRIBUTE,
    STUB_APPLICATION_ATTRIBUTE,
    ApplicationManifest,
    DexingOutput,
    NativeLibs,
    Prerequisite,
    ResourceDependencies,
    ResourcePackage,
)


class MobileInstallInputs(BaseModel):
    """Outputs of the compilation pipeline consumed by the assembler.

    Attributes:
        manifest: Application manifest; reported as a configuration error when absent.
        resource_dependencies: Resolved resource dependencies.
        resource_apk: Resource package of the regular binary.
        dexing: Dex shards and merged Java resources.
        native_libs: Native libraries per architecture.
        native_libs_aars: Native library archives contributed by AARs.
        signing_key: Key all apks are signed with.
        additional_merged_manifests: Extra manifests recorded in deploy info.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest: ApplicationManifest | None = Field(default=None, description="App manifest")
    resource_dependencies: ResourceDependencies = Field(
        default_factory=ResourceDependencies,
        description="Resolved resource dependencies",
    )
    resource_apk: ResourcePackage = Field(..., description="Binary resource package")
    dexing: DexingOutput = Field(..., description="Dexing output")
    native_libs: NativeLibs = Field(default_factory=NativeLibs, description="Native libraries")
    native_libs_aars: tuple[Artifact, ...] = Field(default=(), description="AAR native libs")
    signing_key: Artifact = Field(..., description="Signing key")
    additional_merged_manifests: tuple[Artifact, ...] = Field(
        default=(),
        description="Additional merged manifests",
    )


class BuildDescription(MobileInstallInputs):
    """Everything needed to assemble the mobile-install graph of one target.

    Attributes:
        label: Label of the android binary target.
        bin_dir: Root of the output tree.
        stub_application: Prerequisite behind ``$incremental_stub_application``.
        split_stub_application: Prerequisite behind
            ``$incremental_split_stub_application``.
        toolchain: Tool references.
        config: Build configuration flags.
    """

    label: str = Field(..., description="Target label")
    bin_dir: str = Field(default=DEFAULT_BIN_DIR, min_length=1, description="Output tree root")
    stub_application: Prerequisite | None = Field(default=None, description="Stub prerequisite")
    split_stub_application: Prerequisite | None = Field(
        default=None,
        description="Split stub prerequisite",
    )
    toolchain: Toolchain = Field(default_factory=Toolchain, description="Tool references")
    config: MobileInstallConfig = Field(
        default_factory=MobileInstallConfig,
        description="Build configuration",
    )

    @field_validator("label")
    @classmethod
    def _validate_label(cls, value: str) -> str:
        Label.parse(value)
        return value

    @property
    def target_label(self) -> Label:
        return Label.parse(self.label)

    def inputs(self) -> MobileInstallInputs:
        """Project the description onto the assembler's inputs."""
        fields = set(MobileInstallInputs.model_fields)
        return MobileInstallInputs.model_validate(
            {name: getattr(self, name) for name in fields}
        )

    def prerequisites(self) -> dict[str, Prerequisite]:
        resolved: dict[str, Prerequisite] = {}
        if self.stub_application is not None:
            resolved[STUB_APPLICATION_ATTRIBUTE] = self.stub_application
        if self.split_stub_application is not None:
            resolved[SPLIT_STUB_APPLICATION_ATTRIBUTE] = self.split_stub_application
        return resolved

    @classmethod
    def from_yaml(cls, path: str | Path) -> BuildDescription:
        """Load and validate a build description from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If the YAML syntax is invalid.
            pydantic.ValidationError: If validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        return cls.model_validate(data)
