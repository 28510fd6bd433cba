"""Build configuration and toolchain models.

MobileInstallConfig holds the raw flags of one build. The assembler never
branches on these flags directly: resolve_policy() turns them into a
MobileInstallPolicy once, and the builders only consult the policy.
"""

from __future__ import annotations

import shlex
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from mobinstall_core.errors import ToolNotFoundError
from mobinstall_core.schemas.artifact import Artifact

StartType = Literal["no", "cold", "warm", "debug"]
ResourceStrategy = Literal["decoupled", "legacy"]
NativeLibsHandling = Literal["bundled", "incremental"]


class MobileInstallConfig(BaseModel):
    """Flags that influence how mobile-install packages are composed.

    Attributes:
        decouple_data_processing: Use the decoupled resource pipeline
            instead of combined data + resource packaging.
        incremental_native_libs: Push native libraries individually instead
            of bundling them in the incremental apk.
        desugar_java8: Desugar the stub application's runtime jars.
        check_desugar_deps: Ask the deploy jar builder to verify desugaring.
        crunch_png: Crunch PNG files when packaging resources (legacy only).
        nocompress_extensions: Extensions stored uncompressed, shell-tokenized.
        adb_args: Extra arguments forwarded to adb.
        device: Serial of the target device, if several are attached.
        start_type: How to start the app after installing it.

    Example:
        >>> config = MobileInstallConfig(incremental_native_libs=True)
        >>> resolve_policy(config).native_libs
        'incremental'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    decouple_data_processing: bool = Field(default=False, description="Decoupled resources")
    incremental_native_libs: bool = Field(default=False, description="Push libs individually")
    desugar_java8: bool = Field(default=False, description="Desugar stub runtime jars")
    check_desugar_deps: bool = Field(default=False, description="Verify desugaring")
    crunch_png: bool = Field(default=True, description="Crunch PNG resources")
    nocompress_extensions: str = Field(default="", description="Uncompressed extensions")
    adb_args: tuple[str, ...] = Field(default=(), description="Extra adb arguments")
    device: str | None = Field(default=None, description="Target device serial")
    start_type: StartType = Field(default="no", description="App start after install")


class MobileInstallPolicy(BaseModel):
    """Construction strategies chosen for one build.

    Attributes:
        resource_strategy: Which resource pipeline builds the packages.
        native_libs: Whether native libraries are bundled into the apk or
            handed to the install tool one by one.
        desugar: Whether stub runtime jars are desugared first.
        check_desugar_deps: Forwarded to the deploy jar builder.
        crunch_png: Forwarded to legacy resource packaging.
        nocompress_extensions: Raw extension list; tokenized by the
            resource builder so that a bad value is reported as a
            configuration error on the target.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    resource_strategy: ResourceStrategy
    native_libs: NativeLibsHandling
    desugar: bool
    check_desugar_deps: bool
    crunch_png: bool
    nocompress_extensions: str

    @property
    def bundles_native_libs(self) -> bool:
        return self.native_libs == "bundled"


def resolve_policy(config: MobileInstallConfig) -> MobileInstallPolicy:
    """Map raw configuration flags to construction strategies."""
    return MobileInstallPolicy(
        resource_strategy="decoupled" if config.decouple_data_processing else "legacy",
        native_libs="incremental" if config.incremental_native_libs else "bundled",
        desugar=config.desugar_java8,
        check_desugar_deps=config.desugar_java8 and config.check_desugar_deps,
        crunch_png=config.crunch_png,
        nocompress_extensions=config.nocompress_extensions,
    )


def tokenize_extensions(raw: str) -> tuple[str, ...]:
    """Split a shell-quoted extension list.

    Raises:
        ValueError: If the value has unbalanced quotes.

    Example:
        >>> tokenize_extensions(".png '.web p'")
        ('.png', '.web p')
    """
    return tuple(shlex.split(raw))


class Toolchain(BaseModel):
    """Executables consumed as opaque tools.

    Every field is optional so that a partially configured toolchain can be
    described; builders call require() for the tools they need and fail
    fast when one is missing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    adb: Artifact | None = None
    aapt: Artifact | None = None
    android_jar: Artifact | None = None
    incremental_install: Artifact | None = None
    build_incremental_dexmanifest: Artifact | None = None
    strip_resources: Artifact | None = None
    stubify_manifest: Artifact | None = None
    resources_busybox: Artifact | None = None
    apkbuilder: Artifact | None = None
    apksigner: Artifact | None = None
    resource_extractor: Artifact | None = None
    singlejar: Artifact | None = None
    desugar: Artifact | None = None
    dexer: Artifact | None = None

    def require(self, name: str) -> Artifact:
        """Return the named tool.

        Raises:
            ToolNotFoundError: If the toolchain does not provide the tool.
        """
        if name not in type(self).model_fields:
            raise ToolNotFoundError(name, internal_details=f"unknown toolchain entry {name!r}")
        tool: Artifact | None = getattr(self, name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool
