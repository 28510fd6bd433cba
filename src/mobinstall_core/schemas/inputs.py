"""Input models handed to the mobile-install assembler.

These are the outputs of the compilation pipeline that precedes
mobile-install: dex shards, native libraries, processed resources and
the manifest of the application being installed.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mobinstall_core.schemas.artifact import Artifact


class ResourcePackage(BaseModel):
    """A packaged-resources artifact paired with its manifest.

    Attributes:
        artifact: The packaged resources (``.ap_``).
        manifest: Manifest the package was built from.
        r_class_jar: Resource symbol class jar. Always None for packages
            built by mobile-install, which leaves the symbol class to the
            regular binary build.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    artifact: Artifact = Field(..., description="Packaged resources")
    manifest: Artifact = Field(..., description="Manifest of the package")
    r_class_jar: Artifact | None = Field(default=None, description="Resource symbol class jar")


class ResourceContainer(BaseModel):
    """Processed resources of one resource dependency.

    Attributes:
        label: Label of the dependency providing the resources.
        manifest: Manifest of the dependency (required for packaging).
        resources: Resource files or archives.
        assets: Asset files or archives.
        symbols: Symbols file produced when the dependency was processed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str = Field(..., min_length=1, description="Dependency label")
    manifest: Artifact | None = Field(default=None, description="Dependency manifest")
    resources: tuple[Artifact, ...] = Field(default=(), description="Resource files")
    assets: tuple[Artifact, ...] = Field(default=(), description="Asset files")
    symbols: Artifact | None = Field(default=None, description="Symbols file")

    def artifacts(self) -> tuple[Artifact, ...]:
        extra = [a for a in (self.manifest, self.symbols) if a is not None]
        return (*self.resources, *self.assets, *extra)


class ResourceDependencies(BaseModel):
    """Resolved transitive resource dependencies of the binary."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    direct: tuple[ResourceContainer, ...] = Field(default=(), description="Direct deps")
    transitive: tuple[ResourceContainer, ...] = Field(default=(), description="Transitive deps")

    def all_containers(self) -> tuple[ResourceContainer, ...]:
        return (*self.transitive, *self.direct)


class ApplicationManifest(BaseModel):
    """The (merged) manifest of the application being installed.

    Attributes:
        manifest: The manifest artifact.
        package: Java package declared by the manifest.
        application_class: Application class declared by the manifest, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest: Artifact = Field(..., description="Manifest artifact")
    package: str = Field(..., min_length=1, description="Declared Java package")
    application_class: str | None = Field(default=None, description="Declared Application class")


class NativeLibs(BaseModel):
    """Native libraries per CPU architecture.

    Architecture order and library order within an architecture are
    preserved as given.

    Example:
        >>> libs = NativeLibs(libs={"arm64-v8a": (Artifact.source("lib/arm64/libfoo.so"),)})
        >>> list(libs.architectures)
        ['arm64-v8a']
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    libs: dict[str, tuple[Artifact, ...]] = Field(default_factory=dict, description="arch -> libs")

    @model_validator(mode="before")
    @classmethod
    def _from_mapping(cls, data: Any) -> Any:
        # Accept a bare ``{arch: [paths]}`` mapping as written in build descriptions.
        if isinstance(data, dict) and "libs" not in data:
            return {"libs": data}
        return data

    @field_validator("libs")
    @classmethod
    def _validate_architectures(
        cls, value: dict[str, tuple[Artifact, ...]]
    ) -> dict[str, tuple[Artifact, ...]]:
        for arch in value:
            if not arch or ":" in arch:
                raise ValueError(f"invalid architecture identifier: {arch!r}")
        return value

    @property
    def architectures(self) -> tuple[str, ...]:
        return tuple(self.libs)

    @property
    def is_empty(self) -> bool:
        return not any(self.libs.values())

    def entries(self) -> list[tuple[str, Artifact]]:
        """Flatten to ``(architecture, library)`` pairs in declaration order."""
        return [(arch, lib) for arch, libs in self.libs.items() for lib in libs]

    def all_libraries(self) -> tuple[Artifact, ...]:
        return tuple(lib for _, lib in self.entries())


class DexingOutput(BaseModel):
    """Result of dexing the application.

    Attributes:
        shard_dex_zips: One dex archive per shard, in shard order. The shard
            count is decided upstream.
        java_resource_jar: Merged Java resources of the application.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    shard_dex_zips: tuple[Artifact, ...] = Field(default=(), description="Dex shards")
    java_resource_jar: Artifact = Field(..., description="Merged Java resources")


class JavaTargetInfo(BaseModel):
    """Capability exposed by compiled-code targets."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    runtime_jars: tuple[Artifact, ...] = Field(..., min_length=1, description="Runtime classpath")


class Prerequisite(BaseModel):
    """A resolved dependency of the target being analyzed.

    Attributes:
        label: Label of the dependency.
        java: Compiled-code capability, None when the target is not a
            Java target.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str = Field(..., min_length=1, description="Dependency label")
    java: JavaTargetInfo | None = Field(default=None, description="Compiled-code capability")


STUB_APPLICATION_ATTRIBUTE = "$incremental_stub_application"
SPLIT_STUB_APPLICATION_ATTRIBUTE = "$incremental_split_stub_application"
