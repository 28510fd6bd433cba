"""Manifest derivation for mobile-install.

Two kinds of derived manifests exist:
- the stubbed manifest, whose application entry point is the placeholder
  stub application, so the installed identity stays stable while code and
  resources are swapped underneath it;
- split manifests, one per split apk, declaring whether the split
  carries code.

The application entry is a tagged variant (placeholder | real). Both
variants have exactly the same shape so the stub can stand in for the
real application without the package manager noticing.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.registry import ImplicitOutputs
from mobinstall_core.graph.spawn import CommandLine, SpawnActionBuilder
from mobinstall_core.schemas.artifact import Artifact
from mobinstall_core.schemas.inputs import ApplicationManifest

STUB_APPLICATION_CLASS = "com.google.devtools.build.android.incrementaldeployment.StubApplication"
DEFAULT_APPLICATION_CLASS = "android.app.Application"


class PlaceholderApplication(BaseModel):
    """Stub entry point that loads the real application after install."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["placeholder"] = "placeholder"
    entry_point: str = STUB_APPLICATION_CLASS
    delegate: str | None = None


class RealApplication(BaseModel):
    """The application's own entry point."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["real"] = "real"
    entry_point: str = DEFAULT_APPLICATION_CLASS
    delegate: str | None = None


ApplicationEntry = Annotated[
    PlaceholderApplication | RealApplication, Field(discriminator="kind")
]


class ManifestDeclaration(BaseModel):
    """What a derived manifest declares to the package manager."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    package: str
    split: str | None = None
    has_code: bool = True
    application: ApplicationEntry

    def to_flags(self) -> tuple[str, ...]:
        flags = ["--package", self.package, "--application", self.application.entry_point]
        if self.application.delegate is not None:
            flags.extend(["--delegate_application", self.application.delegate])
        if self.split is not None:
            flags.extend(["--split", self.split])
        flags.append("--hascode" if self.has_code else "--nohascode")
        return tuple(flags)


def real_declaration(manifest: ApplicationManifest) -> ManifestDeclaration:
    return ManifestDeclaration(
        package=manifest.package,
        application=RealApplication(
            entry_point=manifest.application_class or DEFAULT_APPLICATION_CLASS
        ),
    )


def placeholder_declaration(manifest: ApplicationManifest) -> ManifestDeclaration:
    # The stub delegates to whatever the real manifest would have declared.
    real = real_declaration(manifest)
    return real.model_copy(
        update={"application": PlaceholderApplication(delegate=real.application.entry_point)}
    )


def split_declaration(
    manifest: ApplicationManifest, split_name: str, has_code: bool
) -> ManifestDeclaration:
    return ManifestDeclaration(
        package=manifest.package,
        split=split_name,
        has_code=has_code,
        application=RealApplication(
            entry_point=manifest.application_class or DEFAULT_APPLICATION_CLASS
        ),
    )


class StubbedManifest(BaseModel):
    """Manifest with the stub application injected, plus the stub data file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest: Artifact
    stub_data: Artifact


def add_mobile_install_stub_application(
    ctx: RuleContext, manifest: ApplicationManifest
) -> StubbedManifest:
    """Register the action replacing the application entry point with the stub.

    The tool also writes the stub data file, which tells the stub which
    real application class to load on the device.
    """
    stubbed = ctx.mobile_install_artifact("stubbed_manifest/AndroidManifest.xml")
    stub_data = ctx.implicit_output(ImplicitOutputs.STUB_APPLICATION_DATA)
    declaration = placeholder_declaration(manifest)

    command_line = (
        CommandLine()
        .add("mobile_install")
        .add_exec_path("--input_manifest", manifest.manifest)
        .add_exec_path("--output_manifest", stubbed)
        .add_exec_path("--output_datafile", stub_data)
        .add(*declaration.to_flags())
    )
    ctx.register_action(
        SpawnActionBuilder("AndroidStubManifest")
        .set_progress_message("Injecting mobile install stub application for %s", ctx.label)
        .set_executable(ctx.tool("stubify_manifest"))
        .add_input(manifest.manifest)
        .add_output(stubbed)
        .add_output(stub_data)
        .set_command_line(command_line)
        .build()
    )
    return StubbedManifest(manifest=stubbed, stub_data=stub_data)


def create_split_manifest(
    ctx: RuleContext, manifest: ApplicationManifest, split_name: str, has_code: bool
) -> Artifact:
    """Register the action deriving the manifest of split ``split_name``."""
    result = ctx.mobile_install_artifact(f"split_manifests/{split_name}/AndroidManifest.xml")
    declaration = split_declaration(manifest, split_name, has_code)

    command_line = (
        CommandLine()
        .add("split")
        .add_exec_path("--main_manifest", manifest.manifest)
        .add_exec_path("--split_manifest", result)
        .add(*declaration.to_flags())
    )
    ctx.register_action(
        SpawnActionBuilder("AndroidSplitManifest")
        .set_progress_message("Creating manifest for split %s", split_name)
        .set_executable(ctx.tool("stubify_manifest"))
        .add_input(manifest.manifest)
        .add_output(result)
        .set_command_line(command_line)
        .build()
    )
    return result
