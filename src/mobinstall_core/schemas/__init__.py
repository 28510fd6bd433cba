"""Schema definitions for mobinstall-core.

This module exports the Pydantic models describing one android binary:

Build graph:
- Label, Artifact: Target labels and file references
- Action: A declared unit of work

Inputs:
- ResourcePackage, ResourceContainer, ResourceDependencies
- ApplicationManifest, NativeLibs, DexingOutput
- JavaTargetInfo, Prerequisite

Configuration:
- MobileInstallConfig: Raw build flags
- MobileInstallPolicy: Strategies resolved from the flags
- Toolchain: Tool references

Root Models:
- MobileInstallInputs: Everything the assembler consumes
- BuildDescription: Root schema for build.yaml
"""

from __future__ import annotations

from mobinstall_core.schemas.action import Action
from mobinstall_core.schemas.artifact import Artifact, ArtifactRoot, Label
from mobinstall_core.schemas.config import (
    MobileInstallConfig,
    MobileInstallPolicy,
    NativeLibsHandling,
    ResourceStrategy,
    StartType,
    Toolchain,
    resolve_policy,
    tokenize_extensions,
)
from mobinstall_core.schemas.inputs import (
    SPLIT_STUB_APPLICATION_ATTRIBUTE,
    STUB_APPLICATION_ATTRIBUTE,
    ApplicationManifest,
    DexingOutput,
    JavaTargetInfo,
    NativeLibs,
    Prerequisite,
    ResourceContainer,
    ResourceDependencies,
    ResourcePackage,
)
from mobinstall_core.schemas.build_description import BuildDescription, MobileInstallInputs

__all__ = [
    # Build graph
    "Action",
    "Artifact",
    "ArtifactRoot",
    "Label",
    # Configuration
    "MobileInstallConfig",
    "MobileInstallPolicy",
    "NativeLibsHandling",
    "ResourceStrategy",
    "StartType",
    "Toolchain",
    "resolve_policy",
    "tokenize_extensions",
    # Inputs
    "STUB_APPLICATION_ATTRIBUTE",
    "SPLIT_STUB_APPLICATION_ATTRIBUTE",
    "ApplicationManifest",
    "DexingOutput",
    "JavaTargetInfo",
    "NativeLibs",
    "Prerequisite",
    "ResourceContainer",
    "ResourceDependencies",
    "ResourcePackage",
    # Root models
    "BuildDescription",
    "MobileInstallInputs",
]
