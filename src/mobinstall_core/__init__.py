"""mobinstall-core: mobile-install deployment package assembly.

This package provides:
- BuildDescription: Pydantic schema for build.yaml
- MobileInstallAssembler: Builds the install actions, split apks and
  output groups of an android binary
- ActionGraph / RuleContext: The declared action graph and its analysis context
- JSON Schema export utilities
"""

from __future__ import annotations

__version__ = "0.1.0"

# Error types
from mobinstall_core.errors import (
    AnalysisError,
    ConfigurationError,
    GraphConstructionError,
    MobileInstallError,
    ToolNotFoundError,
)

# JSON Schema export functions
from mobinstall_core.export import export_build_description_schema

# Graph
from mobinstall_core.graph import ActionGraph, ArtifactRegistry, RuleContext

# Assembly
from mobinstall_core.mobile_install import (
    DeploymentMode,
    MobileInstallAssembler,
    MobileInstallResult,
    OutputGroups,
    SplitDecomposition,
    assemble_from_description,
)

# Schema models
from mobinstall_core.schemas import (
    Action,
    Artifact,
    BuildDescription,
    Label,
    MobileInstallConfig,
    MobileInstallInputs,
    MobileInstallPolicy,
    Toolchain,
    resolve_policy,
)

__all__ = [
    "__version__",
    # Errors
    "MobileInstallError",
    "ConfigurationError",
    "AnalysisError",
    "GraphConstructionError",
    "ToolNotFoundError",
    # JSON Schema exports
    "export_build_description_schema",
    # Graph
    "ActionGraph",
    "ArtifactRegistry",
    "RuleContext",
    # Assembly
    "DeploymentMode",
    "MobileInstallAssembler",
    "MobileInstallResult",
    "OutputGroups",
    "SplitDecomposition",
    "assemble_from_description",
    # Schema models
    "Action",
    "Artifact",
    "BuildDescription",
    "Label",
    "MobileInstallConfig",
    "MobileInstallInputs",
    "MobileInstallPolicy",
    "Toolchain",
    "resolve_policy",
]
