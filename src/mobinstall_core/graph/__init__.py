"""Action graph construction: artifact issuance, action builders and the rule context."""

from __future__ import annotations

from mobinstall_core.graph.action_graph import ActionGraph
from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.registry import (
    DEFAULT_BIN_DIR,
    MOBILE_INSTALL_DIRECTORY,
    ArtifactRegistry,
    ImplicitOutputs,
)
from mobinstall_core.graph.spawn import CommandLine, SpawnActionBuilder, file_write_action

__all__ = [
    "DEFAULT_BIN_DIR",
    "MOBILE_INSTALL_DIRECTORY",
    "ActionGraph",
    "ArtifactRegistry",
    "CommandLine",
    "ImplicitOutputs",
    "RuleContext",
    "SpawnActionBuilder",
    "file_write_action",
]
