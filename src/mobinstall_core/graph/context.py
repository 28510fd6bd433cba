"""Per-target analysis context.

The RuleContext is what the mobile-install builders see of the build
engine: artifact issuance, action registration, prerequisite lookup and
error collection with checkpoints.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from mobinstall_core.errors import AnalysisError, ConfigurationError
from mobinstall_core.graph.action_graph import ActionGraph
from mobinstall_core.graph.registry import DEFAULT_BIN_DIR, ArtifactRegistry
from mobinstall_core.schemas.action import Action
from mobinstall_core.schemas.artifact import Artifact, Label
from mobinstall_core.schemas.config import (
    MobileInstallConfig,
    MobileInstallPolicy,
    Toolchain,
    resolve_policy,
)
from mobinstall_core.schemas.inputs import Prerequisite

logger = structlog.get_logger(__name__)


class RuleContext:
    """Analysis state of one android binary target.

    Attributes:
        label: Target being analyzed.
        config: Raw build configuration.
        policy: Strategies resolved once from ``config``.
        toolchain: Tool references shared by all actions.
        registry: Issues the target's derived artifacts.
        graph: Actions registered so far.

    Example:
        >>> ctx = RuleContext(Label.parse("//app:app"), toolchain=toolchain)
        >>> ctx.attribute_error("manifest", "Manifest is missing")
        >>> ctx.assert_no_errors()
        Traceback (most recent call last):
        ...
        mobinstall_core.errors.AnalysisError: ...
    """

    def __init__(
        self,
        label: Label,
        *,
        toolchain: Toolchain,
        config: MobileInstallConfig | None = None,
        prerequisites: Mapping[str, Prerequisite] | None = None,
        bin_dir: str = DEFAULT_BIN_DIR,
        graph: ActionGraph | None = None,
    ) -> None:
        self.label = label
        self.config = config or MobileInstallConfig()
        self.policy: MobileInstallPolicy = resolve_policy(self.config)
        self.toolchain = toolchain
        self.registry = ArtifactRegistry(label, bin_dir=bin_dir)
        self.graph = graph if graph is not None else ActionGraph()
        self._prerequisites: dict[str, Prerequisite] = dict(prerequisites or {})
        self._errors: list[ConfigurationError] = []
        self._log = logger.bind(target=str(label))

    # -- errors ---------------------------------------------------------

    def attribute_error(self, attribute: str, message: str) -> None:
        """Record a configuration error against ``attribute``; does not raise.

        Reporting the same message for the same attribute twice records it once.
        """
        if any(e.attribute == attribute and e.message == message for e in self._errors):
            return
        error = ConfigurationError(message, attribute=attribute, target_label=str(self.label))
        self._errors.append(error)
        self._log.warning("configuration_error", attribute=attribute, message=message)

    @property
    def errors(self) -> tuple[ConfigurationError, ...]:
        return tuple(self._errors)

    def has_errors(self) -> bool:
        return bool(self._errors)

    def assert_no_errors(self) -> None:
        """Checkpoint: stop construction if any configuration error was reported.

        Raises:
            AnalysisError: Carrying every error collected so far.
        """
        if self._errors:
            raise AnalysisError(self._errors)

    # -- graph ----------------------------------------------------------

    def register_action(self, action: Action) -> None:
        self.graph.register(action)

    def prerequisite(self, attribute: str) -> Prerequisite | None:
        return self._prerequisites.get(attribute)

    def implicit_output(self, template: str) -> Artifact:
        return self.registry.implicit_output(template)

    def mobile_install_artifact(self, base_name: str) -> Artifact:
        return self.registry.mobile_install_artifact(base_name)

    def tool(self, name: str) -> Artifact:
        return self.toolchain.require(name)
