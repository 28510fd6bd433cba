"""Registered actions of one analysis pass.

The graph only records and checks declarations. Scheduling, caching and
execution belong to the external executor.
"""

from __future__ import annotations

from graphlib import CycleError, TopologicalSorter

import structlog

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.schemas.action import Action
from mobinstall_core.schemas.artifact import Artifact

logger = structlog.get_logger(__name__)


class ActionGraph:
    """Ordered collection of actions with a single producer per artifact.

    Example:
        >>> graph = ActionGraph()
        >>> graph.register(action)
        >>> graph.producer_of(action.outputs[0]) is action
        True
    """

    def __init__(self) -> None:
        self._actions: list[Action] = []
        self._producers: dict[Artifact, int] = {}

    def register(self, action: Action) -> None:
        """Add an action.

        Raises:
            GraphConstructionError: If one of its outputs already has a producer.
        """
        for output in action.outputs:
            if output in self._producers:
                existing = self._actions[self._producers[output]]
                raise GraphConstructionError(
                    f"Artifact '{output.exec_path}' is produced by more than one action",
                    internal_details=f"{existing.mnemonic} and {action.mnemonic}",
                )
        index = len(self._actions)
        self._actions.append(action)
        for output in action.outputs:
            self._producers[output] = index
        logger.debug(
            "action_registered",
            mnemonic=action.mnemonic,
            outputs=[o.exec_path for o in action.outputs],
        )

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def producer_of(self, artifact: Artifact) -> Action | None:
        index = self._producers.get(artifact)
        return None if index is None else self._actions[index]

    def actions_with_mnemonic(self, mnemonic: str) -> list[Action]:
        return [a for a in self._actions if a.mnemonic == mnemonic]

    def validate(self) -> list[Action]:
        """Check that the graph is acyclic.

        Returns:
            The actions in a valid execution order.

        Raises:
            GraphConstructionError: If the declared dependencies form a cycle.
        """
        sorter: TopologicalSorter[int] = TopologicalSorter()
        for index, action in enumerate(self._actions):
            deps = {
                self._producers[a] for a in action.all_inputs() if a in self._producers
            }
            sorter.add(index, *deps)
        try:
            order = list(sorter.static_order())
        except CycleError as exc:
            cycle = [self._actions[i].mnemonic for i in exc.args[1]]
            raise GraphConstructionError(
                "Action graph contains a dependency cycle",
                internal_details=" -> ".join(cycle),
            ) from exc
        return [self._actions[i] for i in order]
