"""Unit tests for ActionGraph."""

from __future__ import annotations

import pytest

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.graph import ActionGraph
from mobinstall_core.schemas import Action, Artifact

TOOL = Artifact.source("tools/android/tool")


def bin_artifact(name: str) -> Artifact:
    return Artifact(exec_path=f"bazel-out/bin/{name}", root="bin")


def make_action(mnemonic: str, inputs: tuple[Artifact, ...], outputs: tuple[Artifact, ...]) -> Action:
    return Action(mnemonic=mnemonic, executable=TOOL, inputs=inputs, outputs=outputs)


class TestRegister:
    """Tests for ActionGraph.register()."""

    def test_records_producer(self) -> None:
        graph = ActionGraph()
        action = make_action("AndroidApkBuilder", (), (bin_artifact("unsigned.apk"),))
        graph.register(action)
        assert graph.producer_of(bin_artifact("unsigned.apk")) is action
        assert len(graph) == 1
        assert graph.actions == (action,)

    def test_unknown_artifact_has_no_producer(self) -> None:
        assert ActionGraph().producer_of(bin_artifact("nothing")) is None

    def test_rejects_second_producer(self) -> None:
        graph = ActionGraph()
        graph.register(make_action("First", (), (bin_artifact("a.apk"),)))
        with pytest.raises(GraphConstructionError, match="more than one action"):
            graph.register(make_action("Second", (), (bin_artifact("a.apk"),)))
        assert len(graph) == 1

    def test_actions_with_mnemonic(self) -> None:
        graph = ActionGraph()
        graph.register(make_action("AndroidApkSigner", (), (bin_artifact("a.apk"),)))
        graph.register(make_action("AndroidApkSigner", (), (bin_artifact("b.apk"),)))
        graph.register(make_action("AndroidInstall", (), (bin_artifact("marker"),)))
        assert len(graph.actions_with_mnemonic("AndroidApkSigner")) == 2
        assert graph.actions_with_mnemonic("Desugar") == []


class TestValidate:
    """Tests for ActionGraph.validate()."""

    def test_orders_producers_first(self) -> None:
        graph = ActionGraph()
        sign = make_action("AndroidApkSigner", (bin_artifact("unsigned.apk"),), (bin_artifact("app.apk"),))
        build = make_action("AndroidApkBuilder", (), (bin_artifact("unsigned.apk"),))
        graph.register(sign)
        graph.register(build)
        order = graph.validate()
        assert order.index(build) < order.index(sign)

    def test_detects_cycle(self) -> None:
        graph = ActionGraph()
        graph.register(make_action("Left", (bin_artifact("b"),), (bin_artifact("a"),)))
        graph.register(make_action("Right", (bin_artifact("a"),), (bin_artifact("b"),)))
        with pytest.raises(GraphConstructionError, match="cycle"):
            graph.validate()

    def test_source_inputs_need_no_producer(self) -> None:
        graph = ActionGraph()
        graph.register(make_action("AndroidDexer", (Artifact.source("lib.jar"),), (bin_artifact("classes.dex"),)))
        assert len(graph.validate()) == 1
