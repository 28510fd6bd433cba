"""Named artifact bundles exposed to downstream consumers."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping, Sequence

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.spawn import file_write_action
from mobinstall_core.schemas.artifact import Artifact

INTERNAL_SUFFIX = "_INTERNAL_"

MOBILE_INSTALL_FULL = "mobile_install_full" + INTERNAL_SUFFIX
MOBILE_INSTALL_INCREMENTAL = "mobile_install_incremental" + INTERNAL_SUFFIX
MOBILE_INSTALL_SPLIT = "mobile_install_split" + INTERNAL_SUFFIX
INCREMENTAL_DEPLOY_INFO = "android_incremental_deploy_info"


class OutputGroups(Mapping[str, tuple[Artifact, ...]]):
    """Immutable mapping of output group name to its artifacts."""

    def __init__(self, groups: Mapping[str, tuple[Artifact, ...]]) -> None:
        self._groups = dict(groups)

    def __getitem__(self, name: str) -> tuple[Artifact, ...]:
        return self._groups[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def to_dict(self) -> dict[str, list[str]]:
        return {name: [a.exec_path for a in artifacts] for name, artifacts in self._groups.items()}


class OutputGroupRegistrar:
    """Collects output groups; membership is fixed when a group is added.

    Artifacts keep their first-seen order and appear once per group.
    """

    def __init__(self) -> None:
        self._groups: dict[str, tuple[Artifact, ...]] = {}

    def add(self, name: str, artifacts: Iterable[Artifact]) -> OutputGroupRegistrar:
        """Register group ``name``.

        Raises:
            GraphConstructionError: If ``name`` was already registered.
        """
        if name in self._groups:
            raise GraphConstructionError(f"Output group '{name}' is already registered")
        self._groups[name] = tuple(dict.fromkeys(artifacts))
        return self

    def build(self) -> OutputGroups:
        return OutputGroups(self._groups)


def build_deploy_info_action(
    ctx: RuleContext,
    output: Artifact,
    merged_manifest: Artifact,
    additional_merged_manifests: Sequence[Artifact] = (),
    apks_to_deploy: Sequence[Artifact] = (),
) -> Artifact:
    """Register the action writing the deploy info consumed by IDEs and tooling."""
    content = json.dumps(
        {
            "merged_manifest": merged_manifest.exec_path,
            "additional_merged_manifests": [a.exec_path for a in additional_merged_manifests],
            "apks_to_deploy": [a.exec_path for a in apks_to_deploy],
        },
        indent=2,
        sort_keys=True,
    )
    ctx.register_action(
        file_write_action(
            "WriteAndroidDeployInfo",
            output,
            content,
            inputs=(merged_manifest, *additional_merged_manifests, *apks_to_deploy),
        )
    )
    return output


def register_mobile_install_groups(
    *,
    full_marker: Artifact,
    incremental_marker: Artifact,
    split_marker: Artifact,
    all_split_apks: Sequence[Artifact],
    incremental_deploy_info: Artifact,
    split_deploy_info: Artifact,
) -> OutputGroups:
    """Bundle the mobile-install outputs into their four output groups."""
    return (
        OutputGroupRegistrar()
        .add(MOBILE_INSTALL_FULL, [full_marker, incremental_deploy_info])
        .add(MOBILE_INSTALL_INCREMENTAL, [incremental_marker, incremental_deploy_info])
        .add(MOBILE_INSTALL_SPLIT, [*all_split_apks, split_marker, split_deploy_info])
        .add(INCREMENTAL_DEPLOY_INFO, [incremental_deploy_info])
        .build()
    )
