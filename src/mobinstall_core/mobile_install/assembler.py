"""Assembly of the complete mobile-install graph of one target.

Phases, in order:
1. Configuration pre-pass: every prerequisite is resolved once so that
   independent problems are reported together.
2. Resource packages (incremental + android_resources split).
3. Dex manifest and the incremental stub dex.
4. Incremental apk, adb flag file, FULL and INCREMENTAL install actions.
5. Split apks and the SPLIT install action.
6. Deploy info files and output groups; the graph is checked for cycles.

A checkpoint follows each phase that can report configuration errors.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from mobinstall_core.graph.action_graph import ActionGraph
from mobinstall_core.graph.context import RuleContext
from mobinstall_core.graph.registry import ImplicitOutputs
from mobinstall_core.mobile_install.apk import ApkActionsBuilder
from mobinstall_core.mobile_install.install import (
    DeploymentMode,
    build_args_file_action,
    build_dex_manifest_action,
    build_install_action,
)
from mobinstall_core.mobile_install.output_groups import (
    OutputGroups,
    build_deploy_info_action,
    register_mobile_install_groups,
)
from mobinstall_core.mobile_install.resources import (
    MobileInstallResourceApks,
    build_incremental_resource_packages,
    check_resource_inputs,
)
from mobinstall_core.mobile_install.splits import SplitDecomposition, decompose_splits
from mobinstall_core.mobile_install.stub import build_stub_application, resolve_stub_prerequisite
from mobinstall_core.schemas.action import Action
from mobinstall_core.schemas.artifact import Artifact
from mobinstall_core.schemas.build_description import BuildDescription, MobileInstallInputs

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MobileInstallResult:
    """Everything the assembler produced for one target.

    Attributes:
        graph: All registered actions.
        output_groups: The four mobile-install output groups.
        resource_apks: Incremental and split resource packages.
        incremental_apk: Signed apk installed by the FULL mode.
        splits: Ordered split apks and the main split.
        markers: Deploy marker per deployment mode.
        install_actions: Install action per deployment mode.
    """

    graph: ActionGraph
    output_groups: OutputGroups
    resource_apks: MobileInstallResourceApks
    incremental_apk: Artifact
    splits: SplitDecomposition
    markers: dict[DeploymentMode, Artifact]
    install_actions: dict[DeploymentMode, Action]


class MobileInstallAssembler:
    """Builds the mobile-install actions and output groups of a binary.

    Example:
        >>> ctx = RuleContext(label, toolchain=toolchain, prerequisites=prereqs)
        >>> result = MobileInstallAssembler(ctx).assemble(inputs)
        >>> len(result.splits.all_split_apks)
        7
    """

    def __init__(self, ctx: RuleContext) -> None:
        self.ctx = ctx
        self._log = logger.bind(component="mobile_install_assembler", target=str(ctx.label))

    def _report_configuration_errors(self, inputs: MobileInstallInputs) -> None:
        check_resource_inputs(self.ctx, inputs.manifest, inputs.resource_dependencies)
        resolve_stub_prerequisite(self.ctx, split=False)
        resolve_stub_prerequisite(self.ctx, split=True)
        if self.ctx.has_errors():
            self._log.warning("configuration_errors_found", count=len(self.ctx.errors))
        self.ctx.assert_no_errors()

    def assemble(self, inputs: MobileInstallInputs) -> MobileInstallResult:
        """Build the whole mobile-install graph.

        Raises:
            AnalysisError: If configuration errors were reported.
            GraphConstructionError: If a graph invariant is violated.
            ToolNotFoundError: If a required tool is not configured.
        """
        ctx = self.ctx
        self._log.info(
            "assembly_started",
            shards=len(inputs.dexing.shard_dex_zips),
            architectures=list(inputs.native_libs.architectures),
            resource_strategy=ctx.policy.resource_strategy,
            native_libs=ctx.policy.native_libs,
        )
        self._report_configuration_errors(inputs)

        resource_apks = build_incremental_resource_packages(
            ctx, inputs.manifest, inputs.resource_dependencies
        )
        manifest = inputs.manifest
        assert manifest is not None

        markers = {mode: ctx.implicit_output(mode.marker_template) for mode in DeploymentMode}
        incremental_apk = ctx.implicit_output(ImplicitOutputs.INCREMENTAL_APK)

        dex_manifest = build_dex_manifest_action(ctx, inputs.dexing.shard_dex_zips)
        stub_data = resource_apks.stub_data
        stub_dex = build_stub_application(ctx, split=False)
        ctx.assert_no_errors()
        assert stub_dex is not None

        incremental_builder = (
            ApkActionsBuilder("incremental apk")
            .set_classes_dex(stub_dex)
            .add_input_zip(resource_apks.incremental.artifact)
            .set_java_resource_zip(inputs.dexing.java_resource_jar)
            .add_input_zips(inputs.native_libs_aars)
            .set_java_resource_file(stub_data)
            .set_signed_apk(incremental_apk)
            .set_signing_key(inputs.signing_key)
        )
        if ctx.policy.bundles_native_libs:
            incremental_builder.set_native_libs(inputs.native_libs)
        incremental_builder.register_actions(ctx)

        args_file = build_args_file_action(ctx)

        install_actions: dict[DeploymentMode, Action] = {}
        for mode in (DeploymentMode.FULL, DeploymentMode.INCREMENTAL):
            install_actions[mode] = build_install_action(
                ctx,
                mode,
                marker=markers[mode],
                args_file=args_file,
                stub_data=stub_data,
                dex_manifest=dex_manifest,
                resource_apk=resource_apks.incremental.artifact,
                apk=incremental_apk,
                native_libs=inputs.native_libs,
            )

        splits = decompose_splits(
            ctx,
            dexing_output=inputs.dexing,
            native_libs=inputs.native_libs,
            native_libs_aars=inputs.native_libs_aars,
            split_resource_apk=resource_apks.split,
            resource_apk=inputs.resource_apk,
            manifest=manifest,
            signing_key=inputs.signing_key,
        )
        install_actions[DeploymentMode.SPLIT] = build_install_action(
            ctx,
            DeploymentMode.SPLIT,
            marker=markers[DeploymentMode.SPLIT],
            args_file=args_file,
            stub_data=stub_data,
            split_main_apk=splits.split_main_apk,
            split_apks=splits.split_apks,
        )

        incremental_deploy_info = build_deploy_info_action(
            ctx,
            ctx.implicit_output(ImplicitOutputs.DEPLOY_INFO_INCREMENTAL),
            inputs.resource_apk.manifest,
            inputs.additional_merged_manifests,
        )
        split_deploy_info = build_deploy_info_action(
            ctx,
            ctx.implicit_output(ImplicitOutputs.DEPLOY_INFO_SPLIT),
            inputs.resource_apk.manifest,
            inputs.additional_merged_manifests,
        )

        output_groups = register_mobile_install_groups(
            full_marker=markers[DeploymentMode.FULL],
            incremental_marker=markers[DeploymentMode.INCREMENTAL],
            split_marker=markers[DeploymentMode.SPLIT],
            all_split_apks=splits.all_split_apks,
            incremental_deploy_info=incremental_deploy_info,
            split_deploy_info=split_deploy_info,
        )

        ctx.graph.validate()
        self._log.info(
            "assembly_completed",
            actions=len(ctx.graph),
            split_apks=len(splits.all_split_apks),
        )
        return MobileInstallResult(
            graph=ctx.graph,
            output_groups=output_groups,
            resource_apks=resource_apks,
            incremental_apk=incremental_apk,
            splits=splits,
            markers=markers,
            install_actions=install_actions,
        )


def assemble_from_description(description: BuildDescription) -> MobileInstallResult:
    """Assemble the mobile-install graph described by a build description.

    Example:
        >>> description = BuildDescription.from_yaml("build.yaml")
        >>> result = assemble_from_description(description)
        >>> sorted(result.output_groups)
        ['android_incremental_deploy_info', 'mobile_install_full_INTERNAL_', ...]
    """
    ctx = RuleContext(
        description.target_label,
        toolchain=description.toolchain,
        config=description.config,
        prerequisites=description.prerequisites(),
        bin_dir=description.bin_dir,
    )
    return MobileInstallAssembler(ctx).assemble(description.inputs())
