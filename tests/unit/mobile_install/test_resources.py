"""Unit tests for incremental and split resource packages."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from mobinstall_core.errors import AnalysisError
from mobinstall_core.graph import RuleContext
from mobinstall_core.mobile_install.resources import build_incremental_resource_packages
from mobinstall_core.schemas import (
    ApplicationManifest,
    MobileInstallConfig,
    ResourceContainer,
    ResourceDependencies,
)

MI_DIR = "bazel-out/bin/java/com/example/_mobile_install/app"


class TestDecoupledStrategy:
    """Resources processed by the decoupled pipeline."""

    @pytest.fixture
    def decoupled_ctx(self, make_ctx: Callable[..., RuleContext]) -> RuleContext:
        return make_ctx(MobileInstallConfig(decouple_data_processing=True))

    def test_builds_both_packages(
        self,
        decoupled_ctx: RuleContext,
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        apks = build_incremental_resource_packages(
            decoupled_ctx, app_manifest, resource_dependencies
        )
        assert apks.incremental.artifact.exec_path == (
            "bazel-out/bin/java/com/example/app_files/incremental.ap_"
        )
        assert apks.split.artifact.exec_path == f"{MI_DIR}/android_resources.ap_"
        assert apks.incremental.r_class_jar is None
        assert apks.split.r_class_jar is None

    def test_incremental_package_uses_stubbed_manifest(
        self,
        decoupled_ctx: RuleContext,
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        apks = build_incremental_resource_packages(
            decoupled_ctx, app_manifest, resource_dependencies
        )
        stub_action = decoupled_ctx.graph.producer_of(apks.incremental.manifest)
        assert stub_action is not None
        assert stub_action.mnemonic == "AndroidStubManifest"

        split_manifest_action = decoupled_ctx.graph.producer_of(apks.split.manifest)
        assert split_manifest_action is not None
        assert split_manifest_action.flag_values("--split") == ["android_resources"]
        assert "--nohascode" in split_manifest_action.arguments

    def test_processing_action(
        self,
        decoupled_ctx: RuleContext,
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        apks = build_incremental_resource_packages(
            decoupled_ctx, app_manifest, resource_dependencies
        )
        action = decoupled_ctx.graph.producer_of(apks.incremental.artifact)
        assert action is not None
        assert action.mnemonic == "AndroidIncrementalResources"
        assert action.arguments[:3] == ("--tool", "AAPT2_PACKAGE", "--")
        assert action.use_param_file
        assert "--aapt" not in action.arguments
        # One --data per container, transitive dependencies first.
        data = action.flag_values("--data")
        assert len(data) == 2
        assert data[0].startswith("third_party/widgets/res/layout/widget.xml:")
        assert "--useAaptCruncher=yes" not in action.arguments

    def test_no_aapt_tool_needed(
        self,
        decoupled_ctx: RuleContext,
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        build_incremental_resource_packages(decoupled_ctx, app_manifest, resource_dependencies)
        for action in decoupled_ctx.graph.actions_with_mnemonic("AndroidIncrementalResources"):
            assert action.tools == ()


class TestLegacyStrategy:
    """Resources processed by combined data and resource packaging."""

    def test_builds_both_packages(
        self,
        ctx: RuleContext,
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        apks = build_incremental_resource_packages(ctx, app_manifest, resource_dependencies)
        actions = ctx.graph.actions_with_mnemonic("AndroidIncrementalResources")
        assert [a.outputs[0] for a in actions] == [apks.incremental.artifact, apks.split.artifact]

    def test_packaging_flags(
        self,
        make_ctx: Callable[..., RuleContext],
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        ctx = make_ctx(MobileInstallConfig(crunch_png=False, nocompress_extensions=".ogg '.web m'"))
        apks = build_incremental_resource_packages(ctx, app_manifest, resource_dependencies)
        action = ctx.graph.producer_of(apks.incremental.artifact)
        assert action is not None
        assert action.arguments[:3] == ("--tool", "PACKAGE", "--")
        assert action.flag_values("--aapt") == ["tools/android/aapt"]
        assert action.flag_values("--uncompressedExtension") == [".ogg", ".web m"]
        assert "--useAaptCruncher=no" in action.arguments
        assert action.tools == (ctx.tool("aapt"),)

    def test_proguard_outputs_are_distinct(
        self,
        ctx: RuleContext,
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        build_incremental_resource_packages(ctx, app_manifest, resource_dependencies)
        proguard = [
            a.flag_values("--proguardOutput")[0]
            for a in ctx.graph.actions_with_mnemonic("AndroidIncrementalResources")
        ]
        assert proguard == [
            "bazel-out/bin/java/com/example/proguard/app/incremental_proguard.cfg",
            "bazel-out/bin/java/com/example/proguard/app/incremental_split_proguard.cfg",
        ]

    def test_bad_extensions_reported_before_any_action(
        self,
        make_ctx: Callable[..., RuleContext],
        app_manifest: ApplicationManifest,
        resource_dependencies: ResourceDependencies,
    ) -> None:
        ctx = make_ctx(MobileInstallConfig(nocompress_extensions="'.png"))
        with pytest.raises(AnalysisError) as exc_info:
            build_incremental_resource_packages(ctx, app_manifest, resource_dependencies)
        assert exc_info.value.errors[0].attribute == "nocompress_extensions"
        assert len(ctx.graph) == 0


class TestResourceErrors:
    """Configuration errors stop resource packaging."""

    def test_missing_manifest(
        self, ctx: RuleContext, resource_dependencies: ResourceDependencies
    ) -> None:
        with pytest.raises(AnalysisError) as exc_info:
            build_incremental_resource_packages(ctx, None, resource_dependencies)
        assert exc_info.value.errors[0].attribute == "manifest"
        assert len(ctx.graph) == 0

    def test_dependency_without_manifest(
        self, ctx: RuleContext, app_manifest: ApplicationManifest
    ) -> None:
        deps = ResourceDependencies(direct=(ResourceContainer(label="//lib:res"),))
        with pytest.raises(AnalysisError) as exc_info:
            build_incremental_resource_packages(ctx, app_manifest, deps)
        assert exc_info.value.errors[0].attribute == "resource_files"
        assert "//lib:res" in exc_info.value.errors[0].message
        assert len(ctx.graph) == 0

    def test_all_errors_reported_together(self, ctx: RuleContext) -> None:
        deps = ResourceDependencies(direct=(ResourceContainer(label="//lib:res"),))
        with pytest.raises(AnalysisError) as exc_info:
            build_incremental_resource_packages(ctx, None, deps)
        assert [e.attribute for e in exc_info.value.errors] == ["manifest", "resource_files"]
