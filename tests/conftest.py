"""Shared pytest fixtures for mobinstall tests.

Provides a fully configured toolchain, resolved stub prerequisites,
RuleContext and input factories, and build.yaml writers.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml

from mobinstall_core.graph.context import RuleContext
from mobinstall_core.schemas import (
    SPLIT_STUB_APPLICATION_ATTRIBUTE,
    STUB_APPLICATION_ATTRIBUTE,
    ApplicationManifest,
    Artifact,
    DexingOutput,
    JavaTargetInfo,
    Label,
    MobileInstallConfig,
    MobileInstallInputs,
    NativeLibs,
    Prerequisite,
    ResourceContainer,
    ResourceDependencies,
    ResourcePackage,
    Toolchain,
)

TARGET = "//java/com/example:app"
PACKAGE_DIR = "java/com/example"
BIN = "bazel-out/bin"
MI_DIR = f"{BIN}/{PACKAGE_DIR}/_mobile_install/app"
DEFAULT_ARCHS = ("armeabi-v7a", "arm64-v8a")


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    capsys can then capture log lines regardless of test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


def tool_path(name: str) -> str:
    return f"tools/android/{name}"


@pytest.fixture
def toolchain() -> Toolchain:
    """Every tool configured except the optional resource extractor."""
    return Toolchain(
        **{
            name: Artifact.source(tool_path(name))
            for name in Toolchain.model_fields
            if name != "resource_extractor"
        }
    )


@pytest.fixture
def label() -> Label:
    return Label.parse(TARGET)


@pytest.fixture
def stub_prerequisites() -> dict[str, Prerequisite]:
    return {
        STUB_APPLICATION_ATTRIBUTE: Prerequisite(
            label="//tools/android:incremental_stub_application",
            java=JavaTargetInfo(runtime_jars=(Artifact.source("tools/android/libstub.jar"),)),
        ),
        SPLIT_STUB_APPLICATION_ATTRIBUTE: Prerequisite(
            label="//tools/android:incremental_split_stub_application",
            java=JavaTargetInfo(
                runtime_jars=(Artifact.source("tools/android/libsplit_stub.jar"),)
            ),
        ),
    }


@pytest.fixture
def make_ctx(
    label: Label, toolchain: Toolchain, stub_prerequisites: dict[str, Prerequisite]
) -> Callable[..., RuleContext]:
    """Factory fixture building a RuleContext for //java/com/example:app."""

    def _make(
        config: MobileInstallConfig | None = None,
        *,
        prerequisites: Mapping[str, Prerequisite] | None = None,
        tools: Toolchain | None = None,
    ) -> RuleContext:
        return RuleContext(
            label,
            toolchain=toolchain if tools is None else tools,
            config=config,
            prerequisites=stub_prerequisites if prerequisites is None else prerequisites,
        )

    return _make


@pytest.fixture
def ctx(make_ctx: Callable[..., RuleContext]) -> RuleContext:
    return make_ctx()


@pytest.fixture
def app_manifest() -> ApplicationManifest:
    return ApplicationManifest(
        manifest=Artifact.source(f"{PACKAGE_DIR}/AndroidManifest.xml"),
        package="com.example",
        application_class="com.example.ExampleApplication",
    )


@pytest.fixture
def resource_dependencies() -> ResourceDependencies:
    return ResourceDependencies(
        direct=(
            ResourceContainer(
                label="//java/com/example:resources",
                manifest=Artifact.source(f"{PACKAGE_DIR}/res/AndroidManifest.xml"),
                resources=(Artifact.source(f"{PACKAGE_DIR}/res/values/strings.xml"),),
                assets=(Artifact.source(f"{PACKAGE_DIR}/assets/data.bin"),),
                symbols=Artifact(exec_path=f"{BIN}/{PACKAGE_DIR}/resources_symbols.bin", root="bin"),
            ),
        ),
        transitive=(
            ResourceContainer(
                label="//third_party/widgets:widgets",
                manifest=Artifact.source("third_party/widgets/AndroidManifest.xml"),
                resources=(Artifact.source("third_party/widgets/res/layout/widget.xml"),),
            ),
        ),
    )


def make_native_libs(archs: tuple[str, ...] = DEFAULT_ARCHS) -> NativeLibs:
    return NativeLibs(
        libs={arch: (Artifact.source(f"jni/{arch}/libnative.so"),) for arch in archs}
    )


@pytest.fixture
def make_inputs(
    app_manifest: ApplicationManifest, resource_dependencies: ResourceDependencies
) -> Callable[..., MobileInstallInputs]:
    """Factory fixture building assembler inputs.

    Defaults to three dex shards and native libraries for two architectures.
    """

    def _make(
        *,
        shards: int = 3,
        archs: tuple[str, ...] = DEFAULT_ARCHS,
        without_manifest: bool = False,
        native_libs_aars: tuple[Artifact, ...] = (),
        resource_deps: ResourceDependencies | None = None,
    ) -> MobileInstallInputs:
        return MobileInstallInputs(
            manifest=None if without_manifest else app_manifest,
            resource_dependencies=resource_deps or resource_dependencies,
            resource_apk=ResourcePackage(
                artifact=Artifact(exec_path=f"{BIN}/{PACKAGE_DIR}/app.ap_", root="bin"),
                manifest=Artifact(
                    exec_path=f"{BIN}/{PACKAGE_DIR}/app_processed_manifest/AndroidManifest.xml",
                    root="bin",
                ),
            ),
            dexing=DexingOutput(
                shard_dex_zips=tuple(
                    Artifact(exec_path=f"{BIN}/{PACKAGE_DIR}/app_dx/shard{i + 1}.dex.zip", root="bin")
                    for i in range(shards)
                ),
                java_resource_jar=Artifact(
                    exec_path=f"{BIN}/{PACKAGE_DIR}/app_files/java_resources.jar", root="bin"
                ),
            ),
            native_libs=make_native_libs(archs),
            native_libs_aars=native_libs_aars,
            signing_key=Artifact.source("tools/android/debug_keystore"),
        )

    return _make


@pytest.fixture
def inputs(make_inputs: Callable[..., MobileInstallInputs]) -> MobileInstallInputs:
    return make_inputs()


@pytest.fixture
def build_yaml_data() -> dict[str, Any]:
    """A complete build description as written in build.yaml."""
    return {
        "label": TARGET,
        "manifest": {
            "manifest": f"{PACKAGE_DIR}/AndroidManifest.xml",
            "package": "com.example",
        },
        "resource_apk": {
            "artifact": f"{BIN}/{PACKAGE_DIR}/app.ap_",
            "manifest": f"{BIN}/{PACKAGE_DIR}/app_processed_manifest/AndroidManifest.xml",
        },
        "dexing": {
            "shard_dex_zips": [
                f"{BIN}/{PACKAGE_DIR}/app_dx/shard1.dex.zip",
                f"{BIN}/{PACKAGE_DIR}/app_dx/shard2.dex.zip",
            ],
            "java_resource_jar": f"{BIN}/{PACKAGE_DIR}/app_files/java_resources.jar",
        },
        "native_libs": {"arm64-v8a": ["jni/arm64-v8a/libnative.so"]},
        "signing_key": "tools/android/debug_keystore",
        "stub_application": {
            "label": "//tools/android:incremental_stub_application",
            "java": {"runtime_jars": ["tools/android/libstub.jar"]},
        },
        "split_stub_application": {
            "label": "//tools/android:incremental_split_stub_application",
            "java": {"runtime_jars": ["tools/android/libsplit_stub.jar"]},
        },
        "toolchain": {
            name: tool_path(name) for name in Toolchain.model_fields if name != "resource_extractor"
        },
        "config": {"incremental_native_libs": True, "device": "emulator-5554"},
    }


@pytest.fixture
def write_build_yaml(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Factory fixture writing a build description to tmp_path/build.yaml."""

    def _write(data: dict[str, Any], filename: str = "build.yaml") -> Path:
        path = tmp_path / filename
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path

    return _write


@pytest.fixture
def build_yaml(
    build_yaml_data: dict[str, Any], write_build_yaml: Callable[[dict[str, Any]], Path]
) -> Path:
    return write_build_yaml(build_yaml_data)
