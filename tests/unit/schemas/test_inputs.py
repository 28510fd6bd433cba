"""Unit tests for assembler input models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mobinstall_core.schemas import (
    Artifact,
    JavaTargetInfo,
    NativeLibs,
    ResourceContainer,
    ResourceDependencies,
)


class TestNativeLibs:
    """Tests for NativeLibs."""

    def test_preserves_architecture_order(self) -> None:
        libs = NativeLibs(
            libs={
                "x86": (Artifact.source("jni/x86/liba.so"),),
                "arm64-v8a": (Artifact.source("jni/arm64/liba.so"), Artifact.source("jni/arm64/libb.so")),
            }
        )
        assert libs.architectures == ("x86", "arm64-v8a")
        assert [arch for arch, _ in libs.entries()] == ["x86", "arm64-v8a", "arm64-v8a"]
        assert len(libs.all_libraries()) == 3

    def test_accepts_bare_mapping(self) -> None:
        libs = NativeLibs.model_validate({"armeabi-v7a": ["jni/armeabi-v7a/libfoo.so"]})
        assert libs.entries() == [("armeabi-v7a", Artifact.source("jni/armeabi-v7a/libfoo.so"))]

    def test_empty(self) -> None:
        assert NativeLibs().is_empty
        assert NativeLibs(libs={"x86": ()}).is_empty
        assert NativeLibs().entries() == []

    @pytest.mark.parametrize("arch", ["", "arm:64"])
    def test_rejects_bad_architecture(self, arch: str) -> None:
        with pytest.raises(ValidationError, match="invalid architecture"):
            NativeLibs(libs={arch: (Artifact.source("libfoo.so"),)})


class TestResourceDependencies:
    """Tests for ResourceDependencies and ResourceContainer."""

    def test_transitive_before_direct(self) -> None:
        direct = ResourceContainer(label="//app:res")
        transitive = ResourceContainer(label="//lib:res")
        deps = ResourceDependencies(direct=(direct,), transitive=(transitive,))
        assert deps.all_containers() == (transitive, direct)

    def test_container_artifacts(self) -> None:
        manifest = Artifact.source("lib/AndroidManifest.xml")
        resource = Artifact.source("lib/res/values/strings.xml")
        container = ResourceContainer(label="//lib:res", manifest=manifest, resources=(resource,))
        assert container.artifacts() == (resource, manifest)


class TestJavaTargetInfo:
    """Tests for JavaTargetInfo."""

    def test_requires_runtime_jars(self) -> None:
        with pytest.raises(ValidationError):
            JavaTargetInfo(runtime_jars=())
