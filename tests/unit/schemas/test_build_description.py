"""Unit tests for BuildDescription loading."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml
from pydantic import ValidationError

from mobinstall_core.schemas import (
    SPLIT_STUB_APPLICATION_ATTRIBUTE,
    STUB_APPLICATION_ATTRIBUTE,
    BuildDescription,
    Label,
    MobileInstallInputs,
)


class TestFromYaml:
    """Tests for BuildDescription.from_yaml()."""

    def test_loads_complete_description(self, build_yaml: Path) -> None:
        description = BuildDescription.from_yaml(build_yaml)
        assert description.target_label == Label.parse("//java/com/example:app")
        assert len(description.dexing.shard_dex_zips) == 2
        assert description.native_libs.architectures == ("arm64-v8a",)
        assert description.config.incremental_native_libs
        assert description.toolchain.require("adb").exec_path == "tools/android/adb"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            BuildDescription.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "build.yaml"
        path.write_text("label: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            BuildDescription.from_yaml(path)

    def test_empty_file_reports_missing_fields(self, tmp_path: Path) -> None:
        path = tmp_path / "build.yaml"
        path.write_text("")
        with pytest.raises(ValidationError) as exc_info:
            BuildDescription.from_yaml(path)
        missing = {e["loc"][0] for e in exc_info.value.errors()}
        assert {"label", "dexing", "signing_key", "resource_apk"} <= missing

    def test_rejects_bad_label(
        self,
        build_yaml_data: dict[str, Any],
        write_build_yaml: Callable[[dict[str, Any]], Path],
    ) -> None:
        build_yaml_data["label"] = "java/com/example:app"
        with pytest.raises(ValidationError, match="must start with"):
            BuildDescription.from_yaml(write_build_yaml(build_yaml_data))

    def test_rejects_unknown_keys(
        self,
        build_yaml_data: dict[str, Any],
        write_build_yaml: Callable[[dict[str, Any]], Path],
    ) -> None:
        build_yaml_data["proguard_specs"] = ["proguard.cfg"]
        with pytest.raises(ValidationError):
            BuildDescription.from_yaml(write_build_yaml(build_yaml_data))


class TestProjections:
    """Tests for inputs() and prerequisites()."""

    def test_inputs_projection(self, build_yaml: Path) -> None:
        description = BuildDescription.from_yaml(build_yaml)
        inputs = description.inputs()
        assert type(inputs) is MobileInstallInputs
        assert inputs.dexing == description.dexing
        assert inputs.signing_key == description.signing_key

    def test_prerequisites_keyed_by_attribute(self, build_yaml: Path) -> None:
        prerequisites = BuildDescription.from_yaml(build_yaml).prerequisites()
        assert set(prerequisites) == {STUB_APPLICATION_ATTRIBUTE, SPLIT_STUB_APPLICATION_ATTRIBUTE}

    def test_missing_stub_is_omitted(
        self,
        build_yaml_data: dict[str, Any],
        write_build_yaml: Callable[[dict[str, Any]], Path],
    ) -> None:
        del build_yaml_data["split_stub_application"]
        prerequisites = BuildDescription.from_yaml(write_build_yaml(build_yaml_data)).prerequisites()
        assert set(prerequisites) == {STUB_APPLICATION_ATTRIBUTE}
