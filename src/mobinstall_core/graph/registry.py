"""Scoped artifact registry.

Issues derived artifacts for one target. Paths are a pure function of the
target label and a logical name, so there is no process-wide naming
table: two registries for different targets can never collide, and the
same logical name asked twice of one registry yields the same artifact.
"""

from __future__ import annotations

import posixpath

import structlog

from mobinstall_core.errors import GraphConstructionError
from mobinstall_core.schemas.artifact import Artifact, Label

logger = structlog.get_logger(__name__)

DEFAULT_BIN_DIR = "bazel-out/bin"
MOBILE_INSTALL_DIRECTORY = "_mobile_install"


class ImplicitOutputs:
    """Templates of the well-known outputs of an android binary target.

    ``%{name}`` expands to the target name.
    """

    INCREMENTAL_RESOURCES_APK = "%{name}_files/incremental.ap_"
    INCREMENTAL_APK = "%{name}_incremental.apk"
    FULL_DEPLOY_MARKER = "%{name}_files/full_deploy_marker"
    INCREMENTAL_DEPLOY_MARKER = "%{name}_files/incremental_deploy_marker"
    SPLIT_DEPLOY_MARKER = "%{name}_files/split_deploy_marker"
    DEX_MANIFEST = "%{name}_files/dexmanifest.txt"
    STUB_APPLICATION_DATA = "%{name}_files/stub_application_data.txt"
    MOBILE_INSTALL_ARGS = "%{name}_files/mobile-install-args"
    DEPLOY_INFO_INCREMENTAL = "%{name}_files/deploy_info_incremental.deployinfo.pb"
    DEPLOY_INFO_SPLIT = "%{name}_files/deploy_info_split.deployinfo.pb"


class ArtifactRegistry:
    """Issues output artifacts under the output tree of one target.

    Attributes:
        label: Target owning every artifact issued here.
        bin_dir: Root of the output tree.

    Example:
        >>> registry = ArtifactRegistry(Label.parse("//java/app:app"))
        >>> registry.mobile_install_artifact("dex1.apk").exec_path
        'bazel-out/bin/java/app/_mobile_install/app/dex1.apk'
    """

    def __init__(self, label: Label, bin_dir: str = DEFAULT_BIN_DIR) -> None:
        self.label = label
        self.bin_dir = bin_dir.rstrip("/")
        self._issued: dict[str, Artifact] = {}

    def _derived(self, relative: str) -> Artifact:
        normalized = posixpath.normpath(relative)
        if normalized.startswith("..") or posixpath.isabs(normalized):
            raise GraphConstructionError(
                "Artifact path escapes the target's output directory",
                internal_details=f"{self.label}: {relative!r}",
            )
        exec_path = posixpath.join(self.bin_dir, self.label.package, normalized)
        artifact = self._issued.get(exec_path)
        if artifact is None:
            artifact = Artifact(exec_path=exec_path, root="bin", owner=str(self.label))
            self._issued[exec_path] = artifact
            logger.debug("artifact_issued", label=str(self.label), exec_path=exec_path)
        return artifact

    def implicit_output(self, template: str) -> Artifact:
        """Return the implicit output described by ``template``."""
        return self._derived(template.replace("%{name}", self.label.name))

    def unique_directory_artifact(self, directory: str, base_name: str) -> Artifact:
        """Return ``<package>/<directory>/<target name>/<base_name>`` in the output tree."""
        return self._derived(posixpath.join(directory, self.label.name, base_name))

    def mobile_install_artifact(self, base_name: str) -> Artifact:
        """Return an intermediate artifact private to mobile-install."""
        return self.unique_directory_artifact(MOBILE_INSTALL_DIRECTORY, base_name)

    @property
    def issued(self) -> tuple[Artifact, ...]:
        return tuple(self._issued.values())
