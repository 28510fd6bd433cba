"""Mobile-install graph builders.

- resources: incremental and split resource packages
- manifest: stubbed and split manifests
- stub: stub application dex
- apk: apk packaging and signing
- splits: split apk decomposition
- install: install actions and adb flag file
- output_groups: output groups and deploy info
- assembler: wires the phases together
"""

from __future__ import annotations

from mobinstall_core.mobile_install.assembler import (
    MobileInstallAssembler,
    MobileInstallResult,
    assemble_from_description,
)
from mobinstall_core.mobile_install.install import DeploymentMode
from mobinstall_core.mobile_install.output_groups import (
    INCREMENTAL_DEPLOY_INFO,
    MOBILE_INSTALL_FULL,
    MOBILE_INSTALL_INCREMENTAL,
    MOBILE_INSTALL_SPLIT,
    OutputGroups,
)
from mobinstall_core.mobile_install.splits import SplitDecomposition

__all__ = [
    "DeploymentMode",
    "INCREMENTAL_DEPLOY_INFO",
    "MOBILE_INSTALL_FULL",
    "MOBILE_INSTALL_INCREMENTAL",
    "MOBILE_INSTALL_SPLIT",
    "MobileInstallAssembler",
    "MobileInstallResult",
    "OutputGroups",
    "SplitDecomposition",
    "assemble_from_description",
]
