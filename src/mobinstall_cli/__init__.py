"""mobinstall-cli: command line interface for mobinstall.

Commands:
- validate: check a build description and its configuration
- assemble: build the mobile-install action graph
- schema export: export the build description JSON Schema
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
