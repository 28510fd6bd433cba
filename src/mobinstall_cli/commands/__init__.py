"""CLI command modules.

Each module holds one command; they are loaded lazily by the main group.
"""

from __future__ import annotations

__all__: list[str] = []
