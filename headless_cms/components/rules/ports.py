"""
Rules component port definitions.
"""

from __future__ import annotations

from types import ModuleType
from typing import Protocol


class RuleSourcePort(Protocol):
    """Supplies the modules scanned for rule implementations at startup."""

    def load_sources(self) -> list[ModuleType]:
        """Import and return candidate modules."""
        ...
