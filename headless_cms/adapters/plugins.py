"""
Directory plugin loader.

Imports every ``*.py`` module found in the configured plugin directories so
the rule registries can scan them. Files starting with an underscore are
ignored. An import failure aborts startup.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

logger = logging.getLogger(__name__)

MODULE_PREFIX = "headless_cms_plugins"


class PluginLoadError(Exception):
    """Raised when a plugin module cannot be imported."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load plugin {path}: {reason}")


class DirectoryPluginLoader:
    def __init__(self, directories: Iterable[Path | str]) -> None:
        self.directories = [Path(d) for d in directories]

    def _module_name(self, index: int, path: Path) -> str:
        # The directory index keeps same-named directories apart.
        return f"{MODULE_PREFIX}_{index}_{path.parent.name}_{path.stem}"

    def _load_module(self, index: int, path: Path) -> ModuleType:
        name = self._module_name(index, path)
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise PluginLoadError(path, "no import spec")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            del sys.modules[name]
            logger.exception("Plugin %s raised during import", path)
            raise PluginLoadError(path, str(e)) from e
        return module

    def load_sources(self) -> list[ModuleType]:
        modules: list[ModuleType] = []
        for index, directory in enumerate(self.directories):
            if not directory.is_dir():
                logger.warning("Plugin directory %s does not exist; skipping", directory)
                continue
            for path in sorted(directory.glob("*.py")):
                if path.name.startswith("_"):
                    continue
                modules.append(self._load_module(index, path))
                logger.info("Loaded plugin module %s", path)
        return modules
