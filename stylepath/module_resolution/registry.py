"""Module registries - where module metadata comes from.

The import engine only depends on the ``ModuleRegistry`` protocol. The
implementations here cover the common setups:
- StaticModuleRegistry: modules declared in settings
- NodeModulesRegistry: ``node_modules/<name>/package.json`` discovery
- ChainedModuleRegistry: first registry with an answer wins
"""

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol
from typing import runtime_checkable

from ..models import ModuleRecord

logger = logging.getLogger(__name__)

METADATA_FILE = "package.json"
METADATA_KEY = "stylepath"


@runtime_checkable
class ModuleRegistry(Protocol):
    """Looks up module metadata by name, relative to a context path."""

    def lookup(self, module_name: str, context_path: str) -> ModuleRecord | None: ...


class StaticModuleRegistry:
    """Registry backed by an explicit name -> record mapping."""

    def __init__(self, records: Iterable[ModuleRecord] | None = None):
        self._records: dict[str, ModuleRecord] = {}
        for record in records or []:
            self.add(record)

    def add(self, record: ModuleRecord) -> None:
        self._records[record.name] = record

    def lookup(self, module_name: str, context_path: str) -> ModuleRecord | None:
        return self._records.get(module_name)

    def __repr__(self) -> str:
        return f"StaticModuleRegistry({sorted(self._records)})"


class NodeModulesRegistry:
    """Discovers modules installed under ``node_modules`` directories.

    Walks up from the context path, checking ``node_modules/<name>/package.json``
    at each level. The stylesheet directory comes from
    ``{"stylepath": {"stylesheetDir": ...}}`` (``sassDir`` is accepted too),
    relative to the package directory.
    """

    def __init__(self, stop_at: Path | None = None):
        self.stop_at = stop_at.absolute() if stop_at else None
        self._cache: dict[Path, ModuleRecord | None] = {}

    def lookup(self, module_name: str, context_path: str) -> ModuleRecord | None:
        context = Path(context_path).absolute()
        start = context.parent if context.is_file() else context

        for directory in [start, *start.parents]:
            package_json = directory / "node_modules" / module_name / METADATA_FILE
            if package_json.is_file():
                logger.debug(f"[module:lookup] {module_name} -> {package_json}")
                return self._load(module_name, package_json)
            if self.stop_at and directory == self.stop_at:
                break

        logger.debug(f"[module:lookup] {module_name} not found from {context_path}")
        return None

    def _load(self, module_name: str, package_json: Path) -> ModuleRecord | None:
        if package_json in self._cache:
            return self._cache[package_json]

        try:
            with open(package_json, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read {package_json}: {e}")
            return None

        package_dir = package_json.parent
        options = data.get(METADATA_KEY) or {}
        if not isinstance(options, dict):
            options = {}

        stylesheet_dir = options.get("stylesheetDir") or options.get("sassDir")
        main = options.get("main") or data.get("main")

        record = ModuleRecord(
            name=data.get("name") or module_name,
            stylesheet_dir=Path(os.path.normpath(package_dir / stylesheet_dir)) if stylesheet_dir else None,
            main_path=Path(os.path.normpath(package_dir / main)) if main else None,
            metadata_file=package_json,
        )
        self._cache[package_json] = record
        return record

    def __repr__(self) -> str:
        return "NodeModulesRegistry()"


class ChainedModuleRegistry:
    """Tries each registry in order (first match wins)."""

    def __init__(self, *registries: ModuleRegistry):
        self.registries = list(registries)

    def lookup(self, module_name: str, context_path: str) -> ModuleRecord | None:
        for registry in self.registries:
            if record := registry.lookup(module_name, context_path):
                return record
        return None

    def __repr__(self) -> str:
        return f"ChainedModuleRegistry({self.registries!r})"
