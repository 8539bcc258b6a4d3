"""Resolver settings.

Settings come from up to three YAML files, merged with the most specific
scope winning:
1. local (.stylepath/settings.local.yaml) - gitignored, machine-specific
2. project (.stylepath/settings.yaml) - committed, team-shared
3. global (~/.stylepath/settings.yaml) - user defaults

Example project settings:

    include_paths: [vendor/styles]
    fs_sandbox: true
    enable_import_once: true
    modules:
      widgets:
        stylesheet_dir: node_modules/widgets/sass
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from typing import Literal

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

from .models import ModuleRecord
from .name_expander import DEFAULT_EXTENSIONS
from .sandbox import SandboxConfig
from .uri import NORMALIZE_ENV

logger = logging.getLogger(__name__)

Scope = Literal["local", "project", "global"]

ROOT_ENV = "STYLEPATH_ROOT"


class ModuleDeclaration(BaseModel):
    """A module declared directly in settings."""

    stylesheet_dir: str | None = None
    main: str | None = None


class ResolverSettings(BaseModel):
    """Configuration read by the importers and the filesystem functions.

    ``fs_sandbox`` accepts ``false`` (unrestricted), ``true`` (the project
    root only) or a list of directories, relative ones resolved against root.
    """

    root: Path = Field(default_factory=lambda: Path(os.environ.get(ROOT_ENV) or Path.cwd()))
    include_paths: list[Path] = Field(default_factory=list)
    fs_sandbox: bool | list[Path] = False
    normalize_paths: bool | None = None
    enable_import_once: bool = False
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    modules: dict[str, ModuleDeclaration] = Field(default_factory=dict)

    @field_validator("root")
    @classmethod
    def _absolute_root(cls, value: Path) -> Path:
        return Path(os.path.normpath(value.absolute()))

    @field_validator("extensions")
    @classmethod
    def _dotted_extensions(cls, value: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in value]

    @property
    def sandbox(self) -> SandboxConfig:
        if self.fs_sandbox is False:
            return SandboxConfig.unrestricted()
        if self.fs_sandbox is True:
            return SandboxConfig.of([self.root])
        return SandboxConfig.of(self.root / path for path in self.fs_sandbox)

    def module_records(self) -> list[ModuleRecord]:
        """Records for modules declared in settings, paths resolved against root."""
        return [
            ModuleRecord(
                name=name,
                stylesheet_dir=self.root / declaration.stylesheet_dir if declaration.stylesheet_dir else None,
                main_path=self.root / declaration.main if declaration.main else None,
            )
            for name, declaration in self.modules.items()
        ]


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls, project_dir: Path | None = None) -> SettingsPaths:
        project_dir = project_dir or Path.cwd()
        return cls(
            global_settings=Path.home() / ".stylepath" / "settings.yaml",
            project_settings=project_dir / ".stylepath" / "settings.yaml",
            local_settings=project_dir / ".stylepath" / "settings.local.yaml",
        )


class AppSettings:
    """Scope-aware settings loader.

    Usage:
        settings = AppSettings().resolver_settings(include_paths=["vendor"])
    """

    def __init__(self, paths: SettingsPaths | None = None) -> None:
        self.paths = paths or SettingsPaths.default()

    def get_merged_settings(self) -> dict[str, Any]:
        """Load and merge settings from all scopes."""
        result: dict[str, Any] = {}
        for path in [self.paths.global_settings, self.paths.project_settings, self.paths.local_settings]:
            if path.exists():
                try:
                    with open(path) as f:
                        content = yaml.safe_load(f) or {}
                    result = self._deep_merge(result, content)
                except yaml.YAMLError as e:
                    logger.warning(f"Skipping malformed settings file {path}: {e}")
        return result

    def resolver_settings(self, **overrides: Any) -> ResolverSettings:
        """Build ResolverSettings from merged files, then ``overrides`` (None values ignored).

        Raises:
            pydantic.ValidationError: Settings have the wrong shape
        """
        merged = self.get_merged_settings()
        merged.update({key: value for key, value in overrides.items() if value is not None})
        if "normalize_paths" not in merged and os.environ.get(NORMALIZE_ENV) == "false":
            merged["normalize_paths"] = False
        return ResolverSettings(**merged)

    def _get_scope_path(self, scope: Scope) -> Path:
        return {
            "local": self.paths.local_settings,
            "project": self.paths.project_settings,
            "global": self.paths.global_settings,
        }[scope]

    def _read_scope(self, scope: Scope) -> dict[str, Any]:
        path = self._get_scope_path(scope)
        if not path.exists():
            return {}
        with open(path) as f:
            return yaml.safe_load(f) or {}

    def update_setting(self, key: str, value: Any, scope: Scope = "project") -> None:
        """Update a single setting at specified scope."""
        settings = self._read_scope(scope)
        settings[key] = value
        path = self._get_scope_path(scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(settings, f, default_flow_style=False)

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dicts, overlay wins."""
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
