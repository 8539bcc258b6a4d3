"""Shared fixtures for stylepath tests."""

from pathlib import Path

import pytest
from stylepath.importers import ImportSession
from stylepath.models import ModuleRecord
from stylepath.module_resolution import StaticModuleRegistry
from stylepath.settings import ResolverSettings


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project tree with one installed module.

    proj/
      src/app.scss
      src/_local.scss
      vendor/_vendored.scss
      node_modules/widgets/sass/_button.scss
      node_modules/widgets/sass/index.scss
    """
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "vendor").mkdir()
    sass_dir = root / "node_modules" / "widgets" / "sass"
    sass_dir.mkdir(parents=True)

    (root / "src" / "app.scss").write_text('@import "widgets/button";')
    (root / "src" / "_local.scss").write_text(".local {}")
    (root / "vendor" / "_vendored.scss").write_text(".vendored {}")
    (sass_dir / "_button.scss").write_text(".button {}")
    (sass_dir / "index.scss").write_text(".widgets {}")
    return root


@pytest.fixture
def settings(project: Path) -> ResolverSettings:
    return ResolverSettings(root=project, include_paths=[Path("../vendor")])


@pytest.fixture
def registry(project: Path) -> StaticModuleRegistry:
    return StaticModuleRegistry(
        [
            ModuleRecord(
                name="widgets",
                stylesheet_dir=project / "node_modules" / "widgets" / "sass",
                metadata_file=project / "node_modules" / "widgets" / "package.json",
            )
        ]
    )


@pytest.fixture
def session() -> ImportSession:
    return ImportSession()
