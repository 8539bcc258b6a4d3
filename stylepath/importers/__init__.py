"""Importers - turn import identifiers into stylesheet contents.

``create_importer`` builds the standard chain:
FSImporter -> ModuleImporter -> host fallback resolver
"""

from ..module_resolution import ChainedModuleRegistry
from ..module_resolution import ModuleRegistry
from ..module_resolution import NodeModulesRegistry
from ..module_resolution import StaticModuleRegistry
from ..settings import ResolverSettings
from .base import ImportCompletion
from .base import ImportSession
from .base import ImportUtilities
from .base import Resolver
from .base import resolve_request
from .base import resolve_with_callback
from .fs_importer import FSImporter
from .module_importer import ModuleImporter


def default_registry(settings: ResolverSettings) -> ModuleRegistry:
    """Modules declared in settings first, then ``node_modules`` discovery."""
    return ChainedModuleRegistry(
        StaticModuleRegistry(settings.module_records()),
        NodeModulesRegistry(),
    )


def create_importer(
    settings: ResolverSettings,
    registry: ModuleRegistry | None = None,
    fallback: Resolver | None = None,
    session: ImportSession | None = None,
) -> FSImporter:
    """Build the importer chain for one compilation (all importers share ``session``)."""
    session = session or ImportSession()
    module_importer = ModuleImporter(settings, registry or default_registry(settings), session, fallback)
    return FSImporter(settings, session, fallback=module_importer)


__all__ = [
    "FSImporter",
    "ImportCompletion",
    "ImportSession",
    "ImportUtilities",
    "ModuleImporter",
    "Resolver",
    "create_importer",
    "default_registry",
    "resolve_request",
    "resolve_with_callback",
]
