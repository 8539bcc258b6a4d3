"""Module resolution - identifier parsing and module metadata lookup.

The import engine depends only on the ``ModuleRegistry`` protocol; how
modules are discovered on disk is up to the registry implementation.
"""

from .locator import ModuleLocator
from .locator import ModuleLookup
from .registry import ChainedModuleRegistry
from .registry import ModuleRegistry
from .registry import NodeModulesRegistry
from .registry import StaticModuleRegistry

__all__ = [
    "ChainedModuleRegistry",
    "ModuleLocator",
    "ModuleLookup",
    "ModuleRegistry",
    "NodeModulesRegistry",
    "StaticModuleRegistry",
]
