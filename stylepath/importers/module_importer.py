"""Module-aware importer - the import resolution state machine.

Resolution order for one import (first existing file wins):
1. Module-relative: ``<stylesheet_dir>/<path>`` then ``<stylesheet_dir>/<module>/<path>``
2. Relative: the requesting file's directory (or the project root), then include paths
3. Host fallback resolver on every miss, then a NotFoundError listing every probed path
"""

import asyncio
import logging
import os

from ..errors import NotFoundError
from ..models import ResolvedImport
from ..module_resolution import ModuleLocator
from ..module_resolution import ModuleLookup
from ..module_resolution import ModuleRegistry
from ..name_expander import NameExpander
from ..settings import ResolverSettings
from .base import ImportSession
from .base import ImportUtilities
from .base import Resolver

logger = logging.getLogger(__name__)


class ModuleImporter:
    """Resolves ``module/relative/path``, relative and include-path imports.

    Args:
        settings: Project root, include paths, extensions, import-once flag
        registry: Module metadata source
        session: Compile-scoped state (a fresh one when omitted)
        fallback: Host resolver tried on every miss
    """

    def __init__(
        self,
        settings: ResolverSettings,
        registry: ModuleRegistry,
        session: ImportSession | None = None,
        fallback: Resolver | None = None,
    ):
        self.settings = settings
        self.root = str(settings.root)
        self.include_paths = [str(path) for path in settings.include_paths]
        self.locator = ModuleLocator(registry, self.root)
        self.session = session or ImportSession()
        self.utils = ImportUtilities(self.session, fallback, settings.enable_import_once)

    async def resolve(self, identifier: str, prev: str) -> ResolvedImport:
        """Resolve one import.

        Raises:
            ParseError: Identifier has no recognizable shape (no fallback)
            ConfigurationError: Module found without a stylesheet directory
            NotFoundError: Nothing found anywhere, fallback included
            UnderlyingIOError: A candidate exists but could not be read
        """
        lookup = self.locator.locate(identifier, prev)
        probed: list[str] = []

        record = lookup.record
        if record is not None and record.stylesheet_dir is None and not lookup.is_real_file:

            async def missing_stylesheet_dir() -> ResolvedImport:
                raise self.locator.missing_stylesheet_dir_error(record)

            return await self.utils.fallback(identifier, prev, missing_stylesheet_dir)

        if record is not None and record.stylesheet_dir is not None:
            # Module import: no include paths. On a miss, try relative to the current location.
            assert lookup.module_name is not None
            found = await self._read_abstract_file(
                lookup.relative_path,
                str(record.stylesheet_dir),
                include_paths=None,
                module_name=lookup.module_name,
                probed=probed,
            )
            if found is not None:
                return self.utils.import_once(found)

            logger.debug(f"[import:module] {identifier} not in {record.stylesheet_dir}, trying relative")
            return await self.utils.fallback(
                identifier, prev, lambda: self._relative_import(lookup, prev, include_paths=None, probed=probed)
            )

        return await self._relative_import(lookup, prev, include_paths=self.include_paths, probed=probed)

    async def _relative_import(
        self, lookup: ModuleLookup, prev: str, include_paths: list[str] | None, probed: list[str]
    ) -> ResolvedImport:
        identifier = lookup.identifier
        location = os.path.dirname(lookup.context_path) if lookup.is_real_file else self.root

        found = await self._read_abstract_file(identifier, location, include_paths, None, probed)
        if found is not None:
            return self.utils.import_once(found)

        async def not_found() -> ResolvedImport:
            raise NotFoundError(identifier, probed, prev=prev)

        return await self.utils.fallback(identifier, prev, not_found)

    async def _read_abstract_file(
        self,
        name: str,
        location: str,
        include_paths: list[str] | None,
        module_name: str | None,
        probed: list[str],
    ) -> ResolvedImport | None:
        """Expand ``name`` over the locations and read the first existing candidate."""
        expander = NameExpander(name, self.settings.extensions, self.settings.normalize_paths)
        expander.add_location(location)
        if module_name:
            expander.add_location(os.path.join(location, module_name))
        for include_path in include_paths or []:
            expander.add_location(os.path.abspath(os.path.join(location, include_path)))

        for candidate in expander.files:
            if candidate not in probed:
                probed.append(candidate)
            if not await asyncio.to_thread(os.path.isfile, candidate):
                continue
            contents = await self.utils.read(candidate)
            if contents is None:
                continue
            logger.debug(f"[import:resolve] {name} -> {candidate}")
            return ResolvedImport(contents=contents, file=candidate)
        return None

    def __repr__(self) -> str:
        return f"ModuleImporter(root={self.root})"
