"""``fs(token)`` importer - registers filesystem locations for stylesheets.

``@import "fs(images)"`` does not load a file. It binds ``images`` to an
absolute directory for the rest of the compilation so the filesystem
functions can build paths from it:
- ``fs(root)`` binds the project root
- any other token binds the requesting file's directory (or the CWD when
  the requesting file is not on disk)
"""

import logging
import os
import re

from ..models import ResolvedImport
from ..settings import ResolverSettings
from ..uri import URI
from .base import ImportSession
from .base import ImportUtilities
from .base import Resolver

logger = logging.getLogger(__name__)

FS_URI = re.compile(r"^fs\(([-_a-zA-Z][-_a-zA-Z0-9]+)\)$")
ROOT_TOKEN = "root"


def registration_source(token: str, absolute_path: str) -> str:
    """Stylesheet source that registers ``token`` when compiled."""
    return f'@import "stylepath/fs"; @include fs-register-path({token}, {URI.stylesheet_string(absolute_path)});'


class FSImporter:
    """Handles ``fs(token)`` identifiers; defers everything else to ``fallback``."""

    def __init__(self, settings: ResolverSettings, session: ImportSession | None = None, fallback: Resolver | None = None):
        self.root = str(settings.root)
        self.session = session or ImportSession()
        self.utils = ImportUtilities(self.session, fallback, settings.enable_import_once)

    async def resolve(self, identifier: str, prev: str) -> ResolvedImport | None:
        match = FS_URI.match(identifier)
        if not match:
            return await self.utils.fallback(identifier, prev, _nothing)

        token = match.group(1)
        if token == ROOT_TOKEN:
            absolute_path = self.root
        elif not os.path.isfile(prev):
            absolute_path = os.path.abspath(".")
        else:
            absolute_path = os.path.abspath(os.path.dirname(prev))

        # Tokens are write-once: a repeat registration emits the first binding
        bound = self.session.register_path(token, absolute_path)
        logger.debug(f"[import:fs] {token} -> {bound}")
        resolved = ResolvedImport(
            contents=registration_source(token, bound),
            file=f"fs:{token}:{bound}",
        )
        return self.utils.import_once(resolved)

    def __repr__(self) -> str:
        return f"FSImporter(root={self.root})"


async def _nothing() -> None:
    return None
