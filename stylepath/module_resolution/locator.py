"""Module-qualified identifier parsing and module lookup."""

import logging
import os
import re
from dataclasses import dataclass

from ..errors import ConfigurationError
from ..errors import ParseError
from ..models import ModuleRecord
from ..uri import URI
from .registry import ModuleRegistry

logger = logging.getLogger(__name__)

# $1 = module name (foo or @scope/foo), $2 = relative path
MODULE_PARSER = re.compile(r"^((?:@[^/]+/[^/]+)|(?:[^/]+))/?(.*)", re.DOTALL)
SCOPE_MARKER = "@"


@dataclass(frozen=True)
class ModuleLookup:
    """Outcome of locating the module part of an identifier."""

    identifier: str
    module_name: str | None
    relative_path: str
    record: ModuleRecord | None
    is_real_file: bool
    context_path: str


def is_real_file(path: str | None) -> bool:
    return bool(path) and os.path.isfile(path)


class ModuleLocator:
    """Splits ``module/relative/path`` identifiers and finds the module.

    Args:
        registry: Where module metadata comes from
        root: Project root, used as lookup context when the requesting file isn't on disk
    """

    def __init__(self, registry: ModuleRegistry, root: str | os.PathLike):
        self.registry = registry
        self.root = os.fspath(root)

    @staticmethod
    def parse(identifier: str) -> tuple[str, str]:
        """Split an identifier into (module_name, relative_path).

        Raises:
            ParseError: No module-name shape matches
        """
        match = MODULE_PARSER.match(identifier)
        if not match:
            raise ParseError(identifier)
        return match.group(1), match.group(2)

    def locate(self, identifier: str, prev: str) -> ModuleLookup:
        """Parse ``identifier`` and look its module up from ``prev``'s location.

        Relative (``./``, ``../``) and absolute identifiers are never module
        references; they come back with ``module_name=None``.

        Raises:
            ParseError: Identifier has no recognizable shape
        """
        real_file = is_real_file(prev)
        context_path = prev if real_file else self.root

        if URI.is_relative(identifier) or os.path.isabs(identifier):
            return ModuleLookup(identifier, None, identifier, None, real_file, context_path)

        module_name, relative_path = self.parse(identifier)
        record = self.registry.lookup(module_name, context_path)

        # Back-compat: "@scope/name/sub" may mean module "@scope" with path "name/sub".
        # Only one level is retried.
        if record is None and module_name.startswith(SCOPE_MARKER):
            scope, _, rest = module_name.partition("/")
            relative_path = "/".join(piece for piece in (rest, relative_path) if piece)
            module_name = scope
            logger.debug(f"[module:locate] {identifier} -> retrying as scoped module {scope}")
            record = self.registry.lookup(module_name, context_path)

        if record is not None:
            logger.debug(f"[module:locate] {identifier} -> {record.name} ({record.stylesheet_dir})")

        return ModuleLookup(identifier, module_name, relative_path, record, real_file, context_path)

    @staticmethod
    def missing_stylesheet_dir_error(record: ModuleRecord) -> ConfigurationError:
        return ConfigurationError(record.name, record.metadata_file, record.main_path)
