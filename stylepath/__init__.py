"""stylepath - resolve stylesheet import identifiers to files on disk."""

from .errors import ConfigurationError
from .errors import NotFoundError
from .errors import ParseError
from .errors import SecurityViolationError
from .errors import StylepathError
from .errors import TypeMismatchError
from .errors import UnderlyingIOError
from .importers import FSImporter
from .importers import ImportSession
from .importers import ModuleImporter
from .importers import create_importer
from .importers import resolve_with_callback
from .models import ImportRequest
from .models import ModuleRecord
from .models import ResolvedImport
from .name_expander import CandidateSet
from .name_expander import NameExpander
from .sandbox import SandboxConfig
from .sandbox import is_permitted
from .settings import ResolverSettings
from .uri import URI

__all__ = [
    "URI",
    "CandidateSet",
    "ConfigurationError",
    "FSImporter",
    "ImportRequest",
    "ImportSession",
    "ModuleImporter",
    "ModuleRecord",
    "NameExpander",
    "NotFoundError",
    "ParseError",
    "ResolvedImport",
    "ResolverSettings",
    "SandboxConfig",
    "SecurityViolationError",
    "StylepathError",
    "TypeMismatchError",
    "UnderlyingIOError",
    "create_importer",
    "is_permitted",
    "resolve_with_callback",
]
