"""URI-style path handling for import identifiers.

Identifiers may arrive with mixed separators and with query/fragment
suffixes. ``URI`` splits those apart and keeps the path in a normalized,
separator-consistent form so candidate paths compare equal.
"""

import os
import re

STD_SEP = "/"

_ALL_PATH_SEP = re.compile(r"[/\\]+")
_IS_RELATIVE = re.compile(r"^\.{1,2}")
_URI_FRAGMENTS = re.compile(r"^([^?#]+)(\?[^#]*)?(#.*)?")
_SEARCH_DELIM = re.compile(r"^[?&]*")

NORMALIZE_ENV = "STYLEPATH_NORMALIZE_PATHS"


def should_normalize_path_sep(flag: bool | None = None) -> bool:
    """Whether separators should be rewritten.

    Always true on backslash hosts. Otherwise true unless disabled by
    ``flag`` or, when no flag is given, by ``STYLEPATH_NORMALIZE_PATHS=false``.
    """
    if os.sep == "\\":
        return True
    if flag is not None:
        return flag
    return os.environ.get(NORMALIZE_ENV) != "false"


def convert_separator(uri: str, sep: str, normalize: bool | None = None) -> str:
    if should_normalize_path_sep(normalize):
        return _ALL_PATH_SEP.sub(lambda _match: sep, uri)
    return uri


class URI:
    """Path, query and fragment parts of an identifier.

    Args:
        uri: The original identifier
        sep: Separator used when representing the path (default ``/``)
        normalize: Separator normalization override (see ``should_normalize_path_sep``)
    """

    def __init__(self, uri: str, sep: str | None = None, normalize: bool | None = None):
        self.sep = sep or STD_SEP
        self.normalize = normalize
        self.path = ""
        self.search = ""
        self.hash = ""

        match = _URI_FRAGMENTS.match(uri or "")
        path, search, hash_part = match.groups() if match else ("", None, None)
        self.set_path(path)
        self.set_query(search)
        self.set_hash(hash_part)

    def set_path(self, pathname: str) -> None:
        """Set the path, normalizing it to ``self.sep``."""
        if not pathname:
            self.path = ""
            return
        pathname = convert_separator(pathname, os.sep, self.normalize)
        pathname = os.path.normpath(pathname)
        self.path = convert_separator(pathname, self.sep, self.normalize)

    def get_path(self, sep: str | None = None, relative_to: str | None = None) -> str:
        """Return the path, optionally relative to ``relative_to`` when it is a prefix."""
        pathname = self.path
        if relative_to:
            pathname = convert_separator(pathname, os.sep, self.normalize)
            relative_to = convert_separator(relative_to, os.sep, self.normalize)
            if pathname.startswith(relative_to):
                pathname = os.path.relpath(pathname, relative_to)
        return convert_separator(pathname, sep or self.sep, self.normalize)

    def add_query(self, search: str | None) -> None:
        if not search:
            return
        self.search += _SEARCH_DELIM.sub("&" if self.search else "?", search, count=1)

    def set_query(self, search: str | None) -> None:
        self.search = ""
        self.add_query(search)

    def set_hash(self, hash_part: str | None) -> None:
        self.hash = hash_part or ""

    def __str__(self) -> str:
        return self.path + self.search + self.hash

    def __repr__(self) -> str:
        return f"URI({str(self)!r})"

    @staticmethod
    def join(*fragments: str) -> str:
        """Join the non-empty fragments with ``/`` and renormalize."""
        return URI(STD_SEP.join(fragment for fragment in fragments if fragment)).get_path()

    @staticmethod
    def is_relative(uri: str) -> bool:
        """Whether the identifier starts with ``.`` or ``..``."""
        return bool(_IS_RELATIVE.match(uri))

    @staticmethod
    def web(uri: str) -> str:
        """Portable (``/``-separated) form of ``uri``."""
        return str(URI(uri))

    @staticmethod
    def system(uri: str) -> str:
        """Host-separator form of ``uri``'s path."""
        return URI(uri).get_path(os.sep)

    @staticmethod
    def stylesheet_string(uri: str) -> str:
        """Quote ``uri`` for embedding as a string literal in stylesheet source.

        "C:\\foo\\bar.png" -> "C:\\\\foo\\\\bar.png"
        """
        escaped = uri.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def preserve(uri: str) -> str:
        """Replace backslashes with a placeholder (see ``restore``)."""
        return uri.replace("\\", "<BACKSLASH>")

    @staticmethod
    def restore(uri: str) -> str:
        return uri.replace("<BACKSLASH>", "\\")
