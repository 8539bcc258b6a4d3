"""Candidate path expansion for logical import names.

A logical name like ``widgets/button`` may live on disk as ``button.scss``,
``_button.scss``, ``button/_index.scss`` and so on. ``NameExpander`` lists
those variants for every base location, in priority order.
"""

import os

from .uri import STD_SEP
from .uri import URI

DEFAULT_EXTENSIONS: tuple[str, ...] = (".scss", ".sass", ".css")
PARTIAL_PREFIX = "_"
INDEX_NAMES: tuple[str, ...] = ("_index", "index")


class CandidateSet:
    """Ordered set of absolute paths; first insertion wins."""

    def __init__(self) -> None:
        self._paths: dict[str, None] = {}

    def add(self, path: str) -> bool:
        """Add ``path``. Returns False when an equal path is already present."""
        key = os.path.normpath(os.path.abspath(path))
        if key in self._paths:
            return False
        self._paths[key] = None
        return True

    def as_list(self) -> list[str]:
        return list(self._paths)

    def __iter__(self):
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        return os.path.normpath(os.path.abspath(path)) in self._paths

    def __repr__(self) -> str:
        return f"CandidateSet({self.as_list()!r})"


class NameExpander:
    """Expands one logical name across base locations.

    Per location the order is:
    1. the name as given
    2. the name plus each extension (only when no extension was given)
    3. the partial form ``_<basename>`` with the given or each extension
    4. ``<name>/_index<ext>`` then ``<name>/index<ext>`` (only when no extension was given)

    Args:
        name: Logical import name (portable ``/`` separators)
        extensions: Recognized stylesheet extensions, in priority order
        normalize: Separator normalization override (see ``should_normalize_path_sep``)
    """

    def __init__(
        self,
        name: str,
        extensions: tuple[str, ...] | list[str] = DEFAULT_EXTENSIONS,
        normalize: bool | None = None,
    ):
        self.normalize = normalize
        self.name = URI(name, normalize=normalize).get_path() if name else ""
        self.extensions = tuple(extensions)
        self.files = CandidateSet()

        dirname, _, basename = self.name.rpartition("/")
        if not dirname and self.name.startswith("/"):
            dirname = "/"
        self._dirname = dirname
        self._basename = basename

        ext = os.path.splitext(basename)[1]
        self._given_extension = ext if ext in self.extensions else None

    @property
    def is_partial(self) -> bool:
        return self._basename.startswith(PARTIAL_PREFIX)

    def add_location(self, location: str) -> None:
        """Append every variant of the name under ``location``."""
        for candidate in self._variants():
            if os.path.isabs(candidate):
                self.files.add(candidate)
            else:
                joined = URI(STD_SEP.join((location, candidate)), normalize=self.normalize)
                self.files.add(joined.get_path(os.sep))

    def _variants(self) -> list[str]:
        variants: list[str] = []
        if not self.name:
            # Bare module import: only the index files of the location itself
            for ext in self.extensions:
                variants.extend(f"{index}{ext}" for index in INDEX_NAMES)
            return variants

        variants.append(self.name)

        extensions = (self._given_extension,) if self._given_extension else self.extensions
        if not self._given_extension:
            variants.extend(f"{self.name}{ext}" for ext in extensions)

        if not self.is_partial:
            partial = f"{PARTIAL_PREFIX}{self._basename}"
            if self._given_extension:
                partial = partial[: -len(self._given_extension)]
            for ext in extensions:
                variants.append(self._join(self._dirname, f"{partial}{ext}"))

        if not self._given_extension:
            for ext in self.extensions:
                variants.extend(self._join(self.name, f"{index}{ext}") for index in INDEX_NAMES)
        return variants

    @staticmethod
    def _join(dirname: str, basename: str) -> str:
        if not dirname:
            return basename
        if dirname == "/":
            return f"/{basename}"
        return f"{dirname}/{basename}"

    def __repr__(self) -> str:
        return f"NameExpander({self.name!r}, {len(self.files)} candidates)"
