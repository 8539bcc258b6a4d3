"""Sandboxed filesystem functions exposed to compiled stylesheets.

Every function that touches the filesystem checks the sandbox first and
answers with a ``Security violation`` error value for paths outside it.
Errors never raise into the compiler; they come back as ``SassError``.
"""

import asyncio
import functools
import glob
import logging
import os
from collections.abc import Awaitable
from collections.abc import Callable
from typing import Any

from ..errors import SecurityViolationError
from ..errors import StylepathError
from ..errors import UnderlyingIOError
from ..importers.base import ImportSession
from ..sandbox import is_permitted
from ..settings import ResolverSettings
from .values import FALSE
from .values import TRUE
from .values import SassError
from .values import SassMap
from .values import SassString
from .values import SassValue
from .values import require_string
from .values import to_sass

logger = logging.getLogger(__name__)

FunctionResult = SassValue | SassError


def _returns_error_values(func: Callable[..., Awaitable[FunctionResult]]) -> Callable[..., Awaitable[FunctionResult]]:
    """Turn resolution errors and OS errors into ``SassError`` values."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> FunctionResult:
        try:
            return await func(*args, **kwargs)
        except StylepathError as e:
            logger.debug(f"[fs:function] {func.__name__}: {e}")
            return SassError.from_exception(e)
        except OSError as e:
            return SassError.from_exception(UnderlyingIOError(e.filename or "", e))

    return wrapper


class FsFunctions:
    """Filesystem query functions bound to one compilation.

    Args:
        settings: Provides the sandbox configuration
        session: Holds ``fs(token)`` registrations
    """

    def __init__(self, settings: ResolverSettings, session: ImportSession):
        self.sandbox = settings.sandbox
        self.session = session

    def in_sandbox(self, path: str) -> bool:
        return is_permitted(path, self.sandbox)

    def _check(self, path: str) -> None:
        if not self.in_sandbox(path):
            raise SecurityViolationError(path)

    @_returns_error_values
    async def absolute_path(self, path_id: SassValue, *segments: SassValue, registered: SassMap | None = None) -> FunctionResult:
        """Resolve ``segments`` against the directory registered for ``path_id``.

        The session binding wins; ``registered`` is consulted only for tokens
        the session never saw.
        """
        token = require_string(path_id)
        expanded = self.session.registered_path(token)
        if expanded is None and registered is not None and (value := registered.get(token)) is not None:
            expanded = require_string(value)
        if expanded is None:
            return SassError(f"No path is registered for {token}")
        parts = [require_string(segment) for segment in segments]
        return SassString(os.path.abspath(os.path.join(expanded, *parts)))

    @_returns_error_values
    async def join(self, *segments: SassValue) -> FunctionResult:
        parts = [require_string(segment) for segment in segments]
        if not parts:
            return SassString(".")
        return SassString(os.path.normpath(os.path.join(*parts)))

    @_returns_error_values
    async def exists(self, absolute_path: SassValue) -> FunctionResult:
        path = require_string(absolute_path)
        self._check(path)
        return TRUE if await asyncio.to_thread(os.path.exists, path) else FALSE

    @_returns_error_values
    async def path_separator(self) -> FunctionResult:
        return SassString(os.sep)

    @_returns_error_values
    async def list_files(self, directory: SassValue, glob_pattern: SassValue = SassString("*")) -> FunctionResult:
        return await self._glob_files(require_string(directory), require_string(glob_pattern), True, False)

    @_returns_error_values
    async def list_directories(self, directory: SassValue, glob_pattern: SassValue = SassString("*")) -> FunctionResult:
        return await self._glob_files(require_string(directory), require_string(glob_pattern), False, True)

    async def _glob_files(
        self, directory: str, pattern: str, include_files: bool, include_directories: bool
    ) -> FunctionResult:
        self._check(directory)
        entries = await asyncio.to_thread(_glob_entries, directory, pattern)

        results: list[str] = []
        for entry, is_dir in entries:
            if (is_dir and not include_directories) or (not is_dir and not include_files):
                continue
            self._check_entry(directory, entry)
            results.append(entry)
        return to_sass(results)

    def _check_entry(self, directory: str, entry: str) -> None:
        if not self.in_sandbox(os.path.join(directory, entry)):
            raise SecurityViolationError(entry)

    @_returns_error_values
    async def parse_filename(self, filename: SassValue) -> FunctionResult:
        name = require_string(filename)
        dirname, base = os.path.split(name)
        stem, ext = os.path.splitext(base)
        return to_sass(
            {
                "base": base,
                "dir": dirname,
                "name": stem,
                "ext": ext,
                "is-absolute": os.path.isabs(name),
            }
        )

    @_returns_error_values
    async def info(self, filename: SassValue) -> FunctionResult:
        path = require_string(filename)
        self._check(path)
        return to_sass(await asyncio.to_thread(_stat_info, path))

    @_returns_error_values
    async def read_file(self, filename: SassValue) -> FunctionResult:
        path = require_string(filename)
        self._check(path)
        try:
            contents = await asyncio.to_thread(_read_text, path)
        except UnicodeDecodeError as e:
            raise UnderlyingIOError(path, e) from e
        return SassString(contents)

    def declarations(self) -> dict[str, Callable[..., Awaitable[FunctionResult]]]:
        """Stylesheet-facing signatures mapped to their implementations."""

        async def absolute_path(registered: SassValue, path_id: SassValue, *segments: SassValue) -> FunctionResult:
            # An empty map arrives as null or an empty list
            mapping = registered if isinstance(registered, SassMap) else None
            return await self.absolute_path(path_id, *segments, registered=mapping)

        return {
            "stylepath-fs-absolute-path($fs-registered-pathnames, $path-id, $segments...)": absolute_path,
            "stylepath-fs-join($segments...)": self.join,
            "stylepath-fs-exists($absolute-path)": self.exists,
            "stylepath-fs-path-separator()": self.path_separator,
            "stylepath-fs-list-files($directory, $glob: '*')": self.list_files,
            "stylepath-fs-list-directories($directory, $glob: '*')": self.list_directories,
            "stylepath-fs-parse-filename($filename)": self.parse_filename,
            "stylepath-fs-info($filename)": self.info,
            "stylepath-fs-read-file($filename)": self.read_file,
        }


def _glob_entries(directory: str, pattern: str) -> list[tuple[str, bool]]:
    matches = sorted(glob.glob(pattern, root_dir=directory))
    return [(entry, os.path.isdir(os.path.join(directory, entry))) for entry in matches]


def _stat_info(path: str) -> dict[str, Any]:
    stats = os.stat(path)
    birth = getattr(stats, "st_birthtime", stats.st_ctime)
    return {
        "modification-time": int(stats.st_mtime * 1000),
        "creation-time": int(birth * 1000),
        "is-file": os.path.isfile(path),
        "is-directory": os.path.isdir(path),
        "real-path": os.path.realpath(path),
        "size": stats.st_size,
    }


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()
