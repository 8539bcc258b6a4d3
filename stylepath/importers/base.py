"""Shared importer plumbing: session state, fallback delegation, callbacks.

An ``ImportSession`` lives for one compilation. It owns the two pieces of
mutable state resolution needs:
- the read-once cache (one read per canonical path)
- the ``fs(token)`` registrations (write-once per token)

Both are mutated on the event loop thread with no await between the lookup
and the insert, so the first writer wins and later writers see its entry.
"""

import asyncio
import logging
import os
from collections.abc import Awaitable
from collections.abc import Callable
from typing import Protocol
from typing import runtime_checkable

from ..errors import UnderlyingIOError
from ..models import ImportRequest
from ..models import ResolvedImport

logger = logging.getLogger(__name__)

ImportCompletion = Callable[[Exception | None, ResolvedImport | None], None]


@runtime_checkable
class Resolver(Protocol):
    """Anything that can turn an identifier into an import.

    Returns None when it has nothing usable, so the caller can move on.
    """

    async def resolve(self, identifier: str, prev: str) -> ResolvedImport | None: ...


def canonical_path(path: str | os.PathLike) -> str:
    """Stable key for a file path (absolute, normalized, no symlink resolution)."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


class ImportSession:
    """Compile-scoped state shared by all importers of one compilation.

    Args:
        reader: Blocking file reader, run in a worker thread (default: UTF-8 text read)
    """

    def __init__(self, reader: Callable[[str], str] | None = None):
        self._reader = reader or _read_text
        self._reads: dict[str, asyncio.Future[str]] = {}
        self._imported: set[str] = set()
        self._registered_paths: dict[str, str] = {}

    async def read_once(self, path: str) -> str:
        """Read ``path`` at most once per session.

        Concurrent and later callers for the same canonical path await the
        same read. A failed read is forgotten so a later request may retry.

        Raises:
            OSError: The read failed
            UnicodeDecodeError: The file is not UTF-8
        """
        key = canonical_path(path)
        pending = self._reads.get(key)
        if pending is None:
            pending = asyncio.ensure_future(asyncio.to_thread(self._reader, key))
            self._reads[key] = pending
            logger.debug(f"[import:read] {key}")
        try:
            return await asyncio.shield(pending)
        except Exception:
            if self._reads.get(key) is pending:
                del self._reads[key]
            raise

    def mark_imported(self, path: str) -> bool:
        """Record an import of ``path``. True only for the first import."""
        key = canonical_path(path) if not path.startswith("fs:") else path
        if key in self._imported:
            return False
        self._imported.add(key)
        return True

    def register_path(self, token: str, path: str) -> str:
        """Bind ``token`` to ``path`` unless already bound; return the bound path."""
        existing = self._registered_paths.get(token)
        if existing is not None:
            if existing != path:
                logger.debug(f"[fs:register] {token} already bound to {existing}, ignoring {path}")
            return existing
        self._registered_paths[token] = path
        logger.debug(f"[fs:register] {token} -> {path}")
        return path

    def registered_path(self, token: str) -> str | None:
        return self._registered_paths.get(token)

    @property
    def registered_paths(self) -> dict[str, str]:
        return dict(self._registered_paths)

    @property
    def read_count(self) -> int:
        """Number of distinct paths read so far."""
        return len(self._reads)


class ImportUtilities:
    """Fallback delegation and import-once handling for one importer.

    Args:
        session: Compile-scoped state
        fallback: Host-supplied resolver tried on every miss (may be None)
        enable_import_once: Mark repeated imports of a file as already imported
    """

    def __init__(self, session: ImportSession, fallback: Resolver | None = None, enable_import_once: bool = False):
        self.session = session
        self.fallback_resolver = fallback
        self.enable_import_once = enable_import_once

    async def fallback(
        self,
        identifier: str,
        prev: str,
        on_miss: Callable[[], Awaitable[ResolvedImport | None]],
    ) -> ResolvedImport | None:
        """Try the fallback resolver with the untouched identifier, else ``on_miss()``."""
        if self.fallback_resolver is not None:
            result = await self.fallback_resolver.resolve(identifier, prev)
            if result is not None:
                logger.debug(f"[import:fallback] {identifier} resolved by {self.fallback_resolver!r}")
                return result
        return await on_miss()

    def import_once(self, resolved: ResolvedImport) -> ResolvedImport:
        first = self.session.mark_imported(resolved.file)
        if self.enable_import_once and not first:
            logger.debug(f"[import:once] {resolved.file} already imported")
            return resolved.model_copy(update={"already_imported": True})
        return resolved

    async def read(self, path: str) -> str | None:
        """Read a candidate through the session cache.

        Returns None when the candidate vanished or is a directory.

        Raises:
            UnderlyingIOError: Any other read failure
        """
        try:
            return await self.session.read_once(path)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise UnderlyingIOError(path, e) from e


def resolve_with_callback(resolver: Resolver, identifier: str, prev: str, done: ImportCompletion) -> asyncio.Task:
    """Schedule resolution on the running loop and report through ``done(error, result)``.

    Errors never escape the task; they are handed to ``done``.
    """

    async def _run() -> None:
        try:
            result = await resolver.resolve(identifier, prev)
        except Exception as e:
            done(e, None)
            return
        done(None, result)

    return asyncio.ensure_future(_run())


async def resolve_request(resolver: Resolver, request: ImportRequest) -> ResolvedImport | None:
    return await resolver.resolve(request.identifier, request.prev)
