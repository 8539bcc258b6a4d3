"""Filesystem sandbox for the stylesheet-facing filesystem functions.

Containment is lexical: both the candidate and each root are normalized to
absolute paths and compared structurally. Symlinks inside a root that point
outside of it are not followed or re-checked; this is a known gap.
"""

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SandboxConfig:
    """Either unrestricted (``roots is None``) or an ordered allow-list of roots."""

    roots: tuple[str, ...] | None = None

    @classmethod
    def unrestricted(cls) -> "SandboxConfig":
        return cls(roots=None)

    @classmethod
    def of(cls, roots: Iterable[str | os.PathLike]) -> "SandboxConfig":
        """Allow-list sandbox; roots are normalized to absolute paths."""
        normalized: list[str] = []
        for root in roots:
            path = _normalize(root)
            if path not in normalized:
                normalized.append(path)
        return cls(roots=tuple(normalized))

    @property
    def is_unrestricted(self) -> bool:
        return self.roots is None


def _normalize(path: str | os.PathLike) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def path_in_sandbox_dir(path: str | os.PathLike, sandbox_dir: str | os.PathLike) -> bool:
    """True when ``path`` equals or lies below ``sandbox_dir``."""
    try:
        relative = os.path.relpath(_normalize(path), _normalize(sandbox_dir))
    except ValueError:
        # Different drives
        return False
    return relative != os.pardir and not relative.startswith(os.pardir + os.sep)


def is_permitted(path: str | os.PathLike, config: SandboxConfig) -> bool:
    """Whether the sandbox admits ``path``."""
    if config.is_unrestricted:
        return True
    roots = config.roots or ()
    if any(path_in_sandbox_dir(path, root) for root in roots):
        return True
    logger.debug(f"[sandbox] rejected {path} (roots: {', '.join(roots)})")
    return False
