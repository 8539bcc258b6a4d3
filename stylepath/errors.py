"""Error taxonomy for import resolution and sandboxed filesystem functions."""

from pathlib import Path


class StylepathError(Exception):
    """Base class for all resolution errors."""


class ParseError(StylepathError):
    """Identifier does not match any recognized shape. Never retried."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"invalid uri: {identifier}")


class NotFoundError(StylepathError):
    """No candidate existed on disk and no fallback produced a result."""

    def __init__(self, identifier: str, candidates: list[str] | None = None, prev: str | None = None):
        self.identifier = identifier
        self.candidates = list(candidates or [])
        self.prev = prev
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        header = f"Could not import {self.identifier}"
        if self.prev:
            header += f" from {self.prev}"
        if not self.candidates:
            return header
        header += " at any of the following locations:" if self.prev else " from any of the following locations:"
        return "\n  ".join([header, *self.candidates])


class ConfigurationError(StylepathError):
    """A module was found but declares no stylesheet directory."""

    def __init__(self, module_name: str, metadata_file: str | Path | None = None, main_path: str | Path | None = None):
        self.module_name = module_name
        self.metadata_file = metadata_file
        self.main_path = main_path

        where = Path(metadata_file).name if metadata_file else "package.json"
        message = f"stylesheetDir is not specified in {module_name}'s {where}"
        if main_path:
            message += f" or {main_path}"
        super().__init__(message)


class SecurityViolationError(StylepathError):
    """A sandboxed function tried to touch a path outside the permitted roots."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Security violation: Cannot access {path}")


class TypeMismatchError(StylepathError):
    """A sandboxed function received an argument of the wrong type."""

    def __init__(self, expected: str, actual: str, rendered: str | None = None):
        self.expected = expected
        self.actual = actual
        message = f"Expected {expected}, got {actual}"
        if rendered is not None:
            message += f": {rendered}"
        super().__init__(message)


class UnderlyingIOError(StylepathError):
    """A read or stat failed for a reason other than non-existence."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(str(cause))
