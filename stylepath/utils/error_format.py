"""Error message formatting for CLI output.

Ensures exceptions always have a useful display message, even when their
str() representation is empty.
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup

from ..errors import ConfigurationError
from ..errors import NotFoundError
from ..errors import ParseError
from ..errors import SecurityViolationError
from ..errors import TypeMismatchError
from ..errors import UnderlyingIOError

# Short labels for the resolution error taxonomy
ERROR_LABELS: dict[type, str] = {
    ParseError: "Invalid import",
    NotFoundError: "Import not found",
    ConfigurationError: "Module misconfigured",
    SecurityViolationError: "Access denied",
    TypeMismatchError: "Wrong argument type",
    UnderlyingIOError: "Read failed",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a non-empty display message.

    Examples:
        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'

        >>> format_error_message(ValueError("invalid input"), include_type=False)
        'invalid input'

        >>> format_error_message(KeyError())
        'KeyError: (no additional details)'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    return f"{error_type}: (no additional details)"


def error_label(e: BaseException) -> str:
    for exc_type, label in ERROR_LABELS.items():
        if isinstance(e, exc_type):
            return label
    return "Error"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))
