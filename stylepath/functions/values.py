"""Minimal stylesheet value types for the filesystem functions.

The compiler's real value system lives elsewhere; these mirror just enough
of it (strings, numbers, booleans, null, lists, maps, errors) for the
functions to accept arguments and hand results back.
"""

from __future__ import annotations

from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Literal

from ..errors import StylepathError
from ..errors import TypeMismatchError


@dataclass(frozen=True)
class SassString:
    value: str
    quoted: bool = True


@dataclass(frozen=True)
class SassNumber:
    value: float
    unit: str = ""


@dataclass(frozen=True)
class SassBoolean:
    value: bool


@dataclass(frozen=True)
class SassNull:
    pass


@dataclass(frozen=True)
class SassList:
    items: tuple[SassValue, ...] = ()
    separator: Literal["comma", "space"] = "comma"


@dataclass(frozen=True)
class SassMap:
    entries: tuple[tuple[SassValue, SassValue], ...] = ()

    def get(self, key: str) -> SassValue | None:
        for entry_key, value in self.entries:
            if isinstance(entry_key, SassString) and entry_key.value == key:
                return value
        return None


@dataclass(frozen=True)
class SassError:
    """Error value returned to the compiler instead of raising."""

    message: str
    error: StylepathError | None = field(default=None, compare=False)

    @classmethod
    def from_exception(cls, e: Exception) -> SassError:
        return cls(str(e), e if isinstance(e, StylepathError) else None)


SassValue = SassString | SassNumber | SassBoolean | SassNull | SassList | SassMap

TRUE = SassBoolean(True)
FALSE = SassBoolean(False)
NULL = SassNull()


def type_name(value: SassValue | SassError) -> str:
    if isinstance(value, SassNull):
        return "null"
    if isinstance(value, SassString):
        return "string"
    if isinstance(value, SassNumber):
        return "number"
    if isinstance(value, SassMap):
        return "map"
    if isinstance(value, SassList):
        return "list"
    if isinstance(value, SassBoolean):
        return "boolean"
    if isinstance(value, SassError):
        return "error"
    raise TypeError(f"Not a stylesheet value: {value!r}")


def display(value: SassValue) -> str:
    """Render a value the way it appears in error messages."""
    if isinstance(value, SassNumber):
        number = int(value.value) if float(value.value).is_integer() else value.value
        return f"{number}{value.unit}"
    if isinstance(value, SassString):
        return value.value
    if isinstance(value, SassBoolean):
        return "true" if value.value else "false"
    if isinstance(value, SassList):
        sep = ", " if value.separator == "comma" else " "
        return "(" + sep.join(display(item) for item in value.items) + ")"
    if isinstance(value, SassMap):
        return "(" + ", ".join(f"{display(k)}: {display(v)}" for k, v in value.entries) + ")"
    return ""


def require_string(value: SassValue) -> str:
    """Unwrap a string argument.

    Raises:
        TypeMismatchError: ``value`` is not a string
    """
    if not isinstance(value, SassString):
        raise TypeMismatchError("string", type_name(value), display(value))
    return value.value


def to_sass(value: Any) -> SassValue:
    """Cast a Python value into a stylesheet value."""
    if isinstance(value, (SassString, SassNumber, SassBoolean, SassNull, SassList, SassMap)):
        return value
    if value is None:
        return NULL
    if isinstance(value, bool):
        return TRUE if value else FALSE
    if isinstance(value, (int, float)):
        return SassNumber(value)
    if isinstance(value, str):
        return SassString(value)
    if isinstance(value, Mapping):
        return SassMap(tuple((SassString(str(k)), to_sass(v)) for k, v in value.items()))
    if isinstance(value, Sequence):
        return SassList(tuple(to_sass(item) for item in value))
    raise TypeError(f"Cannot convert {type(value).__name__} to a stylesheet value")


def to_python(value: SassValue) -> Any:
    """Cast a stylesheet value into plain Python data."""
    if isinstance(value, SassNull):
        return None
    if isinstance(value, (SassString, SassBoolean)):
        return value.value
    if isinstance(value, SassNumber):
        return value.value
    if isinstance(value, SassList):
        return [to_python(item) for item in value.items]
    if isinstance(value, SassMap):
        return {to_python(k): to_python(v) for k, v in value.entries}
    raise TypeError(f"Not a stylesheet value: {value!r}")
