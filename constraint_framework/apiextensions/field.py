"""
Field-level validation errors.

Validators report problems as a list of FieldError values, each tied to the
path of the offending field. Callers never loop over partial results: an
ErrorList is collapsed into a single AggregateError before it is raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple, Union


class ErrorType(str, Enum):
    """Classes of field error, named the way the platform reports them."""

    REQUIRED = "Required value"
    INVALID = "Invalid value"
    NOT_SUPPORTED = "Unsupported value"
    FORBIDDEN = "Forbidden"
    TYPE_INVALID = "Invalid type"


# Error types that echo the offending value in their message.
_VALUE_TYPES = {
    ErrorType.INVALID,
    ErrorType.NOT_SUPPORTED,
    ErrorType.TYPE_INVALID,
}


class Path:
    """Path to a field inside a document, e.g. ``spec.versions[1].name``."""

    def __init__(self, *segments: Union[str, int]):
        self._segments: Tuple[Union[str, int], ...] = tuple(segments)

    def child(self, name: str, *more: str) -> "Path":
        return Path(*self._segments, name, *more)

    def index(self, i: int) -> "Path":
        return Path(*self._segments, i)

    def key(self, k: str) -> "Path":
        return Path(*self._segments, f"[{k}]")

    def extend(self, segments: Iterable[Union[str, int]]) -> "Path":
        return Path(*self._segments, *segments)

    def __str__(self) -> str:
        out = ""
        for segment in self._segments:
            if isinstance(segment, int):
                out += f"[{segment}]"
            elif segment.startswith("["):
                out += segment
            elif segment:
                out += f".{segment}" if out else segment
        return out

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Path) and str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return repr(value)


@dataclass(frozen=True)
class FieldError:
    """A single problem with a single field."""

    type: ErrorType
    field: str
    value: Any = None
    detail: str = ""

    def error_body(self) -> str:
        body = self.type.value
        if self.type in _VALUE_TYPES:
            body = f"{body}: {_format_value(self.value)}"
        if self.detail:
            body = f"{body}: {self.detail}"
        return body

    def __str__(self) -> str:
        return f"{self.field}: {self.error_body()}"


def required(path: Path, detail: str = "") -> FieldError:
    return FieldError(ErrorType.REQUIRED, str(path), None, detail)


def invalid(path: Path, value: Any, detail: str) -> FieldError:
    return FieldError(ErrorType.INVALID, str(path), value, detail)


def forbidden(path: Path, detail: str) -> FieldError:
    return FieldError(ErrorType.FORBIDDEN, str(path), None, detail)


def not_supported(path: Path, value: Any, valid_values: Iterable[str]) -> FieldError:
    quoted = ", ".join(f'"{v}"' for v in valid_values)
    detail = f"supported values: {quoted}" if quoted else ""
    return FieldError(ErrorType.NOT_SUPPORTED, str(path), value, detail)


class AggregateError(Exception):
    """Several errors reported as one.

    The message is the sole error's text when there is exactly one,
    otherwise ``[first, second, ...]``.
    """

    def __init__(self, errors: List[Any]):
        self.errors = list(errors)
        super().__init__(self._message())

    def _message(self) -> str:
        if len(self.errors) == 1:
            return str(self.errors[0])
        return "[" + ", ".join(str(e) for e in self.errors) + "]"


class ErrorList(list):
    """List of FieldError values with platform-style aggregation."""

    def to_aggregate(self) -> Optional[AggregateError]:
        if not self:
            return None
        seen = set()
        unique = []
        for err in self:
            text = str(err)
            if text in seen:
                continue
            seen.add(text)
            unique.append(err)
        return AggregateError(unique)
