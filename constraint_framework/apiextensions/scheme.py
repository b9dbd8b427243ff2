"""
Registry of versioned representations and the functions that move objects
between them.

A Scheme knows, for each (group/version, kind), how to turn an internal model
into a versioned document, how to read that document back, and how to apply
the version's defaults. A Scheme is populated once and is read-only
afterwards, so one instance may be shared by concurrent callers as long as
every registration happens before the first conversion.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel

ExternalDocument = Dict[str, Any]


class ConversionError(Exception):
    """Raised when an object cannot be converted or defaulted."""


@dataclass(frozen=True)
class _KnownType:
    group_version: str
    kind: str
    internal_type: Type[BaseModel]
    to_external: Callable[[Any], ExternalDocument]
    to_internal: Callable[[ExternalDocument], Any]


class Scheme:
    """Conversion and defaulting functions keyed by group/version and kind."""

    def __init__(self) -> None:
        self._by_kind: Dict[Tuple[str, str], _KnownType] = {}
        self._by_type: Dict[Tuple[str, Type[BaseModel]], _KnownType] = {}
        self._defaulters: Dict[
            Tuple[str, str], Callable[[ExternalDocument], ExternalDocument]
        ] = {}

    def add_known_type(
        self,
        group_version: str,
        kind: str,
        internal_type: Type[BaseModel],
        to_external: Callable[[Any], ExternalDocument],
        to_internal: Callable[[ExternalDocument], Any],
    ) -> None:
        known = _KnownType(group_version, kind, internal_type, to_external, to_internal)
        self._by_kind[(group_version, kind)] = known
        self._by_type[(group_version, internal_type)] = known

    def add_defaulting_func(
        self,
        group_version: str,
        kind: str,
        func: Callable[[ExternalDocument], ExternalDocument],
    ) -> None:
        self._defaulters[(group_version, kind)] = func

    def to_external(self, obj: BaseModel, group_version: str) -> ExternalDocument:
        """Convert an internal object to its ``group_version`` document."""
        known = self._by_type.get((group_version, type(obj)))
        if known is None:
            raise ConversionError(
                f"no conversion registered for {type(obj).__name__} to {group_version}"
            )
        try:
            return known.to_external(obj)
        except ValueError as exc:
            raise ConversionError(
                f"converting {known.kind} to {group_version}: {exc}"
            ) from exc

    def to_internal(
        self,
        doc: ExternalDocument,
        group_version: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> Any:
        """Convert a versioned document to its internal object.

        ``group_version`` and ``kind`` default to the document's own
        ``apiVersion`` and ``kind``.
        """
        known = self._lookup(doc, group_version, kind)
        try:
            return known.to_internal(doc)
        except ValueError as exc:
            raise ConversionError(
                f"converting {known.kind} from {known.group_version}: {exc}"
            ) from exc

    def default(
        self,
        doc: ExternalDocument,
        group_version: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> ExternalDocument:
        """Return a new document with the version's defaults applied.

        The input document is left untouched.
        """
        known = self._lookup(doc, group_version, kind)
        defaulter = self._defaulters.get((known.group_version, known.kind))
        if defaulter is None:
            return copy.deepcopy(doc)
        try:
            return defaulter(doc)
        except (ValueError, TypeError, KeyError) as exc:
            raise ConversionError(
                f"defaulting {known.kind} in {known.group_version}: {exc}"
            ) from exc

    def _lookup(
        self,
        doc: ExternalDocument,
        group_version: Optional[str],
        kind: Optional[str],
    ) -> _KnownType:
        if not isinstance(doc, dict):
            raise ConversionError(f"expected a document, got {type(doc).__name__}")
        gv = group_version or doc.get("apiVersion", "")
        k = kind or doc.get("kind", "")
        known = self._by_kind.get((gv, k))
        if known is None:
            raise ConversionError(f'no kind "{k}" is registered for version "{gv}"')
        return known
