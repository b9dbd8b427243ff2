"""
Shared cache of compiled templates.

Filled by whatever watches template resources and read by many concurrent
validation calls. Templates go in and come out as deep copies, so no caller
can change what another caller sees.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from ..templates import ConstraintTemplate
from .registration import CompiledTemplate


class TemplateCache:
    """Thread-safe map from template name to its compiled form."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: Dict[str, CompiledTemplate] = {}
        self._names_by_kind: Dict[str, str] = {}

    def put(self, compiled: CompiledTemplate) -> None:
        entry = CompiledTemplate(
            template=compiled.template.deep_copy(),
            target=compiled.target,
            crd=compiled.crd.deep_copy(),
        )
        with self._lock:
            previous = self._entries.get(entry.name)
            if previous is not None:
                self._names_by_kind.pop(previous.kind, None)
            self._entries[entry.name] = entry
            self._names_by_kind[entry.kind] = entry.name

    def get(self, name: str) -> Optional[CompiledTemplate]:
        """Return the compiled template, with a private copy of the template."""
        with self._lock:
            entry = self._entries.get(name)
        if entry is None:
            return None
        return CompiledTemplate(
            template=entry.template.deep_copy(), target=entry.target, crd=entry.crd
        )

    def get_template(self, name: str) -> Optional[ConstraintTemplate]:
        entry = self.get(name)
        return entry.template if entry is not None else None

    def get_by_kind(self, kind: str) -> Optional[CompiledTemplate]:
        with self._lock:
            name = self._names_by_kind.get(kind)
        return self.get(name) if name is not None else None

    def remove(self, name: str) -> bool:
        with self._lock:
            entry = self._entries.pop(name, None)
            if entry is None:
                return False
            if self._names_by_kind.get(entry.kind) == name:
                del self._names_by_kind[entry.kind]
            return True

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
