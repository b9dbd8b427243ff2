"""
Untyped resource documents.

Constraint instances arrive as plain dicts whose shape is only known through
the synthesized definition. ``Unstructured`` gives read access to the
identity fields every resource carries.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str


def parse_api_version(api_version: str) -> tuple:
    """Split ``group/version`` into its parts. A bare version has an empty group."""
    if "/" not in api_version:
        return "", api_version
    group, _, version = api_version.partition("/")
    return group, version


class Unstructured:
    """Read-only view over an untyped resource document."""

    def __init__(self, obj: Dict[str, Any]):
        if not isinstance(obj, dict):
            raise TypeError(f"expected a mapping, got {type(obj).__name__}")
        self.object = obj

    @property
    def api_version(self) -> str:
        return _string(self.object.get("apiVersion"))

    @property
    def kind(self) -> str:
        return _string(self.object.get("kind"))

    @property
    def name(self) -> str:
        metadata = self.object.get("metadata")
        if not isinstance(metadata, dict):
            return ""
        return _string(metadata.get("name"))

    def group_version_kind(self) -> GroupVersionKind:
        group, version = parse_api_version(self.api_version)
        return GroupVersionKind(group=group, version=version, kind=self.kind)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.object)


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""
