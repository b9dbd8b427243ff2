"""
Object metadata shared by template resources.
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ObjectMeta(BaseModel):
    """Identity and bookkeeping metadata attached to every resource."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field("", description="Resource name, unique per kind")
    namespace: Optional[str] = Field(
        None, description="Namespace, absent for cluster-scoped resources"
    )
    uid: Optional[str] = Field(None, description="Platform-assigned unique id")
    resource_version: Optional[str] = Field(
        None,
        alias="resourceVersion",
        description="Opaque version for optimistic concurrency",
    )
    generation: Optional[int] = Field(
        None, description="Sequence number of spec changes"
    )
    labels: Optional[Dict[str, str]] = Field(
        None, description="Selectable key/value labels"
    )
    annotations: Optional[Dict[str, str]] = Field(
        None, description="Non-identifying key/value metadata"
    )

    def deep_copy(self) -> "ObjectMeta":
        return ObjectMeta(
            name=self.name,
            namespace=self.namespace,
            uid=self.uid,
            resource_version=self.resource_version,
            generation=self.generation,
            labels=_copy_map(self.labels),
            annotations=_copy_map(self.annotations),
        )


def _copy_map(values: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
    return dict(values) if values is not None else None
