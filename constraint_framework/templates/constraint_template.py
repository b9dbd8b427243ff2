"""
ConstraintTemplate resource model.

A ConstraintTemplate declares a new constraint kind: its names, an optional
OpenAPI schema for the kind's parameters, and the single target the kind's
policy applies to.

Invariants:
- Templates held in a shared cache are never mutated. A consumer that needs
  to adapt one works on ``deep_copy()``, which shares no mutable state with
  the original.
- Absent optional fields stay absent through a copy (``None`` copies to
  ``None``, never to an empty instance).
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .meta import ObjectMeta

GROUP = "templates.gatekeeper.sh"
V1ALPHA1 = "v1alpha1"
V1BETA1 = "v1beta1"


class _TemplateModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class CRDNames(_TemplateModel):
    """Names of the constraint kind minted by a template."""

    kind: str = Field("", description="Kind of the generated constraint resource")

    def deep_copy(self) -> "CRDNames":
        return CRDNames(kind=self.kind)


class Validation(_TemplateModel):
    """Author-supplied OpenAPI v3 schema for the constraint's parameters."""

    open_api_v3_schema: Optional[Dict[str, Any]] = Field(
        None, alias="openAPIV3Schema", description="Parameter schema document"
    )

    def deep_copy(self) -> "Validation":
        schema = self.open_api_v3_schema
        return Validation(
            open_api_v3_schema=copy.deepcopy(schema) if schema is not None else None
        )


class CRDSpec(_TemplateModel):
    names: CRDNames = Field(default_factory=CRDNames)
    validation: Optional[Validation] = Field(
        None, description="Parameter schema; absent when the kind takes no parameters"
    )

    def deep_copy(self) -> "CRDSpec":
        return CRDSpec(
            names=self.names.deep_copy(),
            validation=(
                self.validation.deep_copy() if self.validation is not None else None
            ),
        )


class CRD(_TemplateModel):
    spec: CRDSpec = Field(default_factory=CRDSpec)

    def deep_copy(self) -> "CRD":
        return CRD(spec=self.spec.deep_copy())


class Target(_TemplateModel):
    """Policy source for one target.

    The target's match schema is not part of the template; it is looked up
    by target name when the constraint definition is synthesized.
    """

    rego: str = Field("", description="Policy source evaluated for this target")

    def deep_copy(self) -> "Target":
        return Target(rego=self.rego)


class ConstraintTemplateSpec(_TemplateModel):
    crd: CRD = Field(default_factory=CRD)
    targets: Optional[Dict[str, Target]] = Field(
        None, description="Targets keyed by target name"
    )

    def deep_copy(self) -> "ConstraintTemplateSpec":
        targets = None
        if self.targets is not None:
            targets = {name: t.deep_copy() for name, t in self.targets.items()}
        return ConstraintTemplateSpec(crd=self.crd.deep_copy(), targets=targets)


class ConstraintTemplateStatus(_TemplateModel):
    """Platform bookkeeping. Opaque to the definition pipeline."""

    created: bool = False
    errors: Optional[List[Dict[str, Any]]] = None

    def deep_copy(self) -> "ConstraintTemplateStatus":
        errors = copy.deepcopy(self.errors) if self.errors is not None else None
        return ConstraintTemplateStatus(created=self.created, errors=errors)


class ConstraintTemplate(_TemplateModel):
    """A template that mints a constraint kind once registered."""

    api_version: str = Field(f"{GROUP}/{V1BETA1}", alias="apiVersion")
    kind: Literal["ConstraintTemplate"] = "ConstraintTemplate"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: ConstraintTemplateSpec = Field(default_factory=ConstraintTemplateSpec)
    status: ConstraintTemplateStatus = Field(default_factory=ConstraintTemplateStatus)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ConstraintTemplate":
        """Parse a template from its wire document.

        Raises:
            pydantic.ValidationError: If the document does not describe a template.
        """
        return cls.model_validate(copy.deepcopy(doc))

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def deep_copy(self) -> "ConstraintTemplate":
        return ConstraintTemplate(
            api_version=self.api_version,
            kind=self.kind,
            metadata=self.metadata.deep_copy(),
            spec=self.spec.deep_copy(),
            status=self.status.deep_copy(),
        )


class ConstraintTemplateList(_TemplateModel):
    api_version: str = Field(f"{GROUP}/{V1BETA1}", alias="apiVersion")
    kind: Literal["ConstraintTemplateList"] = "ConstraintTemplateList"
    items: Optional[List[ConstraintTemplate]] = None

    def deep_copy(self) -> "ConstraintTemplateList":
        items = None
        if self.items is not None:
            items = [item.deep_copy() for item in self.items]
        return ConstraintTemplateList(
            api_version=self.api_version, kind=self.kind, items=items
        )
