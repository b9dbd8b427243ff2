"""
ConstraintTemplate data model.

- ConstraintTemplate: declares a constraint kind (names, parameter schema, target)
- ConstraintTemplateSpec / CRD / CRDSpec / CRDNames / Validation / Target: nested spec
- ConstraintTemplateStatus: platform bookkeeping
- ConstraintTemplateList: list envelope

Every entity provides ``deep_copy()``; see constraint_template.py for the
copy invariants.
"""

from .constraint_template import (
    CRD,
    GROUP,
    V1ALPHA1,
    V1BETA1,
    ConstraintTemplate,
    ConstraintTemplateList,
    ConstraintTemplateSpec,
    ConstraintTemplateStatus,
    CRDNames,
    CRDSpec,
    Target,
    Validation,
)
from .meta import ObjectMeta

__all__ = [
    "CRD",
    "CRDNames",
    "CRDSpec",
    "ConstraintTemplate",
    "ConstraintTemplateList",
    "ConstraintTemplateSpec",
    "ConstraintTemplateStatus",
    "GROUP",
    "ObjectMeta",
    "Target",
    "V1ALPHA1",
    "V1BETA1",
    "Validation",
]
