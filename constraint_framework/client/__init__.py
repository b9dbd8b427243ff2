"""
Template compilation and constraint validation.
"""

from .cache import TemplateCache
from .crd_helpers import (
    CONSTRAINT_GROUP,
    SUPPORTED_VERSIONS,
    CRDHelper,
    new_scheme,
    validate_targets,
)
from .errors import (
    ConstraintError,
    ConstraintFrameworkError,
    DefinitionRoundTripError,
    DefinitionValidationError,
    InstanceGroupError,
    InstanceKindError,
    InstanceNameError,
    InstanceSchemaError,
    InstanceVersionError,
    SchemaConversionError,
    TargetCardinalityError,
    TargetNotFoundError,
    TemplateError,
)
from .registration import CompiledTemplate, TemplateCompiler
from .targets import MatchSchemaProvider, StaticMatchSchemaProvider, TargetRegistry

__all__ = [
    "CONSTRAINT_GROUP",
    "CRDHelper",
    "CompiledTemplate",
    "ConstraintError",
    "ConstraintFrameworkError",
    "DefinitionRoundTripError",
    "DefinitionValidationError",
    "InstanceGroupError",
    "InstanceKindError",
    "InstanceNameError",
    "InstanceSchemaError",
    "InstanceVersionError",
    "MatchSchemaProvider",
    "SUPPORTED_VERSIONS",
    "SchemaConversionError",
    "StaticMatchSchemaProvider",
    "TargetCardinalityError",
    "TargetNotFoundError",
    "TargetRegistry",
    "TemplateCache",
    "TemplateCompiler",
    "TemplateError",
    "new_scheme",
    "validate_targets",
]
