"""
Minimal model of the platform's resource-definition machinery.

Provides the internal definition types, the v1beta1 versioned form with its
defaults, the conversion Scheme, structural definition validation and schema
validation of custom resources.
"""

from .field import AggregateError, ErrorList, ErrorType, FieldError, Path
from .scheme import ConversionError, Scheme
from .schema_validator import (
    JSONSchemaValidatorFactory,
    SchemaValidatorBuildError,
    SchemaValidatorFactory,
    validate_custom_resource,
)
from .types import (
    CustomResourceConversion,
    CustomResourceDefinition,
    CustomResourceDefinitionNames,
    CustomResourceDefinitionSpec,
    CustomResourceDefinitionStatus,
    CustomResourceDefinitionVersion,
    CustomResourceValidation,
    JSONSchemaProps,
    ObjectMeta,
)
from .validation import validate_custom_resource_definition

__all__ = [
    "AggregateError",
    "ConversionError",
    "CustomResourceConversion",
    "CustomResourceDefinition",
    "CustomResourceDefinitionNames",
    "CustomResourceDefinitionSpec",
    "CustomResourceDefinitionStatus",
    "CustomResourceDefinitionVersion",
    "CustomResourceValidation",
    "ErrorList",
    "ErrorType",
    "FieldError",
    "JSONSchemaProps",
    "JSONSchemaValidatorFactory",
    "ObjectMeta",
    "Path",
    "Scheme",
    "SchemaValidatorBuildError",
    "SchemaValidatorFactory",
    "validate_custom_resource",
    "validate_custom_resource_definition",
]
