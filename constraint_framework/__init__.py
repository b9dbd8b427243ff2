"""
Constraint Framework

Compiles ConstraintTemplates into constraint resource definitions and
validates constraint instances against them.
"""

import importlib.metadata

__version__ = importlib.metadata.version("constraint-framework")

from .client import (
    CRDHelper,
    CompiledTemplate,
    ConstraintError,
    ConstraintFrameworkError,
    StaticMatchSchemaProvider,
    TargetRegistry,
    TemplateCache,
    TemplateCompiler,
    TemplateError,
)
from .templates import ConstraintTemplate
from .unstructured import Unstructured

__all__ = [
    "CRDHelper",
    "CompiledTemplate",
    "ConstraintError",
    "ConstraintFrameworkError",
    "ConstraintTemplate",
    "StaticMatchSchemaProvider",
    "TargetRegistry",
    "TemplateCache",
    "TemplateCompiler",
    "TemplateError",
    "Unstructured",
]
