"""
Errors raised while compiling templates and validating constraints.

Every error carries a stable ``code`` for programmatic handling and a
human-readable ``message``. Errors that collect several field problems keep
them on ``errors`` and render them as one aggregated message.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..apiextensions.field import ErrorList


class ConstraintFrameworkError(Exception):
    """
    Base class for template and constraint errors.

    Attributes:
        code: Stable error code for programmatic handling
        message: Human-readable error description
    """

    code: str = "CONSTRAINT_FRAMEWORK_ERROR"
    category: str = "constraint_framework_error"

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code or type(self).code
        self.message = message
        super().__init__(f"{self.code}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "error": self.category,
            "code": self.code,
            "message": self.message,
        }


class TemplateError(ConstraintFrameworkError):
    """The template cannot be turned into a constraint definition."""

    category = "template_rejected"


class TargetCardinalityError(TemplateError):
    code = "MULTI_TARGET"


class TargetNotFoundError(TemplateError):
    code = "TARGET_NOT_FOUND"

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"target {target} not found")


class SchemaConversionError(TemplateError):
    code = "SCHEMA_CONVERSION_FAILED"


class DefinitionRoundTripError(TemplateError):
    code = "DEFINITION_ROUND_TRIP_FAILED"


class DefinitionValidationError(TemplateError):
    code = "INVALID_DEFINITION"

    def __init__(self, errors: Sequence[Any]):
        self.errors = list(errors)
        super().__init__(_aggregate(self.errors))


class ConstraintError(ConstraintFrameworkError):
    """A constraint instance does not match its definition."""

    category = "constraint_rejected"


class InstanceSchemaError(ConstraintError):
    code = "SCHEMA_VIOLATION"

    def __init__(self, errors: Sequence[Any], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or _aggregate(self.errors))


class InstanceNameError(ConstraintError):
    code = "INVALID_NAME"

    def __init__(self, name: str, errors: List[str], invalid_characters: List[str]):
        self.name = name
        self.errors = list(errors)
        self.invalid_characters = list(invalid_characters)
        message = f"Invalid Name {name!r}: " + "\n".join(self.errors)
        if self.invalid_characters:
            chars = ", ".join(repr(c) for c in self.invalid_characters)
            message += f"\ninvalid characters: {chars}"
        super().__init__(message)


class InstanceKindError(ConstraintError):
    code = "WRONG_KIND"

    def __init__(self, name: str, actual: str, expected: str):
        self.name = name
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"Wrong kind for constraint {name}. Have {actual}, want {expected}"
        )


class InstanceGroupError(ConstraintError):
    code = "WRONG_GROUP"

    def __init__(self, name: str, actual: str, expected: str):
        self.name = name
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"Wrong group for constraint {name}. Have {actual}, want {expected}"
        )


class InstanceVersionError(ConstraintError):
    code = "WRONG_VERSION"

    def __init__(self, name: str, version: str, supported: Sequence[str]):
        self.name = name
        self.version = version
        self.supported = sorted(supported)
        super().__init__(
            f"Wrong version for constraint {name}. Have {version}, "
            f"supported: {', '.join(self.supported)}"
        )


def _aggregate(errors: Sequence[Any]) -> str:
    aggregate = ErrorList(errors).to_aggregate()
    return str(aggregate) if aggregate is not None else ""
