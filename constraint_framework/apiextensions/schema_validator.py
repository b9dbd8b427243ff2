"""
Validation of custom resources against a definition's schema.

The instance validator only depends on the ``SchemaValidatorFactory``
protocol; ``JSONSchemaValidatorFactory`` is the default implementation and is
backed by ``jsonschema``. OpenAPI v3 schemas are close to JSON Schema draft 4,
so the internal schema is translated to a draft 4 document first.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, Optional, Protocol

from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError

from . import field
from .field import ErrorList, Path
from .types import CustomResourceValidation, JSONSchemaProps

# Keys that only carry meaning for the platform and are dropped before the
# schema reaches the JSON Schema engine.
_PLATFORM_ONLY_KEYS = (
    "nullable",
    "x-kubernetes-preserve-unknown-fields",
    "x-kubernetes-embedded-resource",
    "x-kubernetes-int-or-string",
    "x-kubernetes-list-type",
    "x-kubernetes-list-map-keys",
    "x-kubernetes-map-type",
    "example",
    "externalDocs",
)

_SCHEMA_MAP_KEYS = ("properties", "patternProperties", "definitions")
_SCHEMA_LIST_KEYS = ("allOf", "anyOf", "oneOf")
_SCHEMA_KEYS = ("items", "not")


class SchemaValidatorBuildError(Exception):
    """Raised when a validator cannot be built from a schema."""


class SchemaValidator(Protocol):
    def iter_errors(self, instance: Any) -> Iterable[Any]:
        ...


class SchemaValidatorFactory(Protocol):
    def build(
        self, validation: Optional[CustomResourceValidation]
    ) -> Optional[SchemaValidator]:
        ...


def to_json_schema(props: JSONSchemaProps) -> Dict[str, Any]:
    """Translate an internal schema to a JSON Schema draft 4 document."""
    return _translate(props.to_document())


def _translate(node: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(node)

    for key in _SCHEMA_MAP_KEYS:
        if key in out:
            out[key] = {name: _translate(child) for name, child in out[key].items()}
    for key in _SCHEMA_LIST_KEYS:
        if key in out:
            out[key] = [_translate(child) for child in out[key]]
    for key in _SCHEMA_KEYS:
        if key in out:
            out[key] = _translate(out[key])
    if isinstance(out.get("additionalProperties"), dict):
        out["additionalProperties"] = _translate(out["additionalProperties"])

    if node.get("x-kubernetes-int-or-string"):
        out.pop("type", None)
        int_or_string = {"anyOf": [{"type": "integer"}, {"type": "string"}]}
        out.setdefault("allOf", []).append(int_or_string)
    if node.get("nullable") and "type" in out:
        out["type"] = [out["type"], "null"]
        if "enum" in out and None not in out["enum"]:
            out["enum"] = out["enum"] + [None]

    for key in _PLATFORM_ONLY_KEYS:
        out.pop(key, None)
    return out


class JSONSchemaValidatorFactory:
    """Builds ``jsonschema`` draft 4 validators for definition schemas."""

    def build(
        self, validation: Optional[CustomResourceValidation]
    ) -> Optional[Draft4Validator]:
        """Return a validator, or None when the definition declares no schema.

        Raises:
            SchemaValidatorBuildError: If the schema is not a valid schema.
        """
        if validation is None or validation.open_api_v3_schema is None:
            return None
        schema = to_json_schema(validation.open_api_v3_schema)
        try:
            Draft4Validator.check_schema(schema)
        except SchemaError as exc:
            raise SchemaValidatorBuildError(f"invalid schema: {exc.message}") from exc
        return Draft4Validator(schema)


def _error_type(error: Any) -> field.ErrorType:
    if error.validator == "required":
        return field.ErrorType.REQUIRED
    if error.validator == "type":
        return field.ErrorType.TYPE_INVALID
    if error.validator == "enum":
        return field.ErrorType.NOT_SUPPORTED
    return field.ErrorType.INVALID


def validate_custom_resource(
    path: Path, obj: Dict[str, Any], validator: Optional[SchemaValidator]
) -> ErrorList:
    """Validate ``obj`` with ``validator`` and return the field errors found.

    Errors are ordered by field path so repeated runs report identically.
    """
    errs = ErrorList()
    if validator is None:
        return errs
    for error in validator.iter_errors(obj):
        error_type = _error_type(error)
        fpath = str(path.extend(error.absolute_path))
        value = None if error_type is field.ErrorType.REQUIRED else error.instance
        errs.append(field.FieldError(error_type, fpath, value, error.message))
    errs.sort(key=lambda e: (e.field, e.detail))
    return errs
