"""
Structural validation of custom resource definitions.

``validate_custom_resource_definition`` mirrors the checks the platform runs
when a definition is submitted, so a broken definition is caught when its
template is registered instead of when the first instance arrives.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from . import field, naming, v1beta1
from .field import ErrorList, Path
from .types import (
    CustomResourceDefinition,
    CustomResourceDefinitionNames,
    CustomResourceDefinitionSpec,
    CustomResourceDefinitionVersion,
    JSONSchemaProps,
)

SUPPORTED_SCOPES = (v1beta1.CLUSTER_SCOPED, v1beta1.NAMESPACE_SCOPED)
SUPPORTED_CONVERSION_STRATEGIES = (v1beta1.NONE_CONVERTER, v1beta1.WEBHOOK_CONVERTER)

# Only these metadata fields may be constrained by a definition's schema.
_ALLOWED_METADATA_FIELDS = {"name", "generateName"}

_ONE_STORAGE_VERSION = "must have exactly one version marked as storage version"


def validate_custom_resource_definition(
    crd: CustomResourceDefinition, group_version: str = v1beta1.GROUP_VERSION
) -> ErrorList:
    """Return every problem found in ``crd``; an empty list means it is valid."""
    errs = ErrorList()
    spec = crd.spec

    expected_name = f"{spec.names.plural}.{spec.group}"
    if crd.metadata.name != expected_name:
        errs.append(
            field.invalid(
                Path("metadata", "name"),
                crd.metadata.name,
                'must be spec.names.plural+"."+spec.group',
            )
        )

    errs.extend(_validate_spec(spec, Path("spec"), group_version))
    errs.extend(
        _validate_stored_versions(
            crd.status.stored_versions, spec.versions, Path("status", "storedVersions")
        )
    )
    return errs


def _validate_spec(
    spec: CustomResourceDefinitionSpec, path: Path, group_version: str
) -> ErrorList:
    errs = ErrorList()

    if not spec.group:
        errs.append(field.required(path.child("group")))
    elif "." not in spec.group:
        errs.append(
            field.invalid(
                path.child("group"),
                spec.group,
                "should be a domain with at least one dot",
            )
        )
    else:
        for msg in naming.is_dns1123_subdomain(spec.group):
            errs.append(field.invalid(path.child("group"), spec.group, msg))

    if not spec.scope:
        errs.append(field.required(path.child("scope")))
    elif spec.scope not in SUPPORTED_SCOPES:
        errs.append(
            field.not_supported(path.child("scope"), spec.scope, SUPPORTED_SCOPES)
        )

    errs.extend(_validate_versions(spec, path))
    errs.extend(_validate_names(spec.names, path.child("names")))

    if spec.conversion is not None:
        strategy = spec.conversion.strategy
        if strategy not in SUPPORTED_CONVERSION_STRATEGIES:
            errs.append(
                field.not_supported(
                    path.child("conversion", "strategy"),
                    strategy,
                    SUPPORTED_CONVERSION_STRATEGIES,
                )
            )
        elif (
            strategy == v1beta1.WEBHOOK_CONVERTER
            and spec.conversion.webhook_client_config is None
        ):
            errs.append(
                field.required(
                    path.child("conversion", "webhookClientConfig"),
                    "required when strategy is set to Webhook",
                )
            )

    if spec.preserve_unknown_fields and group_version != v1beta1.GROUP_VERSION:
        errs.append(
            field.invalid(
                path.child("preserveUnknownFields"),
                True,
                "cannot be true, use x-kubernetes-preserve-unknown-fields "
                "in the schema instead",
            )
        )

    if spec.validation is not None and spec.validation.open_api_v3_schema is not None:
        schema_path = path.child("validation", "openAPIV3Schema")
        schema = spec.validation.open_api_v3_schema
        preserve = spec.preserve_unknown_fields is not False
        errs.extend(_validate_root_schema(schema, schema_path))
        errs.extend(_validate_schema(schema, schema_path, preserve))
        if not preserve:
            errs.extend(_validate_structural(schema, schema_path, root=True))

    return errs


def _validate_versions(spec: CustomResourceDefinitionSpec, path: Path) -> ErrorList:
    errs = ErrorList()
    versions: List[CustomResourceDefinitionVersion] = spec.versions
    names = [v.name for v in versions]

    if not versions:
        errs.append(field.invalid(path.child("versions"), names, _ONE_STORAGE_VERSION))
        return errs

    seen = set()
    for i, version in enumerate(versions):
        vpath = path.child("versions").index(i)
        for msg in naming.is_dns1035_label(version.name):
            errs.append(field.invalid(vpath.child("name"), version.name, msg))
        if version.name in seen:
            errs.append(
                field.invalid(
                    path.child("versions"), names, "must contain unique version names"
                )
            )
        seen.add(version.name)

    if sum(1 for v in versions if v.storage) != 1:
        errs.append(field.invalid(path.child("versions"), names, _ONE_STORAGE_VERSION))

    if spec.version and spec.version != versions[0].name:
        errs.append(
            field.invalid(
                path.child("version"),
                spec.version,
                "must match the first version in spec.versions",
            )
        )
    return errs


def _validate_names(names: CustomResourceDefinitionNames, path: Path) -> ErrorList:
    errs = ErrorList()

    if not names.plural:
        errs.append(field.required(path.child("plural")))
    for label, value in (("plural", names.plural), ("singular", names.singular)):
        if not value:
            continue
        for msg in naming.is_dns1035_label(value):
            errs.append(field.invalid(path.child(label), value, msg))

    for label, value in (("kind", names.kind), ("listKind", names.list_kind)):
        if not value:
            errs.append(field.required(path.child(label)))
            continue
        for msg in naming.is_dns1035_label(value.lower()):
            errs.append(field.invalid(path.child(label), value, msg))

    if names.kind and names.kind == names.list_kind:
        errs.append(
            field.invalid(
                path.child("listKind"),
                names.list_kind,
                "kind and listKind may not be the same",
            )
        )

    for label, values in (
        ("shortNames", names.short_names),
        ("categories", names.categories),
    ):
        for i, value in enumerate(values or []):
            for msg in naming.is_dns1035_label(value):
                errs.append(field.invalid(path.child(label).index(i), value, msg))
    return errs


def _validate_stored_versions(
    stored_versions: List[str],
    versions: List[CustomResourceDefinitionVersion],
    path: Path,
) -> ErrorList:
    errs = ErrorList()
    if not stored_versions:
        errs.append(
            field.invalid(
                path, stored_versions, "must have at least one stored version"
            )
        )
        return errs

    declared = {v.name for v in versions}
    for i, name in enumerate(stored_versions):
        if name not in declared:
            errs.append(
                field.invalid(path.index(i), name, "must appear in spec.versions")
            )

    storage = next((v.name for v in versions if v.storage), None)
    if storage is not None and storage not in stored_versions:
        errs.append(
            field.invalid(
                path, stored_versions, f"must have the storage version {storage}"
            )
        )
    return errs


def _validate_root_schema(schema: JSONSchemaProps, path: Path) -> ErrorList:
    errs = ErrorList()
    metadata = (schema.properties or {}).get("metadata")
    if metadata is None:
        return errs
    metadata_path = path.child("properties").key("metadata").child("properties")
    for name in sorted(metadata.properties or {}):
        if name not in _ALLOWED_METADATA_FIELDS:
            errs.append(
                field.forbidden(
                    metadata_path.key(name), "only name and generateName may be set"
                )
            )
    return errs


def _validate_schema(
    schema: JSONSchemaProps, path: Path, preserve_unknown: bool
) -> ErrorList:
    """Check one schema node and everything below it."""
    errs = ErrorList()

    if schema.unique_items:
        errs.append(
            field.forbidden(
                path.child("uniqueItems"),
                "uniqueItems cannot be set to true since the runtime complexity "
                "becomes quadratic",
            )
        )
    if schema.ref:
        errs.append(field.forbidden(path.child("$ref"), "$ref is not supported"))
    if schema.id:
        errs.append(field.forbidden(path.child("id"), "id is not supported"))
    if schema.definitions:
        errs.append(
            field.forbidden(path.child("definitions"), "definitions are not supported")
        )
    if schema.type == "null":
        errs.append(
            field.forbidden(
                path.child("type"),
                "type cannot be set to null, use nullable as an alternative",
            )
        )
    if schema.additional_properties is not None and schema.properties:
        errs.append(
            field.forbidden(
                path.child("additionalProperties"),
                "additionalProperties and properties are mutual exclusive",
            )
        )
    if schema.default is not None and preserve_unknown:
        errs.append(
            field.forbidden(
                path.child("default"),
                "must not be set when preserveUnknownFields is true",
            )
        )
    if schema.x_preserve_unknown_fields is False:
        errs.append(
            field.invalid(
                path.child("x-kubernetes-preserve-unknown-fields"),
                False,
                "must be true or undefined",
            )
        )
    if schema.x_int_or_string and schema.type:
        errs.append(
            field.invalid(
                path.child("type"),
                schema.type,
                "must be empty if x-kubernetes-int-or-string is true",
            )
        )
    if _exceeds(schema.min_length, schema.max_length):
        errs.append(
            field.invalid(
                path.child("minLength"), schema.min_length, "must not exceed maxLength"
            )
        )
    if _exceeds(schema.min_items, schema.max_items):
        errs.append(
            field.invalid(
                path.child("minItems"), schema.min_items, "must not exceed maxItems"
            )
        )

    for child_path, child in _children(schema, path):
        errs.extend(_validate_schema(child, child_path, preserve_unknown))
    return errs


def _validate_structural(
    schema: JSONSchemaProps, path: Path, root: bool = False
) -> ErrorList:
    errs = ErrorList()
    if root and schema.type != "object":
        errs.append(
            field.invalid(
                path.child("type"), schema.type or "", 'must be "object" at the root'
            )
        )
    elif not (
        schema.type or schema.x_int_or_string or schema.x_preserve_unknown_fields
    ):
        errs.append(
            field.required(
                path.child("type"), "must not be empty for specified object fields"
            )
        )
    for child_path, child in _value_children(schema, path):
        errs.extend(_validate_structural(child, child_path))
    return errs


def _exceeds(low: Optional[int], high: Optional[int]) -> bool:
    return low is not None and high is not None and low > high


def _value_children(schema: JSONSchemaProps, path: Path):
    for name, child in sorted((schema.properties or {}).items()):
        yield path.child("properties").key(name), child
    if schema.items is not None:
        yield path.child("items"), schema.items
    if isinstance(schema.additional_properties, JSONSchemaProps):
        yield path.child("additionalProperties"), schema.additional_properties


def _children(schema: JSONSchemaProps, path: Path):
    yield from _value_children(schema, path)
    combinators: Dict[str, Optional[List[JSONSchemaProps]]] = {
        "allOf": schema.all_of,
        "anyOf": schema.any_of,
        "oneOf": schema.one_of,
    }
    for label, subschemas in combinators.items():
        for i, child in enumerate(subschemas or []):
            yield path.child(label).index(i), child
    if schema.not_ is not None:
        yield path.child("not"), schema.not_
    for name, child in sorted((schema.pattern_properties or {}).items()):
        yield path.child("patternProperties").key(name), child
