"""
Constraint definition synthesis and constraint validation.

A ConstraintTemplate is turned into the custom resource definition of a new
constraint kind in three steps:

1. ``create_schema`` joins the target's match schema and the template's
   parameter schema under ``spec``.
2. ``create_crd`` wraps that schema in a definition (names, categories,
   cluster scope, one storage and one legacy version) and round-trips it
   through the v1beta1 form so the version's defaults are applied.
3. ``validate_crd`` runs the platform's structural checks on the result.

``validate_cr`` later checks each constraint instance against the definition:
schema first, then name syntax, kind, group and version, stopping at the
first failure.

None of these methods mutate their inputs, and the helper holds no mutable
state after construction, so one helper may serve concurrent callers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

import structlog

from ..apiextensions import naming, v1beta1
from ..apiextensions.field import Path
from ..apiextensions.schema_validator import (
    JSONSchemaValidatorFactory,
    SchemaValidatorBuildError,
    SchemaValidatorFactory,
    validate_custom_resource,
)
from ..apiextensions.scheme import ConversionError, Scheme
from ..apiextensions.types import (
    CustomResourceDefinition,
    CustomResourceDefinitionNames,
    CustomResourceDefinitionSpec,
    CustomResourceDefinitionVersion,
    CustomResourceValidation,
    JSONSchemaProps,
)
from ..apiextensions.validation import validate_custom_resource_definition
from ..templates import V1ALPHA1, V1BETA1, ConstraintTemplate
from ..unstructured import Unstructured
from .errors import (
    DefinitionRoundTripError,
    DefinitionValidationError,
    InstanceGroupError,
    InstanceKindError,
    InstanceNameError,
    InstanceSchemaError,
    InstanceVersionError,
    SchemaConversionError,
    TargetCardinalityError,
)
from .targets import MatchSchemaProvider

logger = structlog.get_logger()

CONSTRAINT_GROUP = "constraints.gatekeeper.sh"
CONSTRAINT_CATEGORIES = ["all", "constraint"]

# Storage version first, then the legacy version that is still served.
STORAGE_VERSION = V1BETA1
LEGACY_VERSION = V1ALPHA1
SUPPORTED_VERSIONS = frozenset({STORAGE_VERSION, LEGACY_VERSION})


def validate_targets(template: ConstraintTemplate) -> None:
    """Ensure the template declares exactly one target.

    Raises:
        TargetCardinalityError: If targets are missing, empty or more than one.
    """
    targets = template.spec.targets
    if targets is not None and len(targets) > 1:
        raise TargetCardinalityError(
            "Multi-target templates are not currently supported", code="MULTI_TARGET"
        )
    if targets is None:
        raise TargetCardinalityError(
            'Field "targets" not specified in ConstraintTemplate spec',
            code="TARGETS_MISSING",
        )
    if len(targets) == 0:
        raise TargetCardinalityError(
            "No targets specified. ConstraintTemplate must specify one target",
            code="TARGETS_EMPTY",
        )


def new_scheme() -> Scheme:
    """Build the scheme used for definition conversion and defaulting."""
    scheme = Scheme()
    v1beta1.add_to_scheme(scheme)
    return scheme


class CRDHelper:
    """Builds and validates constraint definitions.

    Build one helper, before any concurrent use, and share it.
    """

    def __init__(
        self,
        scheme: Optional[Scheme] = None,
        validator_factory: Optional[SchemaValidatorFactory] = None,
    ):
        self.scheme = scheme or new_scheme()
        self.validator_factory = validator_factory or JSONSchemaValidatorFactory()

    def create_schema(
        self, template: ConstraintTemplate, target: MatchSchemaProvider
    ) -> JSONSchemaProps:
        """Combine the target's match schema with the template's parameters.

        Raises:
            TargetCardinalityError: If the template does not have exactly one target.
            SchemaConversionError: If the parameter schema is malformed.
        """
        validate_targets(template)

        props: Dict[str, JSONSchemaProps] = {
            "match": target.match_schema().deep_copy(),
            "enforcementAction": JSONSchemaProps(type="string"),
        }
        validation = template.spec.crd.spec.validation
        if validation is not None and validation.open_api_v3_schema is not None:
            try:
                props["parameters"] = self.scheme.to_internal(
                    validation.open_api_v3_schema,
                    v1beta1.GROUP_VERSION,
                    v1beta1.SCHEMA_KIND,
                )
            except ConversionError as exc:
                kind = template.spec.crd.spec.names.kind
                raise SchemaConversionError(
                    f"invalid parameter schema for {kind}: {exc}"
                ) from exc

        return JSONSchemaProps(
            type="object",
            properties={"spec": JSONSchemaProps(type="object", properties=props)},
        )

    def create_crd(
        self, template: ConstraintTemplate, schema: JSONSchemaProps
    ) -> CustomResourceDefinition:
        """Wrap ``schema`` in a defaulted constraint definition for ``template``.

        Raises:
            DefinitionRoundTripError: If converting or defaulting the definition fails.
        """
        kind = template.spec.crd.spec.names.kind
        crd = CustomResourceDefinition(
            spec=CustomResourceDefinitionSpec(
                group=CONSTRAINT_GROUP,
                names=CustomResourceDefinitionNames(
                    kind=kind,
                    list_kind=kind + "List",
                    plural=kind.lower(),
                    singular=kind.lower(),
                    categories=list(CONSTRAINT_CATEGORIES),
                ),
                validation=CustomResourceValidation(open_api_v3_schema=schema),
                scope=v1beta1.CLUSTER_SCOPED,
                version=STORAGE_VERSION,
                versions=[
                    CustomResourceDefinitionVersion(
                        name=STORAGE_VERSION, storage=True, served=True
                    ),
                    CustomResourceDefinitionVersion(
                        name=LEGACY_VERSION, storage=False, served=True
                    ),
                ],
            )
        )

        # Defaulting functions only exist for v1beta1.
        try:
            external = self.scheme.to_external(crd, v1beta1.GROUP_VERSION)
            external = self.scheme.default(external)
            defaulted = self.scheme.to_internal(external)
        except ConversionError as exc:
            raise DefinitionRoundTripError(
                f"cannot build definition for {kind}: {exc}"
            ) from exc

        defaulted.metadata.name = f"{crd.spec.names.plural}.{CONSTRAINT_GROUP}"
        logger.debug("Synthesized constraint definition", name=defaulted.metadata.name)
        return defaulted

    def validate_crd(self, crd: CustomResourceDefinition) -> None:
        """Run the platform's definition checks.

        Raises:
            DefinitionValidationError: With every problem found.
        """
        errs = validate_custom_resource_definition(crd, v1beta1.GROUP_VERSION)
        if errs:
            logger.warning(
                "Constraint definition failed validation",
                name=crd.metadata.name,
                error_count=len(errs),
            )
            raise DefinitionValidationError(errs)

    def validate_cr(
        self,
        instance: Union[Unstructured, Dict[str, Any]],
        crd: CustomResourceDefinition,
    ) -> None:
        """Validate a constraint instance against its definition.

        Raises:
            InstanceSchemaError: If the schema is unusable or the instance violates it.
            InstanceNameError: If the name is not a valid subdomain name.
            InstanceKindError: If the kind differs from the definition's.
            InstanceGroupError: If the group is not the constraint group.
            InstanceVersionError: If the version is not supported.
        """
        cr = instance if isinstance(instance, Unstructured) else Unstructured(instance)

        try:
            validator = self.validator_factory.build(crd.spec.validation)
        except SchemaValidatorBuildError as exc:
            raise InstanceSchemaError([str(exc)]) from exc

        errs = validate_custom_resource(Path(), cr.object, validator)
        if errs:
            raise InstanceSchemaError(errs)

        name = cr.name
        name_errs = naming.is_dns1123_subdomain(name)
        if name_errs:
            raise InstanceNameError(
                name, name_errs, naming.invalid_subdomain_characters(name)
            )

        gvk = cr.group_version_kind()
        if gvk.kind != crd.spec.names.kind:
            raise InstanceKindError(name, gvk.kind, crd.spec.names.kind)
        if gvk.group != CONSTRAINT_GROUP:
            raise InstanceGroupError(name, gvk.group, CONSTRAINT_GROUP)
        if gvk.version not in SUPPORTED_VERSIONS:
            raise InstanceVersionError(name, gvk.version, SUPPORTED_VERSIONS)
