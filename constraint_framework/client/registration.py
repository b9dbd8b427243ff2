"""
Template registration.

``TemplateCompiler`` runs the whole definition pipeline for a template at
registration time and keeps what later constraint validation needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import structlog

from ..apiextensions.types import CustomResourceDefinition
from ..templates import ConstraintTemplate
from ..unstructured import Unstructured
from .crd_helpers import CRDHelper, validate_targets
from .errors import ConstraintFrameworkError
from .targets import TargetRegistry

logger = structlog.get_logger()


@dataclass(frozen=True)
class CompiledTemplate:
    """A registered template together with its synthesized definition.

    ``template`` is the compiler's own copy; ``crd`` is never mutated after
    synthesis.
    """

    template: ConstraintTemplate
    target: str
    crd: CustomResourceDefinition

    @property
    def kind(self) -> str:
        return self.crd.spec.names.kind

    @property
    def name(self) -> str:
        return self.template.metadata.name


class TemplateCompiler:
    """Compiles templates into constraint definitions and validates constraints."""

    def __init__(self, targets: TargetRegistry, helper: Optional[CRDHelper] = None):
        self.targets = targets
        self.helper = helper or CRDHelper()

    def compile(self, template: ConstraintTemplate) -> CompiledTemplate:
        """Synthesize and validate the constraint definition for ``template``.

        The caller's template is copied first and never modified.

        Raises:
            TargetCardinalityError: If the template does not have exactly one target.
            TargetNotFoundError: If its target has no registered provider.
            SchemaConversionError: If its parameter schema is malformed.
            DefinitionRoundTripError: If defaulting the definition fails.
            DefinitionValidationError: If the definition fails validation.
        """
        templ = template.deep_copy()
        log = logger.bind(
            template=templ.metadata.name, kind=templ.spec.crd.spec.names.kind
        )

        try:
            validate_targets(templ)
            target_name = next(iter(templ.spec.targets))
            provider = self.targets.get(target_name)
            schema = self.helper.create_schema(templ, provider)
            crd = self.helper.create_crd(templ, schema)
            self.helper.validate_crd(crd)
        except ConstraintFrameworkError as exc:
            log.warning("Template rejected", code=exc.code, reason=exc.message)
            raise

        log.info("Template compiled", crd=crd.metadata.name, target=target_name)
        return CompiledTemplate(template=templ, target=target_name, crd=crd)

    def validate_constraint(
        self,
        compiled: CompiledTemplate,
        constraint: Union[Unstructured, Dict[str, Any]],
    ) -> None:
        """Validate a constraint instance against a compiled template.

        Raises:
            ConstraintError: The first problem found, see ``CRDHelper.validate_cr``.
        """
        if not isinstance(constraint, Unstructured):
            constraint = Unstructured(constraint)
        try:
            self.helper.validate_cr(constraint, compiled.crd)
        except ConstraintFrameworkError as exc:
            logger.info(
                "Constraint rejected",
                kind=compiled.kind,
                constraint=constraint.name,
                code=exc.code,
            )
            raise
