"""Test configuration and fixtures."""

import copy
from typing import Any, Dict, Optional

import pytest

from constraint_framework.client import (
    CRDHelper,
    StaticMatchSchemaProvider,
    TargetRegistry,
    TemplateCompiler,
)
from constraint_framework.templates import ConstraintTemplate

TARGET_NAME = "admission.k8s.gatekeeper.sh"

MATCH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "kinds": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "apiGroups": {"type": "array", "items": {"type": "string"}},
                    "kinds": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
        "namespaces": {"type": "array", "items": {"type": "string"}},
        "labelSelector": {"type": "object"},
    },
}

PARAMETERS_SCHEMA: Dict[str, Any] = {
    "properties": {
        "labels": {"type": "array", "items": {"type": "string"}},
    },
}

_NO_SCHEMA = object()


def make_template(
    kind: str = "K8sRequiredLabels",
    targets: Any = None,
    parameters: Any = _NO_SCHEMA,
    name: Optional[str] = None,
) -> ConstraintTemplate:
    """Create a valid template with optional overrides.

    ``parameters=None`` produces a template that declares no parameter schema.
    """
    if targets is None:
        targets = {TARGET_NAME: {"rego": "package k8srequiredlabels"}}
    if parameters is _NO_SCHEMA:
        parameters = PARAMETERS_SCHEMA
    crd_spec: Dict[str, Any] = {"names": {"kind": kind}}
    if parameters is not None:
        crd_spec["validation"] = {"openAPIV3Schema": copy.deepcopy(parameters)}
    return ConstraintTemplate.from_document(
        {
            "apiVersion": "templates.gatekeeper.sh/v1beta1",
            "kind": "ConstraintTemplate",
            "metadata": {"name": name or kind.lower()},
            "spec": {"crd": {"spec": crd_spec}, "targets": targets},
        }
    )


def make_constraint(**overrides) -> Dict[str, Any]:
    """Create a constraint instance that is valid for make_template()."""
    constraint = {
        "apiVersion": "constraints.gatekeeper.sh/v1beta1",
        "kind": "K8sRequiredLabels",
        "metadata": {"name": "ns-must-have-gk"},
        "spec": {
            "match": {"kinds": [{"apiGroups": [""], "kinds": ["Namespace"]}]},
            "parameters": {"labels": ["gatekeeper"]},
        },
    }
    constraint.update(overrides)
    return constraint


@pytest.fixture
def helper() -> CRDHelper:
    return CRDHelper()


@pytest.fixture
def provider() -> StaticMatchSchemaProvider:
    return StaticMatchSchemaProvider(TARGET_NAME, MATCH_SCHEMA)


@pytest.fixture
def registry(provider) -> TargetRegistry:
    targets = TargetRegistry()
    targets.register(provider)
    return targets


@pytest.fixture
def compiler(registry, helper) -> TemplateCompiler:
    return TemplateCompiler(registry, helper)


@pytest.fixture
def template() -> ConstraintTemplate:
    return make_template()


@pytest.fixture
def crd(helper, provider, template):
    schema = helper.create_schema(template, provider)
    return helper.create_crd(template, schema)
