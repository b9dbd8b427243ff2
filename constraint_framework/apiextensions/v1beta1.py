"""
The ``apiextensions.k8s.io/v1beta1`` representation.

Versioned objects are plain camelCase documents. This module converts the
internal models to and from that form and carries the version's defaulting
rules, which only exist for v1beta1.
"""

from __future__ import annotations

import copy
from typing import Any, Dict

from .scheme import ExternalDocument, Scheme
from .types import CustomResourceDefinition, JSONSchemaProps

GROUP = "apiextensions.k8s.io"
VERSION = "v1beta1"
GROUP_VERSION = f"{GROUP}/{VERSION}"

CRD_KIND = "CustomResourceDefinition"
SCHEMA_KIND = "JSONSchemaProps"

CLUSTER_SCOPED = "Cluster"
NAMESPACE_SCOPED = "Namespaced"

NONE_CONVERTER = "None"
WEBHOOK_CONVERTER = "Webhook"

DEFAULT_WEBHOOK_PORT = 443


def crd_to_external(crd: CustomResourceDefinition) -> ExternalDocument:
    doc = crd.model_dump(by_alias=True, exclude_none=True)
    return {"apiVersion": GROUP_VERSION, "kind": CRD_KIND, **doc}


def crd_to_internal(doc: ExternalDocument) -> CustomResourceDefinition:
    body = {k: v for k, v in doc.items() if k not in ("apiVersion", "kind")}
    return CustomResourceDefinition.model_validate(copy.deepcopy(body))


def schema_to_external(props: JSONSchemaProps) -> ExternalDocument:
    return props.to_document()


def schema_to_internal(doc: ExternalDocument) -> JSONSchemaProps:
    return JSONSchemaProps.model_validate(copy.deepcopy(doc))


def set_defaults_crd(doc: ExternalDocument) -> ExternalDocument:
    """Apply v1beta1 CustomResourceDefinition defaults to a copy of ``doc``."""
    out = copy.deepcopy(doc)
    spec = out.setdefault("spec", {})
    _set_defaults_spec(spec)

    status = out.setdefault("status", {})
    if not status.get("storedVersions"):
        for version in spec.get("versions") or []:
            if version.get("storage"):
                status["storedVersions"] = [version["name"]]
                break
    return out


def _set_defaults_spec(spec: Dict[str, Any]) -> None:
    if not spec.get("scope"):
        spec["scope"] = NAMESPACE_SCOPED
    if not spec.get("versions") and spec.get("version"):
        spec["versions"] = [{"name": spec["version"], "storage": True, "served": True}]
    versions = spec.get("versions") or []
    if len(versions) == 1:
        versions[0]["storage"] = True
    if not spec.get("version") and versions:
        spec["version"] = versions[0]["name"]

    if spec.get("conversion") is None:
        spec["conversion"] = {"strategy": NONE_CONVERTER}
    conversion = spec["conversion"]
    if conversion.get("strategy") == WEBHOOK_CONVERTER and not conversion.get(
        "conversionReviewVersions"
    ):
        conversion["conversionReviewVersions"] = [VERSION]
    service = (conversion.get("webhookClientConfig") or {}).get("service")
    if service is not None and service.get("port") is None:
        service["port"] = DEFAULT_WEBHOOK_PORT

    if spec.get("preserveUnknownFields") is None:
        spec["preserveUnknownFields"] = True


def add_to_scheme(scheme: Scheme) -> None:
    """Register the v1beta1 kinds, conversions and defaults with ``scheme``."""
    scheme.add_known_type(
        GROUP_VERSION,
        CRD_KIND,
        CustomResourceDefinition,
        crd_to_external,
        crd_to_internal,
    )
    scheme.add_known_type(
        GROUP_VERSION,
        SCHEMA_KIND,
        JSONSchemaProps,
        schema_to_external,
        schema_to_internal,
    )
    scheme.add_defaulting_func(GROUP_VERSION, CRD_KIND, set_defaults_crd)
