"""
Internal representation of custom resource definitions.

These models are the version-independent form the rest of the pipeline works
with. Field aliases carry the camelCase wire names so the same model can be
loaded from, and dumped to, a versioned document.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def deep_copy(self):
        """Return a copy sharing no mutable state with this object."""
        return self.model_copy(deep=True)


class ExternalDocumentation(_APIModel):
    description: Optional[str] = None
    url: Optional[str] = None


class JSONSchemaProps(_APIModel):
    """OpenAPI v3 schema node as accepted in a resource definition.

    Unknown keys are dropped on load; only a value of the wrong type for a
    known key makes a schema malformed.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    schema_uri: Optional[str] = Field(None, alias="$schema")
    ref: Optional[str] = Field(None, alias="$ref")
    description: Optional[str] = None
    type: Optional[str] = None
    format: Optional[str] = None
    title: Optional[str] = None
    default: Optional[Any] = None
    maximum: Optional[float] = None
    exclusive_maximum: Optional[bool] = Field(None, alias="exclusiveMaximum")
    minimum: Optional[float] = None
    exclusive_minimum: Optional[bool] = Field(None, alias="exclusiveMinimum")
    max_length: Optional[int] = Field(None, alias="maxLength")
    min_length: Optional[int] = Field(None, alias="minLength")
    pattern: Optional[str] = None
    max_items: Optional[int] = Field(None, alias="maxItems")
    min_items: Optional[int] = Field(None, alias="minItems")
    unique_items: Optional[bool] = Field(None, alias="uniqueItems")
    multiple_of: Optional[float] = Field(None, alias="multipleOf")
    enum: Optional[List[Any]] = None
    max_properties: Optional[int] = Field(None, alias="maxProperties")
    min_properties: Optional[int] = Field(None, alias="minProperties")
    required: Optional[List[str]] = None
    items: Optional["JSONSchemaProps"] = None
    all_of: Optional[List["JSONSchemaProps"]] = Field(None, alias="allOf")
    one_of: Optional[List["JSONSchemaProps"]] = Field(None, alias="oneOf")
    any_of: Optional[List["JSONSchemaProps"]] = Field(None, alias="anyOf")
    not_: Optional["JSONSchemaProps"] = Field(None, alias="not")
    properties: Optional[Dict[str, "JSONSchemaProps"]] = None
    additional_properties: Optional[Union[bool, "JSONSchemaProps"]] = Field(
        None, alias="additionalProperties"
    )
    pattern_properties: Optional[Dict[str, "JSONSchemaProps"]] = Field(
        None, alias="patternProperties"
    )
    definitions: Optional[Dict[str, "JSONSchemaProps"]] = None
    external_docs: Optional[ExternalDocumentation] = Field(None, alias="externalDocs")
    example: Optional[Any] = None
    nullable: Optional[bool] = None
    x_preserve_unknown_fields: Optional[bool] = Field(
        None, alias="x-kubernetes-preserve-unknown-fields"
    )
    x_embedded_resource: Optional[bool] = Field(
        None, alias="x-kubernetes-embedded-resource"
    )
    x_int_or_string: Optional[bool] = Field(None, alias="x-kubernetes-int-or-string")
    x_list_type: Optional[str] = Field(None, alias="x-kubernetes-list-type")
    x_list_map_keys: Optional[List[str]] = Field(
        None, alias="x-kubernetes-list-map-keys"
    )
    x_map_type: Optional[str] = Field(None, alias="x-kubernetes-map-type")

    def to_document(self) -> Dict[str, Any]:
        """Dump to a plain OpenAPI document, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CustomResourceDefinitionNames(_APIModel):
    plural: str = ""
    singular: str = ""
    short_names: Optional[List[str]] = Field(None, alias="shortNames")
    kind: str = ""
    list_kind: str = Field("", alias="listKind")
    categories: Optional[List[str]] = None


class CustomResourceValidation(_APIModel):
    open_api_v3_schema: Optional[JSONSchemaProps] = Field(
        None, alias="openAPIV3Schema"
    )


class CustomResourceDefinitionVersion(_APIModel):
    name: str
    served: bool = False
    storage: bool = False


class ServiceReference(_APIModel):
    namespace: str
    name: str
    path: Optional[str] = None
    port: Optional[int] = None


class WebhookClientConfig(_APIModel):
    url: Optional[str] = None
    service: Optional[ServiceReference] = None
    ca_bundle: Optional[str] = Field(None, alias="caBundle")


class CustomResourceConversion(_APIModel):
    strategy: str = ""
    webhook_client_config: Optional[WebhookClientConfig] = Field(
        None, alias="webhookClientConfig"
    )
    conversion_review_versions: Optional[List[str]] = Field(
        None, alias="conversionReviewVersions"
    )


class CustomResourceDefinitionSpec(_APIModel):
    group: str = ""
    version: str = ""
    names: CustomResourceDefinitionNames = Field(
        default_factory=CustomResourceDefinitionNames
    )
    scope: str = ""
    validation: Optional[CustomResourceValidation] = None
    versions: List[CustomResourceDefinitionVersion] = Field(default_factory=list)
    conversion: Optional[CustomResourceConversion] = None
    preserve_unknown_fields: Optional[bool] = Field(None, alias="preserveUnknownFields")


class CustomResourceDefinitionStatus(_APIModel):
    accepted_names: CustomResourceDefinitionNames = Field(
        default_factory=CustomResourceDefinitionNames, alias="acceptedNames"
    )
    stored_versions: List[str] = Field(default_factory=list, alias="storedVersions")


class ObjectMeta(_APIModel):
    name: str = ""
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None


class CustomResourceDefinition(_APIModel):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: CustomResourceDefinitionSpec = Field(
        default_factory=CustomResourceDefinitionSpec
    )
    status: CustomResourceDefinitionStatus = Field(
        default_factory=CustomResourceDefinitionStatus
    )


JSONSchemaProps.model_rebuild()
