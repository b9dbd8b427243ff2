"""Unit tests for the resource-definition platform layer."""

import pytest

from constraint_framework.apiextensions import (
    AggregateError,
    ConversionError,
    CustomResourceDefinition,
    CustomResourceValidation,
    ErrorList,
    ErrorType,
    FieldError,
    JSONSchemaProps,
    JSONSchemaValidatorFactory,
    Path,
    Scheme,
    SchemaValidatorBuildError,
    validate_custom_resource,
    validate_custom_resource_definition,
)
from constraint_framework.apiextensions import field, naming, v1beta1
from constraint_framework.apiextensions.schema_validator import to_json_schema


class TestPath:
    """Tests for field path rendering."""

    def test_children_joined_with_dots(self):
        assert str(Path("spec").child("names", "plural")) == "spec.names.plural"

    def test_indexes_and_keys(self):
        path = Path("spec").child("versions").index(1).child("name")
        assert str(path) == "spec.versions[1].name"
        assert str(Path("properties").key("spec")) == "properties[spec]"

    def test_empty_root(self):
        assert str(Path()) == ""
        assert str(Path().extend(["spec", "labels", 0])) == "spec.labels[0]"


class TestFieldErrors:
    """Tests for field error formatting and aggregation."""

    def test_invalid_value_message(self):
        err = field.invalid(Path("metadata", "name"), "Foo", "must be lower case")
        assert str(err) == 'metadata.name: Invalid value: "Foo": must be lower case'

    def test_required_message(self):
        assert str(field.required(Path("spec", "group"))) == "spec.group: Required value"

    def test_not_supported_lists_values(self):
        err = field.not_supported(Path("spec", "scope"), "Galaxy", ["Cluster", "Namespaced"])
        assert str(err) == (
            'spec.scope: Unsupported value: "Galaxy": '
            'supported values: "Cluster", "Namespaced"'
        )

    def test_forbidden_omits_value(self):
        err = field.forbidden(Path("x"), "not allowed")
        assert err.type is ErrorType.FORBIDDEN
        assert str(err) == "x: Forbidden: not allowed"

    def test_empty_list_aggregates_to_none(self):
        assert ErrorList().to_aggregate() is None

    def test_single_error_aggregate_uses_its_message(self):
        errs = ErrorList([field.required(Path("a"))])
        assert str(errs.to_aggregate()) == "a: Required value"

    def test_many_errors_bracketed_and_deduplicated(self):
        errs = ErrorList(
            [field.required(Path("a")), field.required(Path("b")), field.required(Path("a"))]
        )
        aggregate = errs.to_aggregate()
        assert isinstance(aggregate, AggregateError)
        assert len(aggregate.errors) == 2
        assert str(aggregate) == "[a: Required value, b: Required value]"


class TestNaming:
    """Tests for name syntax checks."""

    @pytest.mark.parametrize("value", ["example.com", "a", "ns-must-have-gk", "a.b-c.d"])
    def test_valid_subdomains(self, value):
        assert naming.is_dns1123_subdomain(value) == []

    @pytest.mark.parametrize("value", ["", "My_Bad_Name", "-abc", "abc-", "a..b", "UPPER", "abc\n"])
    def test_invalid_subdomains(self, value):
        errs = naming.is_dns1123_subdomain(value)
        assert len(errs) == 1
        assert "e.g. 'example.com'" in errs[0]

    def test_subdomain_length_bound(self):
        errs = naming.is_dns1123_subdomain("a" * 254)
        assert errs == ["must be no more than 253 characters"]

    def test_dns1035_label_must_start_with_letter(self):
        assert naming.is_dns1035_label("v1beta1") == []
        assert naming.is_dns1035_label("1abc") != []

    def test_dns1035_label_length_bound(self):
        assert "must be no more than 63 characters" in naming.is_dns1035_label("a" * 64)

    @pytest.mark.parametrize(
        "check", [naming.is_dns1123_label, naming.is_dns1035_label]
    )
    def test_labels_reject_trailing_newline(self, check):
        assert check("abc\n") != []

    def test_dns1123_label_allows_leading_digit(self):
        assert naming.is_dns1123_label("123-abc") == []
        assert naming.is_dns1123_label("a.b") != []

    def test_invalid_characters_in_order_of_first_use(self):
        assert naming.invalid_subdomain_characters("My_Bad_Name") == ["M", "_", "B", "N"]
        assert naming.invalid_subdomain_characters("fine.name") == []


class TestV1beta1Defaults:
    """Tests for v1beta1 definition defaulting."""

    def test_defaults_empty_spec(self):
        out = v1beta1.set_defaults_crd({"spec": {"version": "v1"}})
        assert out["spec"]["scope"] == "Namespaced"
        assert out["spec"]["versions"] == [{"name": "v1", "storage": True, "served": True}]
        assert out["spec"]["conversion"] == {"strategy": "None"}
        assert out["spec"]["preserveUnknownFields"] is True
        assert out["status"]["storedVersions"] == ["v1"]

    def test_sole_version_becomes_storage(self):
        out = v1beta1.set_defaults_crd(
            {"spec": {"versions": [{"name": "v2", "served": True, "storage": False}]}}
        )
        assert out["spec"]["versions"][0]["storage"] is True
        assert out["spec"]["version"] == "v2"

    def test_explicit_values_kept(self):
        doc = {
            "spec": {
                "scope": "Cluster",
                "version": "v1",
                "versions": [
                    {"name": "v1", "served": True, "storage": True},
                    {"name": "v0", "served": True, "storage": False},
                ],
                "preserveUnknownFields": False,
            },
            "status": {"storedVersions": ["v0", "v1"]},
        }
        out = v1beta1.set_defaults_crd(doc)
        assert out["spec"]["scope"] == "Cluster"
        assert out["spec"]["preserveUnknownFields"] is False
        assert out["spec"]["versions"][1]["storage"] is False
        assert out["status"]["storedVersions"] == ["v0", "v1"]

    def test_webhook_conversion_defaults(self):
        doc = {
            "spec": {
                "version": "v1",
                "conversion": {
                    "strategy": "Webhook",
                    "webhookClientConfig": {"service": {"namespace": "ns", "name": "svc"}},
                },
            }
        }
        conversion = v1beta1.set_defaults_crd(doc)["spec"]["conversion"]
        assert conversion["conversionReviewVersions"] == ["v1beta1"]
        assert conversion["webhookClientConfig"]["service"]["port"] == 443

    def test_input_document_untouched(self):
        doc = {"spec": {"version": "v1"}}
        v1beta1.set_defaults_crd(doc)
        assert doc == {"spec": {"version": "v1"}}


class TestScheme:
    """Tests for conversion dispatch."""

    @pytest.fixture
    def scheme(self):
        scheme = Scheme()
        v1beta1.add_to_scheme(scheme)
        return scheme

    def test_round_trip_applies_defaults(self, scheme):
        crd = CustomResourceDefinition.model_validate(
            {"spec": {"group": "example.com", "version": "v1"}}
        )
        external = scheme.to_external(crd, v1beta1.GROUP_VERSION)
        assert external["apiVersion"] == "apiextensions.k8s.io/v1beta1"
        assert external["kind"] == "CustomResourceDefinition"
        internal = scheme.to_internal(scheme.default(external))
        assert isinstance(internal, CustomResourceDefinition)
        assert internal.spec.scope == "Namespaced"
        assert internal.spec.preserve_unknown_fields is True
        assert crd.spec.scope == ""

    def test_unknown_kind_rejected(self, scheme):
        with pytest.raises(ConversionError):
            scheme.to_internal({"apiVersion": "example.com/v1", "kind": "Widget"})

    def test_unregistered_type_rejected(self, scheme):
        with pytest.raises(ConversionError):
            scheme.to_external(CustomResourceDefinition(), "apiextensions.k8s.io/v1")

    def test_invalid_document_rejected(self, scheme):
        with pytest.raises(ConversionError):
            scheme.to_internal(
                {"type": ["object"]}, v1beta1.GROUP_VERSION, v1beta1.SCHEMA_KIND
            )

    def test_kind_without_defaulter_copied(self, scheme):
        doc = {"type": "string"}
        out = scheme.default(doc, v1beta1.GROUP_VERSION, v1beta1.SCHEMA_KIND)
        assert out == doc
        assert out is not doc


def make_definition(**spec_overrides) -> CustomResourceDefinition:
    """Create a valid, already-defaulted definition with optional spec overrides."""
    spec = {
        "group": "constraints.gatekeeper.sh",
        "version": "v1beta1",
        "names": {
            "plural": "k8sfoo",
            "singular": "k8sfoo",
            "kind": "K8sFoo",
            "listKind": "K8sFooList",
            "categories": ["all", "constraint"],
        },
        "scope": "Cluster",
        "versions": [
            {"name": "v1beta1", "served": True, "storage": True},
            {"name": "v1alpha1", "served": True, "storage": False},
        ],
        "conversion": {"strategy": "None"},
        "preserveUnknownFields": True,
        "validation": {"openAPIV3Schema": {"properties": {"spec": {"type": "object"}}}},
    }
    spec.update(spec_overrides)
    return CustomResourceDefinition.model_validate(
        {
            "metadata": {"name": "k8sfoo.constraints.gatekeeper.sh"},
            "spec": spec,
            "status": {"storedVersions": ["v1beta1"]},
        }
    )


def _fields(errs):
    return [e.field for e in errs]


class TestDefinitionValidation:
    """Tests for structural definition checks."""

    def test_valid_definition(self):
        assert validate_custom_resource_definition(make_definition()) == []

    def test_name_must_match_plural_and_group(self):
        crd = make_definition()
        crd.metadata.name = "foo.example.com"
        assert _fields(validate_custom_resource_definition(crd)) == ["metadata.name"]

    def test_group_needs_a_dot(self):
        crd = make_definition(group="constraints")
        errs = validate_custom_resource_definition(crd)
        assert "spec.group" in _fields(errs)

    def test_unsupported_scope(self):
        errs = validate_custom_resource_definition(make_definition(scope="Galaxy"))
        assert _fields(errs) == ["spec.scope"]
        assert errs[0].type is ErrorType.NOT_SUPPORTED

    def test_exactly_one_storage_version(self):
        crd = make_definition(
            versions=[
                {"name": "v1beta1", "served": True, "storage": True},
                {"name": "v1alpha1", "served": True, "storage": True},
            ]
        )
        errs = validate_custom_resource_definition(crd)
        assert any("exactly one version" in e.detail for e in errs)

    def test_version_names_unique(self):
        crd = make_definition(
            versions=[
                {"name": "v1beta1", "served": True, "storage": True},
                {"name": "v1beta1", "served": True, "storage": False},
            ]
        )
        errs = validate_custom_resource_definition(crd)
        assert any("unique version names" in e.detail for e in errs)

    def test_version_must_match_first_listed(self):
        errs = validate_custom_resource_definition(make_definition(version="v1alpha1"))
        assert "spec.version" in _fields(errs)

    def test_kind_and_list_kind_must_differ(self):
        names = {
            "plural": "k8sfoo",
            "singular": "k8sfoo",
            "kind": "K8sFoo",
            "listKind": "K8sFoo",
        }
        errs = validate_custom_resource_definition(make_definition(names=names))
        assert "spec.names.listKind" in _fields(errs)

    def test_stored_versions_must_include_storage_version(self):
        crd = make_definition()
        crd.status.stored_versions = ["v1alpha1"]
        errs = validate_custom_resource_definition(crd)
        assert _fields(errs) == ["status.storedVersions"]

    def test_missing_stored_versions(self):
        crd = make_definition()
        crd.status.stored_versions = []
        errs = validate_custom_resource_definition(crd)
        assert any("at least one stored version" in e.detail for e in errs)

    def test_unknown_conversion_strategy(self):
        errs = validate_custom_resource_definition(
            make_definition(conversion={"strategy": "Magic"})
        )
        assert _fields(errs) == ["spec.conversion.strategy"]

    def test_forbidden_schema_constructs_all_reported(self):
        schema = {
            "properties": {
                "a": {"$ref": "#/definitions/x"},
                "b": {"type": "null"},
                "c": {"type": "object", "properties": {"d": {}}, "additionalProperties": True},
                "e": {"x-kubernetes-preserve-unknown-fields": False},
            }
        }
        errs = validate_custom_resource_definition(
            make_definition(validation={"openAPIV3Schema": schema})
        )
        root = "spec.validation.openAPIV3Schema.properties"
        assert _fields(errs) == [
            f"{root}[a].$ref",
            f"{root}[b].type",
            f"{root}[c].additionalProperties",
            f"{root}[e].x-kubernetes-preserve-unknown-fields",
        ]

    def test_nested_schemas_checked(self):
        schema = {"properties": {"a": {"items": {"anyOf": [{"uniqueItems": True}]}}}}
        errs = validate_custom_resource_definition(
            make_definition(validation={"openAPIV3Schema": schema})
        )
        assert _fields(errs) == [
            "spec.validation.openAPIV3Schema.properties[a].items.anyOf[0].uniqueItems"
        ]

    def test_metadata_schema_limited_to_name(self):
        schema = {"properties": {"metadata": {"properties": {"labels": {}, "name": {}}}}}
        errs = validate_custom_resource_definition(
            make_definition(validation={"openAPIV3Schema": schema})
        )
        assert _fields(errs) == [
            "spec.validation.openAPIV3Schema.properties[metadata].properties[labels]"
        ]

    def test_structural_schema_required_when_pruning(self):
        errs = validate_custom_resource_definition(
            make_definition(preserveUnknownFields=False)
        )
        assert _fields(errs) == ["spec.validation.openAPIV3Schema.type"]

    def test_preserve_unknown_fields_rejected_outside_v1beta1(self):
        errs = validate_custom_resource_definition(
            make_definition(), "apiextensions.k8s.io/v1"
        )
        assert _fields(errs) == ["spec.preserveUnknownFields"]

    def test_all_errors_reported_together(self):
        crd = make_definition(scope="Galaxy", group="nodots", version="v1alpha1")
        errs = validate_custom_resource_definition(crd)
        assert len(errs) >= 3


class TestSchemaValidator:
    """Tests for schema translation and custom resource validation."""

    def test_nullable_becomes_type_union(self):
        schema = to_json_schema(JSONSchemaProps(type="string", nullable=True))
        assert schema == {"type": ["string", "null"]}

    def test_int_or_string_becomes_all_of(self):
        schema = to_json_schema(JSONSchemaProps(x_int_or_string=True))
        assert schema == {"allOf": [{"anyOf": [{"type": "integer"}, {"type": "string"}]}]}

    def test_int_or_string_applies_with_author_alternatives(self):
        props = JSONSchemaProps(
            x_int_or_string=True,
            any_of=[JSONSchemaProps(maximum=5), JSONSchemaProps(pattern="^[0-9]+%$")],
        )
        validator = JSONSchemaValidatorFactory().build(
            CustomResourceValidation(open_api_v3_schema=props)
        )
        assert validator.is_valid(3)
        assert validator.is_valid("50%")
        assert not validator.is_valid(True)
        assert not validator.is_valid([3])

    def test_platform_keys_dropped_recursively(self):
        props = JSONSchemaProps.model_validate(
            {
                "type": "object",
                "properties": {
                    "a": {"type": "object", "x-kubernetes-preserve-unknown-fields": True}
                },
            }
        )
        assert to_json_schema(props) == {
            "type": "object",
            "properties": {"a": {"type": "object"}},
        }

    def test_no_schema_builds_no_validator(self):
        factory = JSONSchemaValidatorFactory()
        assert factory.build(None) is None
        assert factory.build(CustomResourceValidation()) is None
        assert validate_custom_resource(Path(), {"anything": 1}, None) == []

    def test_invalid_schema_fails_to_build(self):
        validation = CustomResourceValidation(
            open_api_v3_schema=JSONSchemaProps(type="notatype")
        )
        with pytest.raises(SchemaValidatorBuildError):
            JSONSchemaValidatorFactory().build(validation)

    def test_errors_carry_field_paths(self):
        validation = CustomResourceValidation.model_validate(
            {
                "openAPIV3Schema": {
                    "type": "object",
                    "required": ["spec"],
                    "properties": {
                        "spec": {
                            "type": "object",
                            "properties": {
                                "mode": {"type": "string", "enum": ["on", "off"]},
                                "tags": {"type": "array", "items": {"type": "string"}},
                            },
                        }
                    },
                }
            }
        )
        validator = JSONSchemaValidatorFactory().build(validation)

        errs = validate_custom_resource(Path(), {}, validator)
        assert len(errs) == 1
        assert errs[0].type is ErrorType.REQUIRED

        errs = validate_custom_resource(
            Path(), {"spec": {"mode": "maybe", "tags": ["a", 2]}}, validator
        )
        assert [(e.field, e.type) for e in errs] == [
            ("spec.mode", ErrorType.NOT_SUPPORTED),
            ("spec.tags[1]", ErrorType.TYPE_INVALID),
        ]
        assert isinstance(errs[0], FieldError)
