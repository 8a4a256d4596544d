import json
from unittest.mock import patch

import pytest

from payload_collection.errors import MissingEndpoint, SerializationFailure
from payload_collection.generator.builder import (
    BodyLayout,
    BuildOptions,
    build_collection,
    generate_collection,
    parse_example,
    split_path,
)
from payload_collection.parser.base import EndpointDescriptor, FieldDescriptor
from payload_collection.parser.grammar import FieldGrammar
from payload_collection.postman import SCHEMA_URL
from payload_collection.supply import AnnotatedField, AnnotatedType

POST_USERS = EndpointDescriptor(method="POST", path="/users")
NAME = FieldDescriptor(name="name", description="Full name", example='"Jane"')
AGE = FieldDescriptor(name="age", description="Age", example="31")


class TestSplitPath:
    def test_leading_slash_keeps_empty_segment(self):
        assert split_path("/a/b") == ["", "a", "b"]

    def test_relative_path(self):
        assert split_path("a/b") == ["a", "b"]

    def test_empty_path(self):
        assert split_path("") == [""]

    def test_no_url_decoding(self):
        assert split_path("/users/:id/a%20b/") == ["", "users", ":id", "a%20b", ""]


class TestParseExample:
    def test_json_values_are_parsed(self):
        assert parse_example('"Jane"') == "Jane"
        assert parse_example("31") == 31
        assert parse_example('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_non_json_falls_back_to_literal(self):
        assert parse_example("Jane") == "Jane"
        assert parse_example("") == ""

    @pytest.mark.parametrize("example", ["NaN", "Infinity", "-Infinity", "1e400", "[1, 1e400]"])
    def test_non_finite_numbers_stay_literal(self, example):
        assert parse_example(example) == example

    def test_raw_body_is_strict_json(self):
        fields = [
            FieldDescriptor(name="ratio", example="NaN"),
            FieldDescriptor(name="big", example="1e400"),
        ]
        raw = build_collection(POST_USERS, fields).item[0].request.body.raw
        assert json.loads(raw, parse_constant=lambda c: pytest.fail(f"{c} in body")) == {
            "ratio": "NaN",
            "big": "1e400",
        }

    @patch("payload_collection.generator.builder.parse_example", return_value=float("nan"))
    def test_non_finite_value_fails_serialization(self, _mock_parse):
        with pytest.raises(SerializationFailure, match="request body"):
            build_collection(POST_USERS, [FieldDescriptor(name="ratio", example="x")])


class TestBuildCollection:
    def test_request_shape(self):
        c = build_collection(POST_USERS, [NAME])
        req = c.item[0].request
        assert req.method == "POST"
        assert req.url.path == ["", "users"]
        assert req.url.host == ["api", "example", "com"]
        assert req.url.protocol == "https"

    def test_single_content_type_header(self):
        headers = build_collection(POST_USERS, []).item[0].request.header
        assert len(headers) == 1
        assert headers[0].key == "Content-Type"
        assert headers[0].value == "application/json"
        assert headers[0].enabled is True
        assert headers[0].type is None

    def test_header_type_option(self):
        c = build_collection(POST_USERS, [], options=BuildOptions(header_type="text"))
        assert c.item[0].request.header[0].type == "text"

    def test_raw_body_mapping(self):
        body = build_collection(POST_USERS, [NAME, AGE]).item[0].request.body
        assert body.mode == "raw"
        assert body.options.raw.language == "json"
        assert json.loads(body.raw) == {"name": "Jane", "age": 31}
        assert list(json.loads(body.raw)) == ["name", "age"]

    def test_raw_body_descriptors(self):
        options = BuildOptions(body_layout=BodyLayout.DESCRIPTORS)
        body = build_collection(POST_USERS, [NAME], options=options).item[0].request.body
        assert json.loads(body.raw) == [
            {"name": "name", "description": "Full name", "example": '"Jane"'}
        ]

    @pytest.mark.parametrize("layout, raw", [(BodyLayout.MAPPING, "{}"), (BodyLayout.DESCRIPTORS, "[]")])
    def test_empty_fields_give_empty_body(self, layout, raw):
        c = build_collection(POST_USERS, [], options=BuildOptions(body_layout=layout))
        assert c.item[0].request.body.raw == raw

    def test_info_defaults(self):
        info = build_collection(POST_USERS, []).info
        assert info.name == "Example API created from postman"
        assert info.description == "API postman Collection"
        assert info.schema_url == SCHEMA_URL

    def test_options_override(self):
        options = BuildOptions(collection_name="Users", host=["localhost"], protocol="http")
        c = build_collection(POST_USERS, [], item_name="CreateUser", description="d", options=options)
        assert c.info.name == "Users"
        assert c.item[0].name == "CreateUser"
        assert c.item[0].request.description == "d"
        assert c.item[0].request.url.host == ["localhost"]
        assert c.item[0].request.url.protocol == "http"


class TestGenerateCollection:
    def _annotated(self, endpoints, fields) -> AnnotatedType:
        return AnnotatedType(name="CreateUser", description="Create a user.", endpoint_attrs=endpoints, fields=fields)

    def test_generates_from_annotations(self):
        annotated = self._annotated(
            ['method = "POST", path = "/users"'],
            [AnnotatedField("name", ['description = "Full name", example = "\\"Jane\\""'])],
        )
        c = generate_collection(annotated)
        assert c.item[0].name == "CreateUser"
        assert c.item[0].request.description == "Create a user."
        assert json.loads(c.item[0].request.body.raw) == {"name": "Jane"}

    def test_missing_endpoint_checked_first(self):
        annotated = self._annotated([], [AnnotatedField("name", ["not a valid payload"])])
        with pytest.raises(MissingEndpoint, match="CreateUser"):
            generate_collection(annotated)

    def test_example_grammar(self):
        annotated = self._annotated(
            ['method = "PATCH", path = "/users/:id"'],
            [AnnotatedField("age", ['example = "31"'])],
        )
        c = generate_collection(annotated, BuildOptions(field_grammar=FieldGrammar.EXAMPLE))
        assert c.item[0].request.url.path == ["", "users", ":id"]
        assert json.loads(c.item[0].request.body.raw) == {"age": 31}
