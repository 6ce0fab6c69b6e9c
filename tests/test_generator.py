import json
from pathlib import Path

import pytest

from nodegen.config import Settings
from nodegen.generator import package_json
from nodegen.generator.api_call import ApiCallBuilder, ts_type
from nodegen.generator.branch import BranchBuilder
from nodegen.generator.divider import DividerBuilder
from nodegen.generator.helpers import (
    add_fields_suffix,
    adjust_type,
    credentials_name,
    escape,
    get_default,
    get_params,
    placeholder,
    title_case,
    to_template_literal,
)
from nodegen.generator.imports import ImportsBuilder
from nodegen.generator.resource import ResourceBuilder, extra_collections
from nodegen.generator.template import TemplateBuilder
from nodegen.parser.base import (
    FieldCollection,
    MetaParams,
    Operation,
    OperationParameter,
    RequestBody,
)
from nodegen.parser.custom import stage_custom
from nodegen.parser.loader import load_document, load_spec
from nodegen.parser.openapi import normalize

FIXTURES = Path(__file__).parent / "fixtures"
JSON = "application/json"
REQUEST = "widgetServiceApiRequest"


def _op(operation_id: str, **kwargs) -> Operation:
    kwargs.setdefault("endpoint", "/widgets")
    kwargs.setdefault("request_method", "GET")
    return Operation(operation_id=operation_id, **kwargs)


def _body(name: str, properties: dict, required: bool = False) -> RequestBody:
    return RequestBody(
        name=name,
        required=required,
        content={JSON: {"schema": {"type": "object", "properties": properties}}},
    )


@pytest.fixture(scope="module")
def widgets():
    return normalize(load_spec(FIXTURES / "widgets.yaml"), settings=Settings())


class TestHelpers:
    @pytest.mark.parametrize(
        "schema, name, expected",
        [
            ({"type": "integer"}, "limit", "number"),
            ({"type": "string", "format": "date-time"}, "createdAt", "dateTime"),
            ({"type": "string"}, "updateDate", "dateTime"),
            ({"type": "object", "properties": {"a": {}}}, "query", "collection"),
            ({"type": "object", "properties": {"a": {}}}, "address", "fixedCollection"),
            ({"type": "object"}, "meta", "json"),
            ({"type": "array", "items": {"type": "string"}}, "tags", "string"),
            ({}, "name", "string"),
        ],
    )
    def test_adjust_type(self, schema, name, expected):
        assert adjust_type(schema, name) == expected

    def test_title_case(self):
        assert title_case("created_at") == "Created At"
        assert title_case("itemId") == "Item ID"
        assert title_case("HTTP_CODE") == "Http Code"
        assert title_case(5) == "5"

    def test_escape(self):
        assert escape("a\nb") == "a<br>b"
        assert escape("it\\'s") == "it’s"
        assert escape("it's") == "it’s"

    @pytest.mark.parametrize(
        "schema, expected",
        [
            ({"type": "string", "default": "eu"}, "'eu'"),
            ({"type": "string"}, "''"),
            ({"type": "boolean", "default": True}, "true"),
            ({"type": "boolean", "default": False}, "false"),
            ({"type": "number", "default": "5"}, "0"),
            ({"type": "number", "default": 5}, "5"),
            ({"type": "integer"}, "0"),
            ({"type": "options", "options": ["a", "b"]}, "'a'"),
            ({"type": "array"}, "[]"),
            ({"type": "object", "properties": {"a": {}}}, "{}"),
            ({"type": "object"}, "''"),
        ],
    )
    def test_get_default(self, schema, expected):
        assert get_default(schema) == expected

    def test_credentials_name(self):
        assert credentials_name("Widget Service", "OAuth2") == "widgetServiceOAuth2Api"
        assert credentials_name("Widget Service", "ApiKey") == "widgetServiceApi"

    def test_small_helpers(self):
        assert to_template_literal("/widgets/{id}") == "/widgets/${id}"
        assert add_fields_suffix("address") == "addressFields"
        assert add_fields_suffix("home_address") == "home_address_fields"
        assert placeholder("Filters") == "Add Filter"
        assert placeholder("Additional Fields") == "Add Field"

    def test_get_params(self):
        params = [
            OperationParameter(location="path", name="id", required=True),
            OperationParameter(location="query", name="owner", required=True),
            OperationParameter(location="query", name="query"),
        ]
        assert get_params(params, "path") == ["id"]
        assert get_params(params, "query") == ["owner", "query"]


class TestBranchBuilder:
    def _builder(self):
        self.get_all = _op("getAll")
        self.update = _op("update", endpoint="/users/{id}", request_method="PATCH")
        self.create = _op("create", request_method="POST")
        return BranchBuilder({"user": [self.get_all, self.update], "widget": [self.create]})

    def test_resource_branch(self):
        builder = self._builder()
        assert builder.resource_branch("user") == "if (resource === 'user') {"
        assert builder.resource_branch("widget") == "} else if (resource === 'widget') {"

    def test_operation_branch(self):
        builder = self._builder()
        assert builder.operation_branch("user", self.get_all) == "\tif (operation === 'getAll') {"
        assert builder.operation_branch("user", self.update) == "\t} else if (operation === 'update') {"

    def test_operation_error(self):
        builder = self._builder()
        assert builder.operation_error("user", self.get_all) is None
        assert builder.operation_error("user", self.update) == "\t}"
        closing = builder.operation_error("user", self.update, enabled=True)
        assert closing == "\t} else {\n\t\tthrow new Error(`Unknown operation: ${operation}`);\n\t}"

    def test_resource_error(self):
        builder = self._builder()
        assert builder.resource_error("user") is None
        assert builder.resource_error("widget") == "}"
        assert "Unknown resource" in builder.resource_error("widget", enabled=True)


class TestDividerBuilder:
    def test_resource_divider(self):
        lines = DividerBuilder().resource_divider("orderItem").split("\n")
        assert lines[0] == "// " + "*" * 70
        assert lines[1].startswith("// ")
        assert lines[1].strip().endswith("orderItem")
        assert lines[2] == lines[0]

    def test_operation_divider_with_url(self):
        divider = DividerBuilder().operation_divider("widget", "get", "https://docs.example.com")
        assert divider.startswith("// " + "-" * 40)
        assert "widget: get" in divider
        assert divider.endswith("\n\n// https://docs.example.com")


class TestApiCallBuilder:
    def test_ts_type(self):
        assert ts_type({"type": "integer"}) == "number"
        assert ts_type({"type": "boolean"}) == "boolean"
        assert ts_type({"type": "object"}) == "IDataObject"
        assert ts_type({"type": "array", "items": {"type": "string"}}) == "string[]"
        assert ts_type({"type": "array", "items": {"type": "object"}}) == "IDataObject[]"
        assert ts_type({}) == "string"

    def test_get_with_path_parameter(self):
        op = _op(
            "get",
            endpoint="/widgets/{widget_id}",
            parameters=[OperationParameter(location="path", name="widget_id", required=True)],
        )
        assert ApiCallBuilder(REQUEST).run(op).split("\n") == [
            "const widgetId = this.getNodeParameter('widget_id', i) as string;",
            "const endpoint = `/widgets/${widgetId}`;",
            f"responseData = await {REQUEST}.call(this, 'GET', endpoint);",
        ]

    def test_create_with_body(self):
        op = _op(
            "create",
            request_method="POST",
            request_body=[
                _body("Standard", {"name": {"type": "string"}}, required=True),
                _body("Additional Fields", {"color": {"type": "string"}}),
            ],
        )
        lines = ApiCallBuilder(REQUEST).run(op).split("\n")
        assert lines[0] == "const body: IDataObject = {};"
        assert "body.name = this.getNodeParameter('name', i) as string;" in lines
        assert "const additionalFields = this.getNodeParameter('additionalFields', i) as IDataObject;" in lines
        assert "Object.assign(body, additionalFields);" in lines
        assert lines[-1] == f"responseData = await {REQUEST}.call(this, 'POST', endpoint, body);"

    def test_get_all_with_query(self):
        op = _op(
            "getAll",
            parameters=[
                OperationParameter(location="query", name="owner", required=True, schema_={"type": "string"}),
                OperationParameter(location="query", name="query", schema_={"type": "object", "properties": {}}),
            ],
        )
        code = ApiCallBuilder(REQUEST).run(op)
        assert "const qs: IDataObject = {};" in code
        assert "qs.owner = this.getNodeParameter('owner', i) as string;" in code
        assert "Object.assign(qs, query);" in code
        assert "const returnAll = this.getNodeParameter('returnAll', i) as boolean;" in code
        assert f"{REQUEST}AllItems.call(this, 'GET', endpoint, {{}}, qs, limit);" in code

    def test_get_all_without_parameters(self):
        lines = ApiCallBuilder(REQUEST).call_lines(_op("getAll"))
        assert f"\tresponseData = await {REQUEST}AllItems.call(this, 'GET', endpoint, {{}}, {{}});" in lines

    def test_query_collection_reads_into_qs(self):
        op = _op(
            "create",
            request_method="POST",
            additional_fields=FieldCollection(
                name="Additional Fields",
                options=[OperationParameter(location="query", name="notify", schema_={"type": "boolean"})],
            ),
        )
        code = ApiCallBuilder(REQUEST).run(op)
        assert "Object.assign(qs, additionalFields);" in code
        assert code.endswith(f".call(this, 'POST', endpoint, {{}}, qs);")


class TestImportsBuilder:
    def test_generic_functions_with_get_all(self):
        builder = ImportsBuilder(REQUEST, {"widget": [_op("getAll")]})
        assert builder.generic_functions_imports() == (
            f"import {{\n\t{REQUEST},\n\t{REQUEST}AllItems,\n}} from './GenericFunctions';"
        )

    def test_generic_functions_without_get_all(self):
        builder = ImportsBuilder(REQUEST, {"widget": [_op("get")]})
        assert "AllItems" not in builder.generic_functions_imports()

    def test_descriptions(self):
        builder = ImportsBuilder(REQUEST, {"orderItem": [], "user": []})
        assert builder.descriptions_imports().split("\n") == [
            "import {",
            "\torderItemFields,",
            "\torderItemOperations,",
            "\tuserFields,",
            "\tuserOperations,",
            "} from './descriptions';",
        ]


class TestResourceBuilder:
    def test_operations_options(self):
        text = ResourceBuilder().operations_options([_op("getAll", description="Retrieve all widgets")])
        assert "\tname: 'Get All'," in text
        assert "\tvalue: 'getAll'," in text
        assert "\tdescription: 'Retrieve all widgets'," in text

    def test_number_field_with_bounds(self):
        text = ResourceBuilder().generate_fields("limit", {"type": "integer", "minimum": 1, "maximum": 100})
        assert "type: 'number'," in text
        assert "minValue: 1," in text
        assert "maxValue: 100," in text
        assert "default: 0," in text

    def test_options_field(self):
        text = ResourceBuilder().generate_fields("color", {"type": "options", "options": ["red"]}, required=True)
        assert "{ name: 'Red', value: 'red' }," in text
        assert "default: 'red'," in text
        assert "required: true," in text

    def test_nested_object(self):
        schema = {"type": "object", "properties": {"city": {"type": "string"}}}
        text = ResourceBuilder().generate_fields("address", schema)
        assert "type: 'fixedCollection'," in text
        assert "name: 'addressFields'," in text
        assert "name: 'city'," in text

    def test_query_parameter_rendered_as_collection(self):
        op = _op(
            "getAll",
            parameters=[
                OperationParameter(
                    location="query",
                    name="query",
                    schema_={"type": "object", "properties": {"limit": {"type": "integer"}}},
                )
            ],
        )
        text = ResourceBuilder().operation_fields("widget", op)
        assert "displayName: 'Query'," in text
        assert "type: 'collection'," in text
        assert "name: 'returnAll'," in text
        assert "returnAll: [false]," in text

    def test_extra_collections_merge_by_name(self):
        op = _op(
            "create",
            request_method="POST",
            request_body=[_body("Additional Fields", {"color": {"type": "string"}})],
            additional_fields=FieldCollection(
                name="Additional Fields",
                options=[OperationParameter(location="query", name="notify", schema_={"type": "boolean"})],
            ),
        )
        assert extra_collections(op) == {"Additional Fields": {"color": {"type": "string"}, "notify": {"type": "boolean"}}}

    def test_description_file(self, widgets):
        text = ResourceBuilder().description("widget", widgets.main_params["widget"])
        assert "export const widgetOperations: INodeProperties[] = [" in text
        assert "export const widgetFields: INodeProperties[] = [" in text
        assert "default: 'create'," in text
        assert "description: 'Create a new widget\\'s record'," in text


class TestTemplateBuilder:
    def test_render_files(self, widgets):
        files = TemplateBuilder(widgets).render()
        assert set(files) == {
            "WidgetService.imports.ts",
            "WidgetService.execute.ts",
            "descriptions/index.ts",
            "descriptions/UserDescription.ts",
            "descriptions/WidgetDescription.ts",
        }
        assert files["descriptions/index.ts"] == (
            "export * from './UserDescription';\nexport * from './WidgetDescription';\n"
        )

    def test_execute(self, widgets):
        code = TemplateBuilder(widgets).render_execute()
        assert code.startswith("// " + "*" * 70)
        assert "if (resource === 'user') {" in code
        assert "} else if (resource === 'widget') {" in code
        assert f"{REQUEST}AllItems.call(this, 'GET', endpoint, {{}}, qs)" in code
        assert "Unknown resource" in code
        assert "Unknown operation" in code

    def test_execute_without_errors(self, widgets):
        code = TemplateBuilder(widgets).render_execute(errors=False)
        assert "Unknown" not in code

    def test_imports(self, widgets):
        code = TemplateBuilder(widgets).render_imports()
        assert f"\t{REQUEST}AllItems," in code
        assert "\twidgetFields," in code

    def test_custom_schema(self):
        params = stage_custom(load_document(FIXTURES / "custom.yaml"))
        files = TemplateBuilder(params).render()
        assert "descriptions/OrderItemDescription.ts" in files
        assert "acmeApiRequest" in files["Acme.execute.ts"]


class TestPackageJson:
    def test_oauth2(self):
        data = package_json.generate(MetaParams(service_name="Widget Service", auth_type="OAuth2"))
        assert data["name"] == "n8n-nodes-widget-service"
        assert data["n8n"]["credentials"] == ["dist/credentials/WidgetServiceOAuth2Api.credentials.js"]
        assert data["n8n"]["nodes"] == ["dist/nodes/WidgetService/WidgetService.node.js"]

    def test_no_auth(self):
        data = package_json.generate(MetaParams(service_name="Widget Service"))
        assert data["n8n"]["credentials"] == []

    def test_render_is_json(self):
        text = package_json.render(MetaParams(service_name="Acme", auth_type="ApiKey"))
        assert json.loads(text)["n8n"]["credentials"] == ["dist/credentials/AcmeApi.credentials.js"]
