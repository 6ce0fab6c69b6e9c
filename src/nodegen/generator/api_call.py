"""Request call lines of an operation branch."""

from nodegen.generator.helpers import to_template_literal
from nodegen.generator.resource import body_properties, extra_collections
from nodegen.parser.base import Operation
from nodegen.parser.casing import camel_case


def ts_type(schema: dict) -> str:
    schema_type = schema.get("type")
    if schema_type in ("integer", "number"):
        return "number"
    if schema_type == "boolean":
        return "boolean"
    if schema_type == "object":
        return "IDataObject"
    if schema_type == "array":
        items = schema.get("items") or {}
        return "string[]" if items.get("type") in ("string", "options") else "IDataObject[]"
    return "string"


class ApiCallBuilder:
    """Renders the statements that read node parameters and call the API."""

    def __init__(self, service_api_request: str):
        self.service_api_request = service_api_request

    def run(self, operation: Operation) -> str:
        lines = []
        for param in operation.path_parameters():
            lines.append(f"const {camel_case(param.name)} = this.getNodeParameter('{param.name}', i) as string;")

        qs_lines = self._query_string_lines(operation)
        body_lines = self._request_body_lines(operation)
        lines.extend(qs_lines)
        lines.extend(body_lines)

        endpoint = operation.endpoint
        for param in operation.path_parameters():
            endpoint = endpoint.replace(f"{{{param.name}}}", f"{{{camel_case(param.name)}}}")
        lines.append(f"const endpoint = `{to_template_literal(endpoint)}`;")

        lines.extend(
            self.call_lines(
                operation,
                with_query_string=bool(qs_lines),
                with_request_body=bool(body_lines),
            )
        )
        return "\n".join(lines)

    def _query_string_lines(self, operation: Operation) -> list[str]:
        lines = []
        for param in operation.query_parameters():
            if param.name == "query" and not param.required:
                lines.append("const query = this.getNodeParameter('query', i) as IDataObject;")
                lines.append("Object.assign(qs, query);")
            else:
                lines.append(f"qs.{camel_case(param.name)} = this.getNodeParameter('{param.name}', i) as {ts_type(param.schema_)};")

        body_collections = {b.name for b in operation.request_body if b.name != "Standard"}
        for fields in (operation.additional_fields, operation.update_fields):
            if fields and fields.name not in body_collections:
                name = camel_case(fields.name)
                lines.append(f"const {name} = this.getNodeParameter('{name}', i) as IDataObject;")
                lines.append(f"Object.assign(qs, {name});")

        if lines:
            lines.insert(0, "const qs: IDataObject = {};")
        return lines

    def _request_body_lines(self, operation: Operation) -> list[str]:
        lines = []
        for body in operation.request_body:
            if body.name != "Standard":
                continue
            for key, schema in body_properties(body).items():
                lines.append(f"body.{camel_case(key)} = this.getNodeParameter('{key}', i) as {ts_type(schema)};")

        body_collections = {b.name for b in operation.request_body if b.name != "Standard"}
        for name in extra_collections(operation):
            if name in body_collections:
                variable = camel_case(name)
                lines.append(f"const {variable} = this.getNodeParameter('{variable}', i) as IDataObject;")
                lines.append(f"Object.assign(body, {variable});")

        if lines:
            lines.insert(0, "const body: IDataObject = {};")
        return lines

    def call_lines(self, operation: Operation, with_query_string: bool = False, with_request_body: bool = False) -> list[str]:
        is_get_all = operation.operation_id == "getAll"
        args = ["this", f"'{operation.request_method}'", "endpoint"]
        if with_request_body or with_query_string or is_get_all:
            args.append("body" if with_request_body else "{}")
        if with_query_string or is_get_all:
            args.append("qs" if with_query_string else "{}")
        call = ", ".join(args)

        if not is_get_all:
            return [f"responseData = await {self.service_api_request}.call({call});"]

        return [
            "const returnAll = this.getNodeParameter('returnAll', i) as boolean;",
            "if (returnAll) {",
            f"\tresponseData = await {self.service_api_request}AllItems.call({call});",
            "} else {",
            "\tconst limit = this.getNodeParameter('limit', i) as number;",
            f"\tresponseData = await {self.service_api_request}AllItems.call({call}, limit);",
            "}",
        ]
