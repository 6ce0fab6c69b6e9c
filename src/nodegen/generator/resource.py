"""Operation options and field definitions of a resource description."""

from nodegen.generator.divider import DividerBuilder
from nodegen.generator.helpers import (
    add_fields_suffix,
    adjust_type,
    escape,
    get_default,
    has_min_max,
    placeholder,
    title_case,
)
from nodegen.parser.base import FieldCollection, Operation, OperationParameter, RequestBody
from nodegen.parser.casing import camel_case, capital_case


def display_options(resource_name: str, operation_id: str, **extra) -> list[str]:
    lines = [
        "displayOptions: {",
        "show: {",
        f"resource: ['{camel_case(resource_name)}'],",
        f"operation: ['{camel_case(operation_id)}'],",
    ]
    for key, values in extra.items():
        rendered = ", ".join(v if isinstance(v, str) else str(v).lower() for v in values)
        lines.append(f"{key}: [{rendered}],")
    lines += ["},", "},"]
    return lines


def body_properties(body: RequestBody) -> dict:
    properties: dict = {}
    for content_type in body.content:
        properties.update(body.properties(content_type))
    return properties


def _collection_properties(fields: FieldCollection) -> dict:
    properties = {}
    for option in fields.options:
        schema = dict(option.schema_)
        if option.description:
            schema["description"] = option.description
        properties[option.name] = schema
    return properties


def extra_collections(operation: Operation) -> dict[str, dict]:
    """Extra body fields and query collections, merged by collection name."""
    collections: dict[str, dict] = {}
    for body in operation.request_body:
        if body.name != "Standard":
            collections.setdefault(body.name, {}).update(body_properties(body))
    for fields in (operation.additional_fields, operation.update_fields):
        if fields:
            collections.setdefault(fields.name, {}).update(_collection_properties(fields))
    return collections


class ResourceBuilder:
    """Renders the operations and fields of one resource."""

    def __init__(self):
        self.dividers = DividerBuilder()

    def operations_options(self, operations: list[Operation]) -> str:
        lines = []
        for operation in sorted(operations, key=lambda o: o.operation_id):
            lines.append("{")
            lines.append(f"\tname: '{capital_case(operation.operation_id)}',")
            lines.append(f"\tvalue: '{camel_case(operation.operation_id)}',")
            if operation.description:
                lines.append(f"\tdescription: '{operation.description}',")
            if operation.summary:
                lines.append(f"\taction: '{operation.summary}',")
            lines.append("},")
        return "\n".join(lines)

    def generate_fields(
        self,
        key: str,
        schema: dict,
        show: list[str] | None = None,
        required: bool = False,
    ) -> str:
        """Render one field definition, recursing into nested objects."""
        lines = ["{"]
        lines.append(f"displayName: '{title_case(key)}',")
        lines.append(f"name: '{key}',")

        if schema.get("type") == "object" and schema.get("properties"):
            lines.append(f"placeholder: 'Add {title_case(key)} Field',")
            lines.append("type: 'fixedCollection',")
            lines.append("default: {},")
            if schema.get("description"):
                lines.append(f"description: '{escape(schema['description'])}',")
            lines.append("options: [{")
            lines.append(f"displayName: '{title_case(key)} Fields',")
            lines.append(f"name: '{add_fields_suffix(key)}',")
            lines.append("values: [")
            for sub_key, sub_schema in schema["properties"].items():
                lines.append(self.generate_fields(sub_key, sub_schema))
            lines.append("]}],")
        else:
            lines.append(f"type: '{adjust_type(schema, key)}',")
            if schema.get("type") == "options":
                lines.append("options: [")
                for option in schema.get("options", []):
                    lines.append(f"{{ name: '{title_case(str(option))}', value: '{option}' }},")
                lines.append("],")
            if has_min_max(schema) or schema.get("type") == "array":
                lines.append("typeOptions: {")
                if has_min_max(schema):
                    lines.append(f"minValue: {schema['minimum']},")
                    lines.append(f"maxValue: {schema['maximum']},")
                if schema.get("type") == "array":
                    lines.append("multipleValues: true,")
                lines.append("},")
            lines.append(f"default: {get_default(schema)},")
            if schema.get("description"):
                lines.append(f"description: '{escape(schema['description'])}',")

        if required:
            lines.append("required: true,")
        if show:
            lines.extend(show)
        lines.append("},")
        return "\n".join(lines)

    def collection(self, display_name: str, properties: dict, show: list[str]) -> str:
        lines = [
            "{",
            f"displayName: '{display_name}',",
            f"name: '{camel_case(display_name)}',",
            "type: 'collection',",
            f"placeholder: '{placeholder(display_name)}',",
            "default: {},",
        ]
        lines.extend(show)
        lines.append("options: [")
        for key, schema in properties.items():
            lines.append(self.generate_fields(key, schema))
        lines.append("],")
        lines.append("},")
        return "\n".join(lines)

    def _parameter_field(self, param: OperationParameter, show: list[str]) -> str:
        schema = dict(param.schema_)
        if param.description:
            schema["description"] = param.description
        if param.name == "query" and param.location == "query" and schema.get("properties"):
            return self.collection("Query", schema["properties"], show)
        return self.generate_fields(param.name, schema, show=show, required=param.required)

    def operation_fields(self, resource_name: str, operation: Operation) -> str:
        """Every field shown for one operation of a resource."""
        show = display_options(resource_name, operation.operation_id)
        blocks = [self.dividers.resource_description_divider(resource_name, operation.operation_id)]

        for param in operation.parameters:
            blocks.append(self._parameter_field(param, show))

        for body in operation.request_body:
            if body.name == "Standard":
                for key, schema in body_properties(body).items():
                    blocks.append(self.generate_fields(key, schema, show=show, required=True))

        for name, properties in extra_collections(operation).items():
            blocks.append(self.collection(name, properties, show))

        if operation.operation_id == "getAll":
            blocks.append(self.get_all_additions(resource_name, operation.operation_id))

        return "\n".join(blocks)

    def get_all_additions(self, resource_name: str, operation_id: str) -> str:
        return "\n".join([self.return_all(resource_name, operation_id), self.limit(resource_name, operation_id)])

    def return_all(self, resource_name: str, operation_id: str) -> str:
        lines = [
            "{",
            "displayName: 'Return All',",
            "name: 'returnAll',",
            "type: 'boolean',",
            "default: false,",
            "description: 'Whether to return all results or only up to a given limit',",
        ]
        lines.extend(display_options(resource_name, operation_id))
        lines.append("},")
        return "\n".join(lines)

    def limit(self, resource_name: str, operation_id: str) -> str:
        lines = [
            "{",
            "displayName: 'Limit',",
            "name: 'limit',",
            "type: 'number',",
            "default: 50,",
            "description: 'Max number of results to return',",
            "typeOptions: {",
            "minValue: 1,",
            "},",
        ]
        lines.extend(display_options(resource_name, operation_id, returnAll=[False]))
        lines.append("},")
        return "\n".join(lines)

    def description(self, resource_name: str, operations: list[Operation]) -> str:
        """Complete ``<Resource>Description.ts`` contents."""
        name = camel_case(resource_name)
        default = camel_case(operations[0].operation_id) if operations else ""
        lines = [
            "import { INodeProperties } from 'n8n-workflow';",
            "",
            f"export const {name}Operations: INodeProperties[] = [",
            "{",
            "displayName: 'Operation',",
            "name: 'operation',",
            "type: 'options',",
            "noDataExpression: true,",
            "displayOptions: {",
            "show: {",
            f"resource: ['{name}'],",
            "},",
            "},",
            "options: [",
            self.operations_options(operations),
            "],",
            f"default: '{default}',",
            "},",
            "];",
            "",
            f"export const {name}Fields: INodeProperties[] = [",
        ]
        for operation in operations:
            lines.append(self.operation_fields(resource_name, operation))
        lines.append("];")
        return "\n".join(lines) + "\n"
