"""Small formatting helpers shared by the template builders."""

import re

from nodegen.parser.base import OperationParameter
from nodegen.parser.casing import camel_case, capital_case


def adjust_type(schema: dict, name: str) -> str:
    """Map a JSON schema onto a node field type."""
    schema_type = schema.get("type", "string")
    if schema_type == "integer":
        return "number"
    if schema.get("format") == "date-time" or "date" in name.lower():
        return "dateTime"
    if schema_type == "object" and schema.get("properties") and name == "query":
        return "collection"
    if schema_type == "object" and schema.get("properties"):
        return "fixedCollection"
    if schema_type == "object":
        return "json"
    items = schema.get("items")
    if schema_type == "array" and isinstance(items, dict) and items.get("type"):
        return adjust_type(items, name)
    return schema_type


def title_case(text) -> str:
    if not isinstance(text, str):
        return str(text)
    base = re.sub(r"[._]", " ", text).strip()
    if base.upper() == base:
        base = base.lower()
    return re.sub(r"\bId\b", "ID", capital_case(base))


def escape(text: str) -> str:
    """Make free text safe inside a single-quoted template string."""
    return re.sub(r"\r?\n", "<br>", text).replace("\\'", "'").replace("'", "’")


def _literal(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_default(schema: dict) -> str:
    """Default value of a field, rendered as a TypeScript literal."""
    schema_type = schema.get("type")
    default = schema.get("default")

    if default:
        if isinstance(default, str) and schema_type in ("number", "integer"):
            return "0"
        if schema_type in ("boolean", "number", "integer"):
            return _literal(default)
        if schema_type in ("string", "options"):
            return f"'{default}'"

    if schema_type in ("string", "dateTime", "loadOptions") or (schema_type == "object" and not schema.get("properties")):
        return "''"
    if schema_type in ("number", "integer"):
        return "0"
    if schema_type == "boolean":
        return "false"
    if schema_type == "options" and schema.get("options"):
        return f"'{schema['options'][0]}'"
    if schema_type == "object":
        return "{}"
    if schema_type == "array":
        return "[]"
    return "''"


def credentials_name(service_name: str, auth_type: str) -> str:
    return camel_case(service_name) + ("OAuth2" if auth_type == "OAuth2" else "") + "Api"


def to_template_literal(endpoint: str) -> str:
    return endpoint.replace("{", "${")


def get_params(params: list[OperationParameter], location: str) -> list[str]:
    return [p.name for p in params if p.location == location]


def has_min_max(schema: dict) -> bool:
    return schema.get("minimum") is not None and schema.get("maximum") is not None


def placeholder(collection_name: str) -> str:
    return "Add Filter" if collection_name == "Filters" else "Add Field"


def add_fields_suffix(key: str) -> str:
    return key + "_fields" if "_" in key else key + "Fields"
