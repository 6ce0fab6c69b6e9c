"""Custom YAML schema stager.

The custom schema lists operations per resource, with their fields sorted
into ``requiredFields``, ``additionalFields``, ``filters`` and
``updateFields`` buckets, each split into ``queryString`` and
``requestBody`` maps. This module stages that shape into NodegenParams.
"""

import logging
import re

from nodegen.parser.base import (
    FieldCollection,
    MetaParams,
    NodegenParams,
    Operation,
    OperationParameter,
    RequestBody,
    SpecError,
)
from nodegen.parser.casing import snake_case

logger = logging.getLogger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"
EXTRA_BUCKETS = (
    ("additionalFields", "Additional Fields"),
    ("filters", "Filters"),
    ("updateFields", "Update Fields"),
)


def stage_custom(document: dict, validate: bool = False) -> NodegenParams:
    """Stage a parsed custom YAML schema into nodegen params."""
    main = document.get("mainParams")
    if not isinstance(main, dict):
        raise SpecError("Custom schema has no 'mainParams' mapping")

    main_params = {}
    for resource in sorted(main):
        operations = []
        for raw in main[resource] or []:
            if validate:
                validate_operation(raw)
            operations.append(stage_operation(resource, raw))
        main_params[resource] = sorted(operations, key=lambda o: o.operation_id)
        logger.debug("Staged %d operations for %r", len(operations), resource)

    return NodegenParams(meta_params=stage_meta(document.get("metaParams")), main_params=main_params)


def stage_meta(meta: dict | None) -> MetaParams:
    if not isinstance(meta, dict) or "serviceName" not in meta:
        raise SpecError("Custom schema has no 'metaParams.serviceName'")
    return MetaParams(
        service_name=meta["serviceName"],
        auth_type=meta.get("authType", "None"),
        node_color=str(meta.get("nodeColor", "#ffffff")).replace("\\#", "#"),
        api_url=meta.get("apiUrl", ""),
    )


# -- validation --------------------------------------------------------------


def needs_route_param(raw: dict) -> bool:
    method = str(raw.get("requestMethod", "")).upper()
    return (method == "GET" and raw.get("operationId") != "getAll") or method in ("DELETE", "PATCH")


def validate_operation(raw: dict) -> None:
    for key in ("endpoint", "requestMethod", "operationId"):
        if key not in raw:
            raise SpecError(f"Operation is missing '{key}': {raw}")
    if needs_route_param(raw) and "{" not in raw["endpoint"]:
        raise SpecError(f"Operation is missing required route param: {raw['requestMethod']} {raw['endpoint']}")


# -- staging -----------------------------------------------------------------


def stage_operation(resource: str, raw: dict) -> Operation:
    try:
        endpoint = raw["endpoint"]
        method = str(raw["requestMethod"]).upper()
        operation_id = raw["operationId"]
    except KeyError as e:
        raise SpecError(f"Operation under {resource!r} is missing {e}") from e

    required_fields = raw.get("requiredFields") or {}

    parameters = stage_path_params(endpoint, operation_id, resource)
    for key, value in (required_fields.get("queryString") or {}).items():
        parameters.append(stage_qs_param(key, value, required=True))

    filters = stage_qs_collection(raw.get("filters"), "Filters")
    if filters:
        parameters.extend(filters.options)

    request_body = stage_request_body(required_fields.get("requestBody"), required=True, name="Standard")
    for bucket, name in EXTRA_BUCKETS:
        request_body.extend(stage_request_body((raw.get(bucket) or {}).get("requestBody"), required=False, name=name))

    return Operation(
        endpoint=endpoint,
        request_method=method,
        operation_id=operation_id,
        description=describe(operation_id, resource),
        operation_url=raw.get("operationUrl"),
        parameters=parameters,
        request_body=request_body,
        additional_fields=stage_qs_collection(raw.get("additionalFields"), "Additional Fields"),
        update_fields=stage_qs_collection(raw.get("updateFields"), "Update Fields"),
    )


def spaced(resource: str) -> str:
    """``orderItem`` -> ``order item``; single words are returned unchanged."""
    snake = snake_case(resource)
    return snake.replace("_", " ") if "_" in snake else resource


def describe(operation_id: str, resource: str) -> str:
    noun = spaced(resource)
    if operation_id == "getAll":
        return f"Retrieve all {noun}s"
    article = "an" if resource[:1].lower() in "aeiou" else "a"
    return f"{operation_id[:1].upper()}{operation_id[1:]} {article} {noun}"


def stage_path_params(endpoint: str, operation_id: str, resource: str) -> list[OperationParameter]:
    parameters = []
    for name in dict.fromkeys(re.findall(r"\{([^}]+)\}", endpoint)):
        description = None
        if operation_id in ("create", "update", "delete"):
            description = f"ID of the {spaced(resource)} to {operation_id}"
        elif operation_id == "get":
            description = f"ID of the {spaced(resource)} to retrieve"
        parameters.append(
            OperationParameter(
                location="path",
                name=name,
                required=True,
                schema_={"type": "string", "default": ""},
                description=description,
            )
        )
    return parameters


def supplement_link(description: str) -> str:
    """Make HTML links in descriptions open in a new tab."""
    if "<a href=" in description:
        return description.replace('">', '" target="_blank">', 1)
    return description


def stage_qs_param(key: str, value: dict | None, required: bool) -> OperationParameter:
    value = value or {}
    schema = {"type": value.get("type", "string"), "default": value.get("default")}
    if value.get("type") == "options" and value.get("options"):
        schema["options"] = value["options"]

    description = value.get("description")
    return OperationParameter(
        location="query",
        name=key,
        required=required,
        schema_=schema,
        description=supplement_link(description) if description else None,
    )


def stage_qs_collection(bucket: dict | None, name: str) -> FieldCollection | None:
    query_string = (bucket or {}).get("queryString")
    if not query_string:
        return None
    options = [stage_qs_param(key, value, required=False) for key, value in query_string.items()]
    return FieldCollection(name=name, options=options)


def stage_request_body(fields: dict | None, required: bool, name: str) -> list[RequestBody]:
    if not fields:
        return []

    properties = {}
    for key, value in fields.items():
        prop = dict(value or {})
        if prop.get("description"):
            prop["description"] = supplement_link(prop["description"])
        properties[key] = prop

    schema = {"type": "object", "properties": dict(sorted(properties.items()))}
    return [RequestBody(name=name, required=required, content={FORM_URLENCODED: {"schema": schema}})]
