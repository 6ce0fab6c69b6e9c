"""OpenAPI / Swagger normalizer.

Turns a dereferenced OpenAPI 3.x or Swagger 2.0 document into
NodegenParams: resources (singular tag names) mapped to normalized,
alphabetized operations.
"""

import copy
import logging
import re
from dataclasses import dataclass

from nodegen.config import Settings, get_settings
from nodegen.parser.base import (
    MetaParams,
    NodegenParams,
    Operation,
    OperationParameter,
    RequestBody,
    SpecError,
)
from nodegen.parser.casing import capital_case, singularize
from nodegen.parser.operation_id import assign_operation_ids, derive_candidate
from nodegen.parser.schema import resolve_schema, sanitize_schema, split_required

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "patch", "options", "head", "trace")
FORM_URLENCODED = "application/x-www-form-urlencoded"
JSON = "application/json"
TEXT_PLAIN = "text/plain"
BODY_CONTENT_TYPES = (FORM_URLENCODED, JSON, TEXT_PLAIN)
EXCLUDED_TAGS = {"OAuth"}

# Swagger 2.0 parameters carry their schema inline
_INLINE_SCHEMA_KEYS = ("type", "format", "enum", "default", "items", "minimum", "maximum", "pattern")
_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


@dataclass(frozen=True)
class OperationContext:
    """Everything known about one (endpoint, method) pair under one resource."""

    endpoint: str
    method: str
    resource: str
    entry: dict
    shared_parameters: tuple = ()

    @property
    def request_method(self) -> str:
        return self.method.upper()


def normalize(
    document: dict,
    service_name: str | None = None,
    settings: Settings | None = None,
) -> NodegenParams:
    """Normalize a dereferenced OpenAPI document into nodegen params."""
    settings = settings or get_settings()
    doc = copy.deepcopy(document)

    grouped: dict[str, list[OperationContext]] = {}
    for ctx in iter_contexts(doc):
        grouped.setdefault(ctx.resource, []).append(ctx)

    main_params = {resource: build_resource(resource, grouped[resource]) for resource in sorted(grouped)}

    meta_params = MetaParams(
        service_name=_service_name(doc, service_name),
        auth_type=get_auth_type(doc),
        node_color=settings.node_color,
        api_url=get_api_url(doc),
    )
    logger.info("Normalized %d resources", len(main_params))
    return NodegenParams(meta_params=meta_params, main_params=main_params)


# -- traversal ---------------------------------------------------------------


def get_paths(doc: dict) -> dict:
    if "paths" not in doc:
        raise SpecError("Document has no 'paths'")
    paths = doc["paths"]
    if not isinstance(paths, dict) or not paths:
        raise SpecError("Document has empty 'paths'")
    return paths


def iter_contexts(doc: dict):
    """Yield one context per (endpoint, method, resource), in document order."""
    for endpoint, path_item in get_paths(doc).items():
        if not isinstance(path_item, dict):
            raise SpecError(f"Path {endpoint} is not a mapping")

        methods = [m for m in path_item if m.lower() in HTTP_METHODS]
        if not methods:
            raise SpecError(f"Path {endpoint} has no method entries")

        shared = tuple(p for p in path_item.get("parameters") or [] if isinstance(p, dict))
        for method in methods:
            entry = path_item[method]
            if not isinstance(entry, dict):
                raise SpecError(f"{method.upper()} {endpoint} is not a mapping")
            for resource in get_resources(entry, endpoint):
                yield OperationContext(endpoint, method.lower(), resource, entry, shared)


def to_resource(tag: str) -> str:
    return singularize(tag.strip()).lower()


def get_resources(entry: dict, endpoint: str) -> list[str]:
    """Singular resource names of an operation; untagged ones use the path."""
    tags = entry.get("tags") or []
    if not tags:
        segments = [s for s in endpoint.split("/") if s and not s.startswith("{")]
        tags = segments[:1] or ["default"]
    for tag in tags:
        if not isinstance(tag, str):
            raise SpecError(f"Tag {tag!r} of {endpoint} is not a string")
    resources = [to_resource(t) for t in tags if t not in EXCLUDED_TAGS]
    return list(dict.fromkeys(resources))


def build_resource(resource: str, contexts: list[OperationContext]) -> list[Operation]:
    candidates = [
        derive_candidate(
            ctx.entry.get("operationId"),
            resource,
            ctx.method,
            ctx.endpoint,
            ctx.entry.get("summary"),
        )
        for ctx in contexts
    ]
    ids = assign_operation_ids(candidates)
    operations = [create_operation(ctx, op_id) for ctx, op_id in zip(contexts, ids)]
    return sorted(operations, key=lambda o: o.operation_id)


def create_operation(ctx: OperationContext, operation_id: str) -> Operation:
    external_docs = ctx.entry.get("externalDocs") or {}
    return Operation(
        endpoint=ctx.endpoint,
        request_method=ctx.request_method,
        operation_id=operation_id,
        description=escape_text(ctx.entry.get("description")),
        summary=escape_text(ctx.entry.get("summary")),
        operation_url=external_docs.get("url"),
        parameters=build_parameters(ctx),
        request_body=build_request_body(ctx),
    )


def escape_text(text) -> str | None:
    """Collapse whitespace and escape single quotes; None when empty."""
    if not isinstance(text, str):
        return None
    escaped = re.sub(r"\s+", " ", text).replace("'", "\\'").strip()
    return escaped or None


# -- parameters --------------------------------------------------------------


def placeholders(endpoint: str) -> list[str]:
    return list(dict.fromkeys(_PLACEHOLDER.findall(endpoint)))


def _combined_parameters(ctx: OperationContext) -> list[dict]:
    """Path-item parameters overridden by operation parameters on (in, name)."""
    combined: dict[tuple, dict] = {}
    for raw in list(ctx.shared_parameters) + list(ctx.entry.get("parameters") or []):
        if isinstance(raw, dict) and "name" in raw:
            combined[(raw.get("in"), raw["name"])] = raw
    return list(combined.values())


def _raw_schema(raw: dict) -> dict:
    schema = raw.get("schema")
    if isinstance(schema, dict):
        return resolve_schema(schema)
    inline = {k: raw[k] for k in _INLINE_SCHEMA_KEYS if k in raw}
    inline.setdefault("type", "string")
    return resolve_schema(inline)


def _example(raw: dict):
    example = raw.get("example")
    if isinstance(example, (str, int, float)) and not isinstance(example, bool):
        return example
    return None


def _to_parameter(raw: dict, method: str, required: bool) -> OperationParameter:
    return OperationParameter(
        location=raw["in"],
        name=raw["name"],
        required=required,
        schema_=sanitize_schema(_raw_schema(raw), method),
        description=escape_text(raw.get("description")),
        example=_example(raw),
    )


def flatten_query(optional: list[dict], method: str) -> OperationParameter:
    """Collapse optional query parameters into one ``query`` object parameter."""
    properties = {}
    for raw in optional:
        prop = _raw_schema(raw)
        description = escape_text(raw.get("description"))
        if description:
            prop["description"] = description
        properties[raw["name"]] = prop

    return OperationParameter(
        location="query",
        name="query",
        required=False,
        schema_=sanitize_schema({"type": "object", "properties": properties}, method),
    )


def build_parameters(ctx: OperationContext) -> list[OperationParameter]:
    """Path parameters, then required query parameters, then ``query``."""
    declared = _combined_parameters(ctx)
    declared_path = {p["name"]: p for p in declared if p.get("in") == "path"}
    names = placeholders(ctx.endpoint)

    for name in declared_path.keys() - set(names):
        logger.warning("Dropping path parameter %r absent from %s", name, ctx.endpoint)

    parameters = []
    for name in names:
        raw = declared_path.get(name) or {"in": "path", "name": name, "schema": {"type": "string"}}
        parameters.append(_to_parameter(raw, ctx.method, required=True))

    query = [p for p in declared if p.get("in") == "query"]
    for raw in query:
        if raw.get("required"):
            parameters.append(_to_parameter(raw, ctx.method, required=True))

    optional = [raw for raw in query if not raw.get("required")]
    if optional:
        parameters.append(flatten_query(optional, ctx.method))

    return parameters


# -- request body ------------------------------------------------------------


def _swagger2_body(ctx: OperationContext) -> dict | None:
    """Build an OpenAPI 3 style request body from ``body``/``formData`` parameters."""
    declared = _combined_parameters(ctx)

    body = next((p for p in declared if p.get("in") == "body"), None)
    if body is not None:
        return {
            "description": body.get("description"),
            "required": body.get("required", False),
            "content": {JSON: {"schema": body.get("schema") or {}}},
        }

    form = [p for p in declared if p.get("in") == "formData"]
    if form:
        properties = {}
        for raw in form:
            prop = _raw_schema(raw)
            description = escape_text(raw.get("description"))
            if description:
                prop["description"] = description
            properties[raw["name"]] = prop
        schema = {
            "type": "object",
            "properties": properties,
            "required": [p["name"] for p in form if p.get("required")],
        }
        return {"content": {FORM_URLENCODED: {"schema": schema}}}

    return None


def _text_plain_schema(media: dict, body: dict, method: str) -> dict:
    words = (body.get("description") or "").split()
    name = re.sub(r"\W", "", words[0]).lower() if words else ""
    name = name or "body"
    schema = {
        "type": "object",
        "properties": {name: resolve_schema(media.get("schema") or {"type": "string"})},
        "required": [name] if body.get("required") else [],
    }
    return sanitize_schema(schema, method)


def extra_fields_name(method: str) -> str:
    return "Update Fields" if method.upper() in ("PUT", "PATCH") else "Additional Fields"


def build_request_body(ctx: OperationContext) -> list[RequestBody]:
    """Split the body into a Standard and an extra-fields descriptor."""
    body = ctx.entry.get("requestBody")
    if not isinstance(body, dict):
        body = _swagger2_body(ctx)
    if not body:
        return []

    content = body.get("content") or {}
    standard: dict[str, dict] = {}
    extra: dict[str, dict] = {}

    for content_type in BODY_CONTENT_TYPES:
        media = content.get(content_type)
        if not isinstance(media, dict):
            continue
        if content_type == TEXT_PLAIN:
            schema = _text_plain_schema(media, body, ctx.method)
        else:
            schema = sanitize_schema(resolve_schema(media.get("schema") or {}), ctx.method)

        required_props, optional_props = split_required(schema)
        if required_props:
            standard[content_type] = {"schema": {"type": "object", "properties": required_props}}
        if optional_props:
            extra[content_type] = {"schema": {"type": "object", "properties": optional_props}}

    descriptors = []
    if standard:
        descriptors.append(
            RequestBody(
                name="Standard",
                required=True,
                description=escape_text(body.get("description")),
                content=standard,
            )
        )
    if extra:
        descriptors.append(RequestBody(name=extra_fields_name(ctx.method), required=False, content=extra))
    return descriptors


# -- meta params -------------------------------------------------------------


def get_api_url(doc: dict) -> str:
    servers = doc.get("servers")
    if isinstance(servers, list):
        for server in servers:
            if isinstance(server, dict) and server.get("url"):
                return server["url"]
    if doc.get("host"):
        scheme = (doc.get("schemes") or ["https"])[0]
        return f"{scheme}://{doc['host']}{doc.get('basePath', '')}"
    return ""


def get_auth_type(doc: dict) -> str:
    components = doc.get("components") or {}
    schemes = components.get("securitySchemes") or doc.get("securityDefinitions") or {}
    types = {s.get("type") for s in schemes.values() if isinstance(s, dict)}
    if "oauth2" in types:
        return "OAuth2"
    if types & {"apiKey", "http", "basic"}:
        return "ApiKey"
    return "None"


def _service_name(doc: dict, service_name: str | None) -> str:
    if service_name:
        return capital_case(service_name.removesuffix(".json")) or service_name
    title = (doc.get("info") or {}).get("title")
    return title or "Service"
