"""Schema merging and field sanitization.

Every function here returns new objects and leaves its input untouched,
so a document can be normalized any number of times with the same result.
"""

import copy
import logging

from nodegen.parser.base import SpecError
from nodegen.parser.casing import field_name

logger = logging.getLogger(__name__)

COMBINATORS = ("allOf", "anyOf", "oneOf")


def deep_merge(base: dict, extra: dict) -> dict:
    """Merge ``extra`` into a copy of ``base``.

    Nested mappings merge recursively, lists on the same key are
    concatenated and any other value from ``extra`` wins.
    """
    merged = copy.deepcopy(base)
    for key, value in extra.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + copy.deepcopy(value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_all_of(schemas: list[dict]) -> dict:
    merged: dict = {}
    for sub_schema in schemas:
        merged = deep_merge(merged, resolve_schema(sub_schema))
    return merged


def resolve_schema(schema):
    """Rewrite ``allOf``/``anyOf``/``oneOf`` into a single plain schema.

    ``allOf`` members are deep-merged; of ``anyOf``/``oneOf`` only the first
    alternative is kept. Nested properties and items are resolved first.
    """
    if not isinstance(schema, dict):
        return schema

    resolved = _resolve_children({k: v for k, v in schema.items() if k not in COMBINATORS})

    all_of = schema.get("allOf")
    if isinstance(all_of, list):
        resolved = deep_merge(merge_all_of(all_of), resolved)

    for key in ("oneOf", "anyOf"):
        alternatives = schema.get(key)
        if isinstance(alternatives, list) and alternatives:
            resolved = deep_merge(resolve_schema(alternatives[0]), resolved)
            break

    return resolved


def _resolve_children(schema: dict) -> dict:
    result = dict(schema)

    properties = schema.get("properties")
    if isinstance(properties, dict):
        result["properties"] = {name: resolve_schema(prop) for name, prop in properties.items()}

    items = schema.get("items")
    if isinstance(items, list):
        result["items"] = [resolve_schema(item) for item in items]
    elif isinstance(items, dict):
        result["items"] = resolve_schema(items)

    additional = schema.get("additionalProperties")
    if isinstance(additional, dict):
        result["additionalProperties"] = resolve_schema(additional)

    return result


def enum_to_options(schema: dict) -> dict:
    """Turn an ``enum`` declaration into an ``options`` field."""
    if "enum" not in schema:
        return schema
    result = {k: v for k, v in schema.items() if k != "enum"}
    result["type"] = "options"
    result["options"] = list(schema["enum"])
    return result


def is_visible(prop: dict, method: str) -> bool:
    """Whether a property's read/write annotation agrees with the request direction."""
    if prop.get("readOnly") and method.upper() != "GET":
        return False
    if prop.get("writeOnly") and method.upper() == "GET":
        return False
    return True


def sanitize_schema(schema: dict, method: str) -> dict:
    """Camel-case, retype, filter and sort the properties of a schema.

    Raises SpecError when two property names fold into the same camelCase name.
    """
    result = dict(enum_to_options(schema))

    properties = schema.get("properties")
    if isinstance(properties, dict):
        sanitized = {}
        origins: dict[str, str] = {}
        for name, prop in properties.items():
            if isinstance(prop, dict) and not is_visible(prop, method):
                logger.debug("Dropping property %r for %s", name, method.upper())
                continue
            renamed = field_name(name)
            if renamed in origins:
                raise SpecError(f"Properties {origins[renamed]!r} and {name!r} both map to {renamed!r}")
            origins[renamed] = name
            sanitized[renamed] = sanitize_schema(prop, method) if isinstance(prop, dict) else prop
        result["properties"] = dict(sorted(sanitized.items()))

        required = schema.get("required")
        if isinstance(required, list):
            names = [field_name(n) for n in required]
            result["required"] = [n for n in dict.fromkeys(names) if n in sanitized]

    items = schema.get("items")
    if isinstance(items, dict):
        result["items"] = sanitize_schema(items, method)

    return result


def split_required(schema: dict) -> tuple[dict, dict]:
    """Partition the properties of a schema into (required, optional)."""
    properties = schema.get("properties") or {}
    required = set(schema.get("required") or [])
    standard = {name: prop for name, prop in properties.items() if name in required}
    extra = {name: prop for name, prop in properties.items() if name not in required}
    return standard, extra
