"""Operation-id derivation.

Maps the many verb dialects found in OpenAPI documents onto a small
vocabulary (``get``, ``getAll``, ``create``, ``update``, ``delete``) so the
templates can phrase every operation the same way.

Each id is derived as a candidate pair: the canonical id and a variant that
keeps the surplus part of the original id. Within one resource, candidates
sharing a canonical id fall back to their variants; whatever still collides
gets a numeric suffix in document order.
"""

import logging
import re
from collections import Counter
from typing import NamedTuple

from nodegen.parser.casing import camel_case, is_plural, pascal_case, split_words

logger = logging.getLogger(__name__)

CANONICAL_IDS = ("create", "delete", "get", "getAll", "update")

_GET_X = re.compile(r"^get[A-Z0-9]")
# (prefix, canonical id) checked in order after the getX rule
_PREFIX_RULES = (
    ("edit", "update"),
    ("add", "create"),
    ("fetchAll", "getAll"),
    ("list", "getAll"),
)


class IdCandidate(NamedTuple):
    canonical: str
    variant: str | None = None


def _starts_with_word(text: str, prefix: str) -> bool:
    if not text.startswith(prefix):
        return False
    rest = text[len(prefix):]
    return not rest or not rest[0].islower()


def _plural_forms(word: str) -> list[str]:
    forms = [word + "es", word + "s"]
    if word.endswith("y"):
        forms.insert(0, word[:-1] + "ies")
    return forms


def strip_resource(text: str, resource: str) -> str:
    """Remove the resource name (singular or plural) from an identifier."""
    pascal = pascal_case(resource)
    camel = camel_case(resource)
    if not pascal:
        return text
    for token in _plural_forms(pascal) + [pascal]:
        text = re.sub(re.escape(token) + r"(?![a-z])", "", text)
    for token in _plural_forms(camel) + [camel]:
        text = re.sub("^" + re.escape(token) + r"(?![a-z])", "", text)
    return text


def _surplus(raw_id: str, prefix: str, resource: str) -> str:
    text = raw_id[len(prefix):]
    if text.endswith("ById"):
        text = text[: -len("ById")]
    text = strip_resource(text, resource)
    return text[:1].upper() + text[1:]


def synthesize_id(method: str, endpoint: str, summary: str | None = None) -> str:
    """Build an id for an operation whose document does not name one."""
    if summary and pascal_case(summary):
        return pascal_case(summary)
    segments = [s for s in endpoint.split("/") if s and not s.startswith("{")]
    if not segments:
        return method.lower()
    return method.lower() + pascal_case(segments[-1])


def derive_candidate(
    raw_id: str | None,
    resource: str,
    method: str,
    endpoint: str,
    summary: str | None = None,
) -> IdCandidate:
    """Apply the first matching normalization rule to a single id."""
    if not raw_id:
        return IdCandidate(synthesize_id(method, endpoint, summary))

    if raw_id.endswith("ById"):
        words = split_words(raw_id)
        verb = words[0] if raw_id[:1].islower() else ""
        surplus = _surplus(raw_id, verb, resource)
        return IdCandidate("get", "get" + surplus if surplus else None)

    if _GET_X.match(raw_id):
        last_word = split_words(raw_id)[-1]
        if is_plural(last_word):
            surplus = _surplus(raw_id, "get", resource)
            return IdCandidate("getAll", "get" + surplus if surplus else None)

    for prefix, canonical in _PREFIX_RULES:
        if _starts_with_word(raw_id, prefix):
            surplus = _surplus(raw_id, prefix, resource)
            return IdCandidate(canonical, canonical + surplus if surplus else None)

    stripped = strip_resource(raw_id, resource)
    if not stripped:
        return IdCandidate(raw_id)
    stripped = stripped[:1].lower() + stripped[1:]
    return IdCandidate(stripped, raw_id if stripped != raw_id else None)


def assign_operation_ids(candidates: list[IdCandidate]) -> list[str]:
    """Resolve a resource's candidates into unique ids, preserving order."""
    counts = Counter(c.canonical for c in candidates)

    preferred = []
    for candidate in candidates:
        if counts[candidate.canonical] > 1 and candidate.variant:
            logger.debug("Id %r collides, using %r", candidate.canonical, candidate.variant)
            preferred.append(candidate.variant)
        else:
            preferred.append(candidate.canonical)

    taken: set[str] = set()
    result = []
    for op_id in preferred:
        unique, n = op_id, 1
        while unique in taken:
            n += 1
            unique = f"{op_id}{n}"
        if unique != op_id:
            logger.warning("Operation id %r is ambiguous, renamed to %r", op_id, unique)
        taken.add(unique)
        result.append(unique)
    return result
