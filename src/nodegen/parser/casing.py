"""String case helpers shared by the stagers and the templates."""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")

# Words that do not follow the suffix rules below.
_IRREGULAR_SINGULARS = {
    "people": "person",
    "children": "child",
    "men": "man",
    "women": "woman",
    "data": "data",
    "media": "media",
    "news": "news",
    "series": "series",
    "status": "status",
    "address": "address",
    "analysis": "analysis",
}


def split_words(text: str) -> list[str]:
    """Split camelCase, snake_case, kebab-case and spaced text into words."""
    words = []
    for chunk in _WORD_SPLIT.split(text):
        words.extend(w for w in _CAMEL_BOUNDARY.split(chunk) if w)
    return words


def camel_case(text: str) -> str:
    words = split_words(text)
    if not words:
        return ""
    head, *rest = words
    return head.lower() + "".join(w.capitalize() for w in rest)


def pascal_case(text: str) -> str:
    return "".join(w.capitalize() for w in split_words(text))


def capital_case(text: str) -> str:
    return " ".join(w.capitalize() for w in split_words(text))


def snake_case(text: str) -> str:
    return "_".join(w.lower() for w in split_words(text))


def kebab_case(text: str) -> str:
    return "-".join(w.lower() for w in split_words(text))


def field_name(name: str) -> str:
    """Rewrite a property name as camelCase (``first_name`` -> ``firstName``)."""
    return camel_case(name) or name


def singularize(word: str) -> str:
    """Singularize the last word of ``word``, keeping its case."""
    head, sep, last = word.rpartition(" ")
    lower = last.lower()

    if lower in _IRREGULAR_SINGULARS:
        single = _IRREGULAR_SINGULARS[lower]
    elif lower.endswith("ies") and len(lower) > 3:
        single = lower[:-3] + "y"
    elif lower.endswith(("sses", "shes", "ches", "xes", "zzes", "uses")):
        single = lower[:-2]
    elif lower.endswith("ses") and len(lower) > 4:
        single = lower[:-1]
    elif lower.endswith("s") and not lower.endswith(("ss", "us", "is")):
        single = lower[:-1]
    else:
        single = lower

    if last[:1].isupper():
        single = single[:1].upper() + single[1:]
    return head + sep + single


def is_plural(word: str) -> bool:
    return singularize(word).lower() != word.lower()
