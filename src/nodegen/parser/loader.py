"""Spec loading and ``$ref`` dereferencing.

Two ways to get a dereferenced document: resolve local JSON pointers in
process, or run an external bundler (``swagger-cli bundle --dereference``)
and read the file it writes.
"""

import copy
import json
import logging
import shlex
import subprocess
from pathlib import Path

import yaml

from nodegen.parser.base import SpecError

logger = logging.getLogger(__name__)


def load_document(file_path: Path) -> dict:
    """Parse a JSON or YAML document into a mapping."""
    text = file_path.read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecError(f"Cannot parse {file_path}: {e}") from e
    if not isinstance(doc, dict):
        raise SpecError(f"Expected {file_path} to contain a mapping")
    return doc


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def resolve_pointer(document: dict, ref: str):
    """Return the node a local ``#/a/b`` reference points to."""
    if not ref.startswith("#"):
        raise SpecError(f"External references are not supported: {ref}")

    node = document
    for token in ref.lstrip("#").strip("/").split("/"):
        if not token:
            continue
        key = _unescape(token)
        if isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        elif isinstance(node, dict) and key in node:
            node = node[key]
        else:
            raise SpecError(f"Unresolvable reference: {ref}")
    return node


def dereference(document: dict) -> dict:
    """Return a copy of ``document`` with every local ``$ref`` inlined.

    Keys next to a ``$ref`` are merged over the referenced node. A reference
    met again inside its own expansion is inlined as-is, its nested
    references left in place.
    """

    def walk(node, active: tuple[str, ...]):
        if isinstance(node, list):
            return [walk(item, active) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str):
            target = resolve_pointer(document, ref)
            siblings = {k: v for k, v in node.items() if k != "$ref"}
            if ref in active:
                logger.debug("Circular reference %s left unexpanded", ref)
                resolved = {k: v for k, v in copy.deepcopy(target).items() if k != "$ref"}
            else:
                resolved = walk(target, active + (ref,))
            if isinstance(resolved, dict):
                resolved = {**resolved, **walk(siblings, active)}
            return resolved

        return {key: walk(value, active) for key, value in node.items()}

    return walk(document, ())


def bundle(source: Path, target: Path, command: str) -> dict:
    """Dereference ``source`` with an external bundler and load the result."""
    target.parent.mkdir(parents=True, exist_ok=True)
    args = shlex.split(command) + ["bundle", "--dereference", str(source), "--outfile", str(target)]
    logger.info("Running %s", " ".join(args))
    try:
        subprocess.run(args, check=True, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise SpecError(f"Bundler not found: {args[0]}") from e
    except subprocess.CalledProcessError as e:
        raise SpecError(f"Bundler failed for {source}: {e.stderr.strip()}") from e

    return json.loads(target.read_text(encoding="utf-8"))


def load_spec(file_path: Path, *, bundler: str | None = None, work_path: Path | None = None) -> dict:
    """Load and dereference a spec, via the bundler when one is given."""
    if bundler:
        return bundle(file_path, work_path or Path("_deref.json"), bundler)
    return dereference(load_document(file_path))
