"""Dumps of the nodegen params for inspection."""

import json
from pathlib import Path

import yaml

from nodegen.parser.base import NodegenParams
from nodegen.parser.operation_id import CANONICAL_IDS


def to_json(params: NodegenParams) -> str:
    return json.dumps(params.dump(), indent=2, ensure_ascii=False) + "\n"


def api_map(params: NodegenParams) -> dict[str, list[dict]]:
    """Resource -> operations overview, flagging ids outside the canonical set."""
    result = {}
    for resource, operations in params.main_params.items():
        entries = []
        for operation in operations:
            entry = {
                "nodeOperation": operation.operation_id,
                "requestMethod": operation.request_method,
                "endpoint": operation.endpoint,
            }
            if operation.operation_id not in CANONICAL_IDS:
                entry["IRREGULAR"] = "operation id outside the canonical vocabulary"
            entries.append(entry)
        result[resource] = entries
    return result


def write_outputs(params: NodegenParams, output_dir: Path) -> list[Path]:
    """Write the JSON dump and the api map, returning the written paths."""
    output_dir.mkdir(parents=True, exist_ok=True)

    json_path = output_dir / "nodegen-params.json"
    json_path.write_text(to_json(params), encoding="utf-8")

    map_path = output_dir / "api-map.yaml"
    map_path.write_text(yaml.safe_dump(api_map(params), sort_keys=False, allow_unicode=True), encoding="utf-8")

    return [json_path, map_path]
