"""Auto-detect the input format."""

from pathlib import Path

from nodegen.parser.base import SpecError
from nodegen.parser.loader import load_document


def detect_format(file_path: Path) -> str:
    """Detect the format of an API description file.

    Returns: 'openapi' or 'custom'.
    """
    data = load_document(file_path)

    if "openapi" in data or "swagger" in data:
        return "openapi"
    if "mainParams" in data:
        return "custom"

    raise SpecError(f"{file_path} is neither an OpenAPI document nor a custom schema")
