"""Auto-detect whether a file is an OpenAPI document."""

import json
from pathlib import Path

import yaml


def is_openapi(data: object) -> bool:
    return isinstance(data, dict) and ("openapi" in data or "swagger" in data)


def detect_format(file_path: Path) -> str:
    """Detect the format of an API description file.

    Returns: 'openapi' or 'unknown'.
    """
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return "unknown"

    # Try YAML/JSON parsing
    try:
        if is_openapi(yaml.safe_load(text)):
            return "openapi"
    except yaml.YAMLError:
        pass

    # Try JSON specifically (for files not parseable as YAML)
    try:
        if is_openapi(json.loads(text)):
            return "openapi"
    except ValueError:
        pass

    return "unknown"
