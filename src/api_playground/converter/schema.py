"""Schema-level normalization: types, enums, parameters and request bodies.

Every function here degrades on malformed input (missing or wrongly typed
fields fall back to defaults) instead of raising.
"""

import logging
from typing import Any

from .models import BodyFields, ParamConfig, ParamType

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

_TYPE_MAP: dict[str, ParamType] = {
    "integer": "number",
    "number": "number",
    "array": "array",
    "boolean": "boolean",
    "string": "string",
}


def map_type(openapi_type: Any) -> ParamType:
    """Map an OpenAPI primitive type name to a test config type tag."""
    if isinstance(openapi_type, str):
        return _TYPE_MAP.get(openapi_type, "string")
    return "string"


def extract_enum_options(schema: Any) -> list | None:
    """Return the schema's enum values, or None when it declares no enum."""
    if not isinstance(schema, dict):
        return None
    values = schema.get("enum")
    if isinstance(values, (list, tuple)):
        return list(values)
    return None


def normalize_parameter(param: Any) -> tuple[str, str, ParamConfig] | None:
    """Normalize one OpenAPI parameter object.

    Returns ``(location, name, config)``, or None when the descriptor has
    no usable name.
    """
    if not isinstance(param, dict) or not isinstance(param.get("name"), str):
        logger.debug("Skipping parameter without a name: %r", param)
        return None

    schema = _as_dict(param.get("schema"))
    location = param.get("in")
    if not isinstance(location, str) or not location:
        location = "query"

    config = ParamConfig(
        type=map_type(schema.get("type")),
        required=bool(param.get("required", False)),
        description=_description(param),
        options=extract_enum_options(schema),
    )
    return location, param["name"], config


def normalize_body(request_body: Any) -> BodyFields | list[BodyFields] | None:
    """Normalize a requestBody's JSON schema.

    Object schemas become a flat ``{name: ParamConfig}`` mapping. Array
    schemas become a one-element list holding the item schema. The array
    branch is applied last, so it wins for schemas that declare both.
    """
    schema = _json_schema(request_body)
    if schema is None:
        return None

    body: BodyFields | list[BodyFields] | None = None

    properties = schema.get("properties")
    if isinstance(properties, dict):
        body = _property_fields(properties, schema.get("required"))

    items = schema.get("items")
    if schema.get("type") == "array" and isinstance(items, dict):
        item_properties = _as_dict(items.get("properties"))
        body = [_property_fields(item_properties, items.get("required"))]

    return body


def _property_fields(properties: dict, required: Any) -> BodyFields:
    if not isinstance(required, list):
        required = []
    required_names = {n for n in required if isinstance(n, str)}

    fields: BodyFields = {}
    for name, prop in properties.items():
        prop = _as_dict(prop)
        config = ParamConfig(
            type=map_type(prop.get("type")),
            required=name in required_names,
            description=_description(prop),
            options=extract_enum_options(prop),
        )
        if prop.get("type") == "array":
            item_options = extract_enum_options(prop.get("items"))
            if item_options is not None:
                config.options = item_options
                config.multiple_select = True
        fields[str(name)] = config
    return fields


def _json_schema(request_body: Any) -> dict | None:
    content = _as_dict(_as_dict(request_body).get("content"))
    media = _as_dict(content.get(JSON_CONTENT_TYPE))
    schema = media.get("schema")
    if isinstance(schema, dict):
        return schema
    return None


def _description(node: dict) -> str:
    description = node.get("description")
    return description if isinstance(description, str) else ""


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}
