"""Build concrete requests from an OperationConfig and user-entered values."""

import re
from typing import Any
from urllib.parse import quote, urlencode

from pydantic import BaseModel, Field

from api_playground.config import DEFAULT_BASE_PATH
from api_playground.converter.models import BodyFields, OperationConfig, Resource
from api_playground.converter.operation import get_array_body_item_schema, has_array_body
from api_playground.errors import RequestBuildError

BODY_METHODS = ("POST", "PUT", "PATCH")

# Accepted on every GET but hidden from the generated form
PAGINATION_PARAMS = ("page", "per_page", "limit", "sort", "order")
HIDDEN_PAGINATION_PARAMS = ("page", "per_page", "sort", "order")


class PreparedRequest(BaseModel):
    """A fully built request, ready for dispatch."""

    method: str
    url: str
    query_params: dict[str, Any] = Field(default_factory=dict)
    path_params: dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    headers: dict[str, str] = Field(default_factory=lambda: {"Content-Type": "application/json"})


def can_method_have_body(method: str) -> bool:
    return method.upper() in BODY_METHODS


def get_test_config(config: dict[str, Resource], resource: str, action: str) -> OperationConfig:
    """Return a copy of one operation, with pagination params hidden on GETs.

    Raises KeyError when the resource or action is unknown.
    """
    try:
        op = config[resource].operations[action]
    except KeyError:
        raise KeyError(f"Test configuration not found for {resource}.{action}") from None

    op = op.model_copy(deep=True)
    query = op.parameters.get("query")
    if op.verb == "GET" and isinstance(query, dict):
        op.parameters["query"] = {
            name: param for name, param in query.items()
            if name not in HIDDEN_PAGINATION_PARAMS
        }
    return op


def mandatory_params(op: OperationConfig) -> list[str]:
    """Names of required query and path parameters."""
    names = []
    for location in ("query", "path"):
        params = op.parameters.get(location)
        if isinstance(params, dict):
            names.extend(name for name, param in params.items() if param.required)
    return names


def missing_params(mandatory: list[str], query: dict, path: dict) -> list[str]:
    """Mandatory parameter names that have no non-blank value."""
    values = {**query, **path}
    return [name for name in mandatory if _is_empty(values.get(name)) or not str(values[name]).strip()]


def validate_mandatory_params(mandatory: list[str], query: dict, path: dict) -> bool:
    """Check that every mandatory parameter has a non-blank value."""
    return not missing_params(mandatory, query, path)


def build_request(op: OperationConfig, inputs: dict, base_path: str = DEFAULT_BASE_PATH) -> PreparedRequest:
    """Turn user inputs into a PreparedRequest for the given operation.

    ``inputs`` is a flat ``{name: value}`` mapping; for array bodies
    ``inputs["body"]`` holds the list of item values.
    """
    request = PreparedRequest(
        method=op.verb,
        url=op.endpoint if op.endpoint.startswith("/") else f"/{op.endpoint}",
    )

    for location, target in (("query", request.query_params), ("path", request.path_params)):
        params = op.parameters.get(location)
        if isinstance(params, dict):
            for name in params:
                if not _is_empty(inputs.get(name)):
                    target[name] = inputs[name]

    if op.verb == "GET":
        for name in PAGINATION_PARAMS:
            if not _is_empty(inputs.get(name)):
                request.query_params[name] = inputs[name]

    if op.parameters.get("body") and can_method_have_body(op.verb):
        if has_array_body(op):
            request.body = _array_body(get_array_body_item_schema(op) or {}, inputs.get("body"))
        else:
            request.body = _shape_item(op.parameters["body"], inputs) or None

    request.url = construct_url(request.url, request.query_params, request.path_params, base_path)
    return request


def construct_url(endpoint: str, query: dict | None = None, path: dict | None = None,
                  base_path: str = DEFAULT_BASE_PATH) -> str:
    """Prefix the base path, substitute placeholders and append the query string."""
    url = endpoint
    if base_path and not (url == base_path or url.startswith(base_path.rstrip("/") + "/")):
        url = base_path.rstrip("/") + url

    for name, value in (path or {}).items():
        encoded = quote(str(value), safe="")
        url = url.replace("{" + name + "}", encoded)
        url = re.sub(rf":{re.escape(name)}(?=/|$)", lambda _: encoded, url)

    pairs = [(k, v) for k, v in (query or {}).items() if not _is_empty(v)]
    if pairs:
        url = f"{url}?{urlencode(pairs, doseq=True)}"
    return url


def _array_body(schema: BodyFields, values: Any) -> list[dict]:
    if not isinstance(values, list):
        return []
    items = []
    for value in values:
        if isinstance(value, dict):
            item = _shape_item(schema, value)
            if item:
                items.append(item)
    return items


def _shape_item(schema: BodyFields, values: dict) -> dict:
    item = {}
    for name, param in schema.items():
        value = values.get(name)
        if _is_empty(value):
            continue
        if param.type == "number":
            item[name] = _to_number(name, value)
        elif param.type == "array":
            item[name] = value if isinstance(value, list) else [value]
        else:
            item[name] = value
    return item


def _to_number(name: str, value: Any) -> int | float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        raise RequestBuildError(f"Field {name!r} expects a number, got {value!r}") from None


def _is_empty(value: Any) -> bool:
    return value is None or value == ""
