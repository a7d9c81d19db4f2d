"""Operation-level conversion: one (path, verb, operation) -> OperationConfig."""

from typing import Any

from api_playground.errors import DocumentParseError

from .models import BodyFields, OperationConfig
from .schema import normalize_body, normalize_parameter

HTTP_METHODS = ("get", "post", "put", "delete", "patch")


def convert_operation(path: str, method: str, operation: dict) -> OperationConfig:
    """Build the OperationConfig for a single OpenAPI operation."""
    if not isinstance(operation, dict):
        raise DocumentParseError(
            f"Operation {method.upper()} {path} is a {type(operation).__name__}, expected a mapping"
        )

    op = OperationConfig(verb=method.upper(), endpoint=path)

    description = operation.get("description")
    if isinstance(description, str) and description:
        op.description = description

    parameters = operation.get("parameters")
    if isinstance(parameters, list):
        for param in parameters:
            normalized = normalize_parameter(param)
            if normalized is None:
                continue
            location, name, config = normalized
            op.parameters.setdefault(location, {})[name] = config

    body = normalize_body(operation.get("requestBody"))
    if body is not None:
        op.parameters["body"] = body

    return op


def has_array_body(op: OperationConfig | dict | None) -> bool:
    """Whether the operation's body is an array-of-objects template."""
    return isinstance(_body(op), list)


def get_array_body_item_schema(op: OperationConfig | dict | None) -> BodyFields | dict | None:
    """Return the single item schema of an array body, or None."""
    body = _body(op)
    if not isinstance(body, list) or not body:
        return None
    return body[0]


def _body(op: Any) -> Any:
    if isinstance(op, OperationConfig):
        return op.parameters.get("body")
    if isinstance(op, dict):
        parameters = op.get("parameters")
        if isinstance(parameters, dict):
            return parameters.get("body")
    return None
