"""In-process mock backend.

Requests built by ``runner.request`` are dispatched here instead of to a
live server. Responses use the same JSON envelope as the HTTP service:
``{success, data, meta: {http_status_code, success|error}, headers, status}``.
"""

import itertools
import logging
import re
from collections.abc import Callable
from typing import Any, NamedTuple
from urllib.parse import unquote

from api_playground.config import DEFAULT_BASE_PATH, DEFAULT_MAX_RESPONSE_ITEMS
from api_playground.converter.models import OperationConfig, Resource
from api_playground.converter.operation import get_array_body_item_schema, has_array_body

from .request import HIDDEN_PAGINATION_PARAMS, PreparedRequest, can_method_have_body, construct_url

logger = logging.getLogger(__name__)

Handler = Callable[[PreparedRequest, dict[str, str]], dict]

_PLACEHOLDER = re.compile(r"\{([^/}]+)\}|:([^/]+)")

JSON_HEADERS = {"content-type": "application/json"}


def success_response(data: Any, status: int = 200, code: str = "SUCCESS",
                     message: str = "Operation successful") -> dict:
    return {
        "data": data,
        "success": True,
        "meta": {
            "http_status_code": status,
            "success": {"code": code, "message": message},
        },
        "headers": dict(JSON_HEADERS),
        "status": status,
    }


def error_response(status: int, code: str, message: str, data: Any = None) -> dict:
    return {
        "data": [] if data is None else data,
        "success": False,
        "meta": {
            "http_status_code": status,
            "error": {"code": code, "message": message},
        },
        "headers": dict(JSON_HEADERS),
        "status": status,
    }


class _Route(NamedTuple):
    method: str
    template: str
    pattern: re.Pattern
    names: list[str]
    handler: Handler


class MockBackend:
    """Routes prepared requests to registered handlers."""

    def __init__(self, base_path: str = DEFAULT_BASE_PATH, max_items: int = DEFAULT_MAX_RESPONSE_ITEMS):
        self.base_path = base_path
        self.max_items = max_items
        self._routes: list[_Route] = []

    @classmethod
    def from_config(cls, config: dict[str, Resource], base_path: str = DEFAULT_BASE_PATH,
                    max_items: int = DEFAULT_MAX_RESPONSE_ITEMS) -> "MockBackend":
        """Register a generic handler for every operation in a test configuration."""
        backend = cls(base_path=base_path, max_items=max_items)
        for resource in config.values():
            for op in resource.operations.values():
                backend.register(op.verb, op.endpoint, _default_handler(op))
        return backend

    def register(self, method: str, endpoint: str, handler: Handler) -> None:
        template = construct_url(endpoint if endpoint.startswith("/") else f"/{endpoint}",
                                 base_path=self.base_path)
        pattern, names = _compile(template)
        self._routes.append(_Route(method.upper(), template, pattern, names, handler))

    def dispatch(self, request: PreparedRequest) -> dict:
        path = request.url.split("?", 1)[0]
        # literal routes before templated ones, otherwise registration order
        for route in sorted(self._routes, key=lambda r: len(r.names)):
            if route.method != request.method.upper():
                continue
            match = route.pattern.fullmatch(path)
            if match is None:
                continue
            path_params = {name: unquote(value) for name, value in zip(route.names, match.groups())}
            logger.debug("Mock %s %s matched %s", request.method, path, route.template)
            return self._truncate(route.handler(request, path_params))

        logger.info("No mock route for %s %s", request.method, path)
        return error_response(404, "NOT_FOUND", f"No mock registered for {request.method} {path}")

    def _truncate(self, response: dict) -> dict:
        data = response.get("data")
        if isinstance(data, list) and len(data) > self.max_items:
            response["data"] = data[: self.max_items]
            response["meta"]["truncated"] = True
            response["meta"]["total_count"] = len(data)
        return response


def _compile(template: str) -> tuple[re.Pattern, list[str]]:
    parts = []
    names = []
    pos = 0
    for m in _PLACEHOLDER.finditer(template):
        parts.append(re.escape(template[pos:m.start()]))
        parts.append("([^/]+)")
        names.append(m.group(1) or m.group(2))
        pos = m.end()
    parts.append(re.escape(template[pos:]))
    return re.compile("".join(parts)), names


def _default_handler(op: OperationConfig) -> Handler:
    ids = itertools.count(1)

    def handle(request: PreparedRequest, path_params: dict[str, str]) -> dict:
        if can_method_have_body(op.verb) and op.parameters.get("body"):
            if request.body is None:
                return error_response(400, "VALIDATION_ERROR", "Missing request body")
            if op.verb == "POST":
                missing = _missing_required(op, request.body)
                if missing:
                    return error_response(
                        400, "VALIDATION_ERROR", f"Missing required fields: {', '.join(missing)}"
                    )

        if op.verb == "GET":
            record: dict[str, Any] = {"id": 1, **path_params}
            record.update(
                (k, v) for k, v in request.query_params.items() if k not in HIDDEN_PAGINATION_PARAMS
            )
            return success_response([record])

        if op.verb == "POST":
            items = request.body if isinstance(request.body, list) else [request.body or {}]
            created = [{"id": next(ids), **item} for item in items]
            return success_response(created, 201, "CREATED", "Resource created successfully")

        if op.verb in ("PUT", "PATCH"):
            updated = request.body if isinstance(request.body, list) else [{**path_params, **(request.body or {})}]
            return success_response(updated, 200, "UPDATED", "Resource updated successfully")

        return success_response([], 200, "DELETED", "Resource deleted successfully")

    return handle


def _missing_required(op: OperationConfig, body: Any) -> list[str]:
    if has_array_body(op):
        schema = get_array_body_item_schema(op) or {}
        items = body if isinstance(body, list) else []
    else:
        schema = op.parameters["body"]
        items = [body] if isinstance(body, dict) else []

    required = [name for name, param in schema.items() if param.required]
    if not items:
        return required

    missing = []
    for item in items:
        for name in required:
            if name not in item and name not in missing:
                missing.append(name)
    return missing
