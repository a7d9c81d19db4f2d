from pathlib import Path

import pytest

from api_playground.converter.document import convert
from api_playground.converter.models import OperationConfig
from api_playground.parser.reader import load_paths
from api_playground.runner.mock import MockBackend, error_response, success_response
from api_playground.runner.request import PreparedRequest, build_request, get_test_config

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def config():
    return convert(load_paths([FIXTURES / "item.yaml", FIXTURES / "batch.yaml"])).config


@pytest.fixture
def backend(config):
    return MockBackend.from_config(config)


def _send(backend, config, resource, action, inputs):
    op = get_test_config(config, resource, action)
    return backend.dispatch(build_request(op, inputs))


class TestEnvelopes:
    def test_success_envelope(self):
        resp = success_response([{"id": 1}], 201, "CREATED", "Created")
        assert resp["success"] is True
        assert resp["status"] == 201
        assert resp["meta"]["http_status_code"] == 201
        assert resp["meta"]["success"] == {"code": "CREATED", "message": "Created"}

    def test_error_envelope(self):
        resp = error_response(404, "NOT_FOUND", "missing")
        assert resp["success"] is False
        assert resp["data"] == []
        assert resp["meta"]["error"] == {"code": "NOT_FOUND", "message": "missing"}


class TestRouting:
    def test_custom_handler_receives_path_params(self):
        backend = MockBackend()
        seen = {}

        def handler(request, path_params):
            seen.update(path_params)
            return success_response([])

        backend.register("GET", "/items/:id/colors/{color}", handler)
        backend.dispatch(PreparedRequest(method="GET", url="/api/items/5/colors/red?x=1"))
        assert seen == {"id": "5", "color": "red"}

    def test_path_params_are_url_decoded(self):
        backend = MockBackend()
        backend.register("PUT", "/files/{name}", lambda r, p: success_response(p))
        op = {"verb": "PUT", "endpoint": "/files/{name}", "parameters": {"path": {"name": {"type": "string"}}}}
        request = build_request(OperationConfig.model_validate(op), {"name": "a b"})
        resp = backend.dispatch(request)
        assert resp["data"] == {"name": "a b"}

    def test_literal_route_preferred_over_template(self):
        backend = MockBackend()
        backend.register("GET", "/items/:id", lambda r, p: success_response("by-id"))
        backend.register("GET", "/items/details", lambda r, p: success_response("details"))
        resp = backend.dispatch(PreparedRequest(method="GET", url="/api/items/details"))
        assert resp["data"] == "details"

    def test_unknown_route_is_404(self):
        resp = MockBackend().dispatch(PreparedRequest(method="GET", url="/api/nothing"))
        assert resp["status"] == 404
        assert resp["meta"]["error"]["code"] == "NOT_FOUND"

    def test_method_must_match(self):
        backend = MockBackend()
        backend.register("POST", "/items", lambda r, p: success_response([]))
        resp = backend.dispatch(PreparedRequest(method="GET", url="/api/items"))
        assert resp["status"] == 404

    def test_long_lists_are_truncated(self):
        backend = MockBackend(max_items=3)
        backend.register("GET", "/items", lambda r, p: success_response(list(range(10))))
        resp = backend.dispatch(PreparedRequest(method="GET", url="/api/items"))
        assert resp["data"] == [0, 1, 2]
        assert resp["meta"]["truncated"] is True
        assert resp["meta"]["total_count"] == 10


class TestDefaultHandlers:
    def test_get_echoes_query(self, backend, config):
        resp = _send(backend, config, "Item", "get", {"id": "7", "page": 1})
        assert resp["status"] == 200
        assert resp["data"] == [{"id": "7"}]

    def test_post_missing_required_fields(self, backend, config):
        resp = _send(backend, config, "Item", "post", {"weight": 1})
        assert resp["status"] == 400
        assert resp["meta"]["error"]["message"] == "Missing required fields: number, type"

    def test_post_creates_with_id(self, backend, config):
        resp = _send(backend, config, "Item", "post", {"number": "3001", "type": "PART"})
        assert resp["status"] == 201
        assert resp["data"] == [{"id": 1, "number": "3001", "type": "PART"}]

    def test_array_post_validates_each_item(self, backend, config):
        resp = _send(backend, config, "Batch", "create", {"body": [{"number": "1"}, {"quantity": 2}]})
        assert resp["status"] == 400
        assert "number" in resp["meta"]["error"]["message"]

    def test_array_post_creates_all_items(self, backend, config):
        resp = _send(backend, config, "Batch", "create", {"body": [{"number": "1"}, {"number": "2"}]})
        assert [item["id"] for item in resp["data"]] == [1, 2]

    def test_put_merges_path_params(self, backend, config):
        resp = _send(backend, config, "Item", "update", {"id": 4, "name": "Brick"})
        assert resp["data"] == [{"id": "4", "name": "Brick"}]

    def test_put_without_body(self, backend, config):
        resp = _send(backend, config, "Item", "update", {"id": 4})
        assert resp["status"] == 400
        assert resp["meta"]["error"]["message"] == "Missing request body"

    def test_delete(self, backend, config):
        resp = _send(backend, config, "Item", "delete", {"id": 4})
        assert resp["success"] is True
        assert resp["data"] == []
