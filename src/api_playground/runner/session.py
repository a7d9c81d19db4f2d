"""Per-session playground state: inputs, open sections and the last exchange."""

import logging
from typing import Any

from api_playground.config import DEFAULT_BASE_PATH
from api_playground.converter.models import Resource
from api_playground.errors import RequestBuildError

from .mock import MockBackend, error_response
from .request import PreparedRequest, build_request, get_test_config, mandatory_params, missing_params

logger = logging.getLogger(__name__)


class PlaygroundSession:
    """Holds the state of one user's playground, independent of other sessions."""

    def __init__(self, config: dict[str, Resource], backend: MockBackend | None = None,
                 base_path: str = DEFAULT_BASE_PATH):
        self.config = config
        self.base_path = base_path
        self.backend = backend or MockBackend.from_config(config, base_path=base_path)
        self.open_sections: dict[str, bool] = {}
        self.inputs: dict[str, dict[str, Any]] = {}
        self.last_request: PreparedRequest | None = None
        self.last_response: dict | None = None
        self.error: str | None = None

    def toggle(self, section: str) -> bool:
        """Flip a section between open and collapsed; returns the new state."""
        self.open_sections[section] = not self.open_sections.get(section, False)
        return self.open_sections[section]

    def set_input(self, resource: str, action: str, name: str, value: Any) -> None:
        self.inputs.setdefault(f"{resource}.{action}", {})[name] = value

    def send(self, resource: str, action: str, inputs: dict[str, Any] | None = None) -> dict:
        """Build and dispatch a request for one action, recording the outcome.

        Uses the stored inputs for the action when ``inputs`` is not given.
        """
        self.reset()
        if inputs is None:
            inputs = self.inputs.get(f"{resource}.{action}", {})

        op = get_test_config(self.config, resource, action)
        try:
            request = build_request(op, inputs, base_path=self.base_path)
        except RequestBuildError as e:
            self.error = str(e)
            raise
        self.last_request = request

        missing = missing_params(mandatory_params(op), request.query_params, request.path_params)
        if missing:
            response = error_response(
                400, "MISSING_PARAMETER", f"Missing required parameters: {', '.join(missing)}"
            )
        else:
            response = self.backend.dispatch(request)

        self.last_response = response
        if not response["success"]:
            self.error = response["meta"]["error"]["message"]
            logger.info("%s %s failed: %s", request.method, request.url, self.error)
        return response

    def reset(self) -> None:
        """Clear the last request, response and error."""
        self.last_request = None
        self.last_response = None
        self.error = None
