"""Exception types raised by api-playground."""


class PlaygroundError(Exception):
    """Base class for api-playground errors."""


class DocumentParseError(PlaygroundError):
    """A document is not a recognizable OpenAPI tree."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class RequestBuildError(PlaygroundError):
    """User input cannot be turned into a request for an operation."""
