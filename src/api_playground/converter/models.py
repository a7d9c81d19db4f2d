"""Data models for the normalized test configuration.

The converter turns OpenAPI documents into these models; consumers
(renderer, request runner, HTTP service) read them or their plain-dict
form produced by ``to_dict()``.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

ParamType = Literal["string", "number", "array", "boolean"]


class ParamConfig(BaseModel):
    """A single normalized parameter (query, path, header or body field)."""

    type: ParamType = "string"
    required: bool = False
    description: str = ""
    options: list[Any] | None = None
    multiple_select: bool | None = None


BodyFields = dict[str, ParamConfig]

# Key holding the parent group in a resource's plain config; not usable as an action.
PARENT_GROUP_KEY = "parent_group"


class OperationConfig(BaseModel):
    """One operation (verb + endpoint) ready for form rendering."""

    verb: str  # GET / POST / PUT / DELETE / PATCH
    endpoint: str  # /items/{id} or /items/:id
    description: str | None = None
    # {location: {name: ParamConfig}}; "body" may instead be [{name: ParamConfig}]
    parameters: dict[str, BodyFields | list[BodyFields]] = Field(default_factory=dict)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class Resource(BaseModel):
    """All operations converted from one document, keyed by action."""

    operations: dict[str, OperationConfig] = Field(default_factory=dict)
    parent_group: str | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            action: op.to_dict() for action, op in self.operations.items()
        }
        if self.parent_group:
            data[PARENT_GROUP_KEY] = self.parent_group
        return data


class SourceDocument(BaseModel):
    """A parsed input document, or the reason it could not be parsed."""

    source: str | None = None  # file path, URL or other identifier
    data: Any = None
    error: str | None = None


class DocumentError(BaseModel):
    """A document that was skipped during conversion."""

    source: str | None = None
    message: str


class ConversionResult(BaseModel):
    """Merged test configuration plus per-document errors."""

    config: dict[str, Resource] = Field(default_factory=dict)
    errors: list[DocumentError] = Field(default_factory=list)

    def to_dict(self) -> dict:
        """Return the plain Test Configuration mapping."""
        return {name: resource.to_dict() for name, resource in self.config.items()}
