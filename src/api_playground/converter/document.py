"""Document-level conversion and multi-document merge.

This module is the single entry point used by the CLI, the HTTP service
and the playground session to turn OpenAPI documents into a test
configuration.
"""

import logging
from collections.abc import Iterable
from pathlib import PurePath
from typing import Any

from api_playground.errors import DocumentParseError

from .models import (
    PARENT_GROUP_KEY,
    ConversionResult,
    DocumentError,
    Resource,
    SourceDocument,
)
from .operation import HTTP_METHODS, convert_operation

logger = logging.getLogger(__name__)

TITLE_SUFFIX = " API"
DEFAULT_RESOURCE_NAME = "Unnamed"


def resource_name(doc: dict, source: str | None = None) -> str:
    """Derive the resource name from ``info.title`` or the source file name."""
    info = doc.get("info")
    title = info.get("title") if isinstance(info, dict) else None
    if isinstance(title, str):
        if title.endswith(TITLE_SUFFIX):
            title = title[: -len(TITLE_SUFFIX)]
        if title:
            return title

    if source:
        stem = PurePath(source).stem
        if stem:
            return stem
    return DEFAULT_RESOURCE_NAME


def convert_document(doc: Any, source: str | None = None) -> dict[str, Resource]:
    """Convert one OpenAPI document into ``{resource_name: Resource}``.

    Raises DocumentParseError when the document's structure is unusable.
    """
    if not isinstance(doc, dict):
        raise DocumentParseError(
            f"Document is a {type(doc).__name__}, expected a mapping", source=source
        )

    paths = doc.get("paths") or {}
    if not isinstance(paths, dict):
        raise DocumentParseError("'paths' must be a mapping", source=source)

    resource = Resource(parent_group=_parent_group(doc))

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            raise DocumentParseError(f"Path item {path!r} must be a mapping", source=source)

        for method, operation in path_item.items():
            if not isinstance(method, str) or method.lower() not in HTTP_METHODS:
                continue
            try:
                op = convert_operation(str(path), method.lower(), operation)
            except DocumentParseError as e:
                e.source = source
                raise

            action = _action_key(method, operation)
            if action in resource.operations:
                logger.debug(
                    "Action %r redefined by %s %s in %s", action, op.verb, op.endpoint, source
                )
            resource.operations[action] = op

    return {resource_name(doc, source): resource}


def convert(documents: Iterable[SourceDocument | dict]) -> ConversionResult:
    """Convert and merge a batch of documents.

    Documents are merged at the resource level: a resource name repeated in
    a later document replaces the earlier entry entirely. A document that
    fails to convert is recorded in ``errors`` and skipped. A plain mapping
    is treated as an already parsed document with no source.
    """
    result = ConversionResult()

    for document in documents:
        if isinstance(document, dict):
            document = SourceDocument(data=document)
        elif not isinstance(document, SourceDocument):
            message = f"Unsupported document type: {type(document).__name__}"
            logger.warning("Skipping document: %s", message)
            result.errors.append(DocumentError(message=message))
            continue

        if document.error is not None:
            logger.warning("Skipping %s: %s", document.source, document.error)
            result.errors.append(DocumentError(source=document.source, message=document.error))
            continue

        try:
            partial = convert_document(document.data, document.source)
        except DocumentParseError as e:
            logger.warning("Skipping %s: %s", document.source, e)
            result.errors.append(DocumentError(source=document.source, message=str(e)))
            continue
        except Exception as e:
            logger.exception("Unexpected error converting %s", document.source)
            result.errors.append(
                DocumentError(source=document.source, message=f"{type(e).__name__}: {e}")
            )
            continue

        result.config.update(partial)

    return result


def _action_key(method: str, operation: dict) -> str:
    action = operation.get("x-action")
    if action == PARENT_GROUP_KEY:
        logger.debug("Ignoring reserved x-action %r on %s", action, method)
    elif isinstance(action, str) and action:
        return action
    return method.lower()


def _parent_group(doc: dict) -> str | None:
    info = doc.get("info")
    if isinstance(info, dict):
        group = info.get("x-parent-group")
        if isinstance(group, str) and group:
            return group
    return None
