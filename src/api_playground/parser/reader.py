"""OpenAPI document reader.

Discovers spec files on disk and parses them into SourceDocument objects.
Parse failures are carried on the document (``error``) rather than raised,
so one unreadable file never stops a batch.
"""

import logging
from pathlib import Path

import yaml

from api_playground.converter.models import SourceDocument

from .detect import is_openapi

logger = logging.getLogger(__name__)

SPEC_EXTENSIONS = (".yaml", ".yml", ".json")


def load_document(file_path: Path, require_openapi: bool = False) -> SourceDocument:
    """Parse one YAML/JSON spec file.

    JSON is parsed by the YAML loader. With ``require_openapi`` the document
    must carry a top-level ``openapi`` or ``swagger`` key.
    """
    source = str(file_path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return SourceDocument(source=source, error=f"Cannot read file: {e}")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return SourceDocument(source=source, error=f"Invalid YAML/JSON: {e}")

    if data is None:
        return SourceDocument(source=source, error="Document is empty")
    if require_openapi and not is_openapi(data):
        return SourceDocument(source=source, error="Not an OpenAPI document (no openapi/swagger key)")
    return SourceDocument(source=source, data=data)


def discover_documents(directory: Path, extensions: tuple[str, ...] = SPEC_EXTENSIONS) -> list[Path]:
    """List spec files in a directory, sorted by name."""
    if not directory.is_dir():
        logger.warning("OpenAPI directory %s does not exist", directory)
        return []
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in extensions
    )


def load_directory(directory: Path, require_openapi: bool = False) -> list[SourceDocument]:
    """Load every spec file found in a directory."""
    return [load_document(p, require_openapi) for p in discover_documents(directory)]


def load_paths(paths: list[Path], require_openapi: bool = False) -> list[SourceDocument]:
    """Load a mix of spec files and directories, in the given order."""
    documents: list[SourceDocument] = []
    for path in paths:
        if path.is_dir():
            documents.extend(load_directory(path, require_openapi))
        else:
            documents.append(load_document(path, require_openapi))
    return documents
