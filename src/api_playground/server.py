"""
HTTP service
============
Serves the merged test configuration to the playground UI.

Run with:
    api-playground serve
or
    uvicorn api_playground.server:app --reload
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api_playground.config import Settings
from api_playground.converter.document import convert
from api_playground.parser.reader import discover_documents, load_document

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def success_envelope(data, code: str = "SUCCESS", message: str = "Operation successful", **meta) -> dict:
    return {
        "success": True,
        "data": data,
        "meta": {"success": {"code": code, "message": message}, **meta},
    }


def error_envelope(message: str = "An error occurred", code: str = "INTERNAL_SERVER_ERROR",
                   details=None) -> dict:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"success": False, "meta": {"error": error}}


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(
        title="API Playground",
        description="Test configurations generated from OpenAPI specifications",
        version=API_VERSION,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=error_envelope())

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "version": API_VERSION}

    @app.get("/api/openapi-tests")
    def openapi_tests():
        """Convert every spec in the OpenAPI directory and return the merged config."""
        openapi_dir = settings.openapi_dir
        if not openapi_dir.is_dir():
            return success_envelope({}, "NO_OPENAPI_DIR", "No OpenAPI directory found")

        files = discover_documents(openapi_dir)
        if not files:
            return success_envelope({}, "NO_YAML_FILES", "No YAML files found in OpenAPI directory")

        result = convert(load_document(f, settings.require_openapi_key) for f in files)
        errors = [e.model_dump() for e in result.errors]
        if errors:
            return success_envelope(result.to_dict(), errors=errors)
        return success_envelope(result.to_dict())

    return app


app = create_app()
