"""Settings loaded from environment variables and an optional .env file."""

import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BASE_PATH = "/api"
DEFAULT_MAX_RESPONSE_ITEMS = 25


class Settings:
    """Runtime configuration. Environment variables override defaults."""

    def __init__(self, env_file: str | None = None):
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv(Path.cwd() / ".env")

        # Spec discovery
        self.openapi_dir = Path(os.getenv("OPENAPI_DIR", "./openapi"))
        self.require_openapi_key = _bool(os.getenv("REQUIRE_OPENAPI_KEY", "false"))

        # Request building / mock backend
        self.api_base_path = os.getenv("API_BASE_PATH", DEFAULT_BASE_PATH)
        self.max_response_items = int(os.getenv("MAX_RESPONSE_ITEMS", str(DEFAULT_MAX_RESPONSE_ITEMS)))

        # HTTP service
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "5001"))
        self.cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "WARNING").upper()


def _bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")
