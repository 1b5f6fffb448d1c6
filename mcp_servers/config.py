"""Centralized configuration from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
_env_file = Path(__file__).parent.parent / ".env"
load_dotenv(_env_file)

# =============================================================================
# User-configurable settings (via environment variables)
# =============================================================================

# Server
SERVER_HOST = os.getenv("HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("PORT", "8080"))

# Notion REST API
NOTION_API_URL = os.getenv("NOTION_API_URL", "https://api.notion.com/v1")
NOTION_VERSION = os.getenv("NOTION_VERSION", "2022-06-28")

# Pomerium identity assertions
# Empty JWKS URL means "derive it from the assertion's issuer"
POMERIUM_JWKS_URL = os.getenv("POMERIUM_JWKS_URL", "")
POMERIUM_AUDIENCE = os.getenv("POMERIUM_AUDIENCE", "")

# Dump every backend request/response body at DEBUG level
HTTP_DEBUG = os.getenv("HTTP_DEBUG", "false").lower() == "true"

# =============================================================================
# Internal constants (sensible defaults, rarely need changing)
# =============================================================================

# Timeouts (seconds)
HTTP_TIMEOUT = 30.0
SHUTDOWN_GRACE_SECONDS = 10

# Headers
IDENTITY_HEADER = "X-Pomerium-Jwt-Assertion"

# Notion block listing (API maximum)
NOTION_PAGE_SIZE = 100

# Content limits (characters)
SQLITE_MAX_RESULT_SIZE = 10000


def env_by_prefix(prefix: str) -> dict[str, str]:
    """Return environment variables whose names start with prefix.

    The prefix is removed from the keys, so with ``SQLITE_DB_FILE=x`` set,
    ``env_by_prefix("SQLITE_")`` returns ``{"DB_FILE": "x"}``.
    """
    return {
        key[len(prefix):]: value
        for key, value in os.environ.items()
        if key.startswith(prefix)
    }
