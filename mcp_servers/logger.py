"""Logging for the MCP servers.

Every module logs through a child of the "mcp_servers" logger, so records
read e.g. ``mcp_servers.notion``. Output goes to stderr only: stdout is
the stdio transport's channel.

Environment:
    LOG_LEVEL   level name for the package logger (default: INFO)
    HTTP_DEBUG  "true" keeps httpx's own per-request log lines
"""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_from_env() -> int:
    return getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


logger = logging.getLogger("mcp_servers")
logger.setLevel(_level_from_env())

# Avoid duplicate handlers if module is reloaded
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

# httpx logs each request line at INFO, Notion ids included; the debug event
# hooks in http.py cover that when HTTP_DEBUG is on
if os.getenv("HTTP_DEBUG", "false").lower() != "true":
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a child logger for a module or backend.

    Args:
        name: Short name, usually the backend or module ('notion', 'sqlite', 'identity')
    """
    return logger.getChild(name)


def uvicorn_log_level() -> str:
    """The package level as a uvicorn --log-level name."""
    return logging.getLevelName(logger.level).lower()
