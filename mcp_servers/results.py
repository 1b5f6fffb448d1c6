"""Helpers for building tool results."""

import json
from typing import Any

from mcp.types import CallToolResult, TextContent

from .errors import SerializationError


def text_result(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)])


def error_result(message: str) -> CallToolResult:
    """A tool-level error reported back to the calling agent."""
    return CallToolResult(content=[TextContent(type="text", text=message)], isError=True)


def json_result(value: Any, indent: int | None = None) -> CallToolResult:
    """Encode value as JSON text.

    Raises:
        SerializationError: value is not JSON-serializable
    """
    try:
        data = json.dumps(value, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"marshal result: {e}") from e
    return text_result(data)
