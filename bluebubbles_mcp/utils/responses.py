"""
Response formatting utilities for MCP tool handlers.

Provides standardized response builders for common scenarios.
"""

import json
from typing import Any

from mcp import types


def text_response(text: str) -> list[types.TextContent]:
    """Create a simple text response."""
    return [types.TextContent(type="text", text=text)]


def to_json(data: Any) -> str:
    """Pretty-print an API payload for the agent."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def json_response(data: Any) -> list[types.TextContent]:
    """Create a response holding an API payload as indented JSON."""
    return text_response(to_json(data))


def error_response(error: str, prefix: str = "Error") -> list[types.TextContent]:
    """
    Create a standardized error response.

    Args:
        error: Error message
        prefix: Prefix for the error (default: "Error")
    """
    return [types.TextContent(type="text", text=f"{prefix}: {error}")]


def validation_error(error: str) -> list[types.TextContent]:
    """Create a validation error response."""
    return error_response(error, "Validation error")
