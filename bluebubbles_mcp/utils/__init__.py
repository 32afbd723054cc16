"""
MCP Server Utilities

Shared validation, response formatting, and error handling utilities
for the BlueBubbles MCP server.
"""

from .validation import (
    validate_positive_int,
    validate_offset,
    validate_part_index,
    validate_non_empty_string,
    validate_optional_string,
    validate_string_list,
    validate_number,
    validate_limit,
    validate_enum,
    MAX_MESSAGE_LIMIT,
    MIN_LIMIT,
)

from .responses import (
    text_response,
    to_json,
    json_response,
    error_response,
    validation_error,
)

from .errors import handle_api_error

from .enrichment import enrich_envelope, enrich_payload

__all__ = [
    # Validation
    "validate_positive_int",
    "validate_offset",
    "validate_part_index",
    "validate_non_empty_string",
    "validate_optional_string",
    "validate_string_list",
    "validate_number",
    "validate_limit",
    "validate_enum",
    "MAX_MESSAGE_LIMIT",
    "MIN_LIMIT",
    # Responses
    "text_response",
    "to_json",
    "json_response",
    "error_response",
    "validation_error",
    # Errors
    "handle_api_error",
    # Enrichment
    "enrich_envelope",
    "enrich_payload",
]
