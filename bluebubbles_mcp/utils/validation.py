"""
Validation utilities for MCP tool arguments.

Provides standardized validation functions that return (value, error) tuples.
"""

import os
from typing import Optional

# Validation constants - configurable via environment variables
# Set BLUEBUBBLES_MAX_LIMIT to override (e.g., for full history exports)
MAX_MESSAGE_LIMIT = int(os.getenv("BLUEBUBBLES_MAX_LIMIT", "1000"))
MIN_LIMIT = 1  # Minimum limit value


def validate_positive_int(
    value,
    name: str,
    min_val: int = MIN_LIMIT,
    max_val: int = MAX_MESSAGE_LIMIT
) -> tuple[int | None, str | None]:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        name: Parameter name for error messages
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Tuple of (validated_value, error_message). If valid, error_message is None.
    """
    if value is None:
        return None, None

    if isinstance(value, bool):
        return None, f"Invalid {name}: must be an integer, got bool"

    try:
        int_value = int(value)
    except (TypeError, ValueError):
        return None, f"Invalid {name}: must be an integer, got {type(value).__name__}"

    if int_value < min_val:
        return None, f"Invalid {name}: must be at least {min_val}, got {int_value}"

    if int_value > max_val:
        return None, f"Invalid {name}: must be at most {max_val}, got {int_value}"

    return int_value, None


def validate_offset(value) -> tuple[int | None, str | None]:
    """Validate an optional pagination offset (>= 0, no upper bound)."""
    return validate_positive_int(value, "offset", min_val=0, max_val=2**31 - 1)


def validate_part_index(value) -> tuple[int | None, str | None]:
    """Validate an optional message part index (>= 0)."""
    return validate_positive_int(value, "partIndex", min_val=0, max_val=1000)


def validate_non_empty_string(value, name: str) -> tuple[str | None, str | None]:
    """
    Validate that a value is a non-empty string.

    Args:
        value: Value to validate
        name: Parameter name for error messages

    Returns:
        Tuple of (validated_value, error_message). If valid, error_message is None.
    """
    if value is None:
        return None, f"Missing required parameter: {name}"

    if not isinstance(value, str):
        return None, f"Invalid {name}: must be a string, got {type(value).__name__}"

    stripped = value.strip()
    if not stripped:
        return None, f"Invalid {name}: cannot be empty"

    return stripped, None


def validate_optional_string(value, name: str) -> tuple[str | None, str | None]:
    """Like validate_non_empty_string, but a missing or blank value is allowed."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, None
    return validate_non_empty_string(value, name)


def validate_string_list(
    value,
    name: str,
    min_items: int = 1
) -> tuple[list[str] | None, str | None]:
    """
    Validate a list of non-empty strings (e.g. addresses).

    Args:
        value: Value to validate
        name: Parameter name for error messages
        min_items: Minimum number of entries

    Returns:
        Tuple of (validated_list, error_message).
    """
    if value is None:
        return None, f"Missing required parameter: {name}"

    if not isinstance(value, list):
        return None, f"Invalid {name}: must be a list, got {type(value).__name__}"

    items = []
    for i, item in enumerate(value):
        stripped, error = validate_non_empty_string(item, f"{name}[{i}]")
        if error:
            return None, error
        items.append(stripped)

    if len(items) < min_items:
        return None, f"Invalid {name}: must contain at least {min_items} item(s), got {len(items)}"

    return items, None


def validate_number(value, name: str) -> tuple[float | None, str | None]:
    """Validate an optional numeric value (e.g. a Unix timestamp)."""
    if value is None:
        return None, None

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None, f"Invalid {name}: must be a number, got {type(value).__name__}"

    return value, None


def validate_limit(
    arguments: dict,
    default: Optional[int] = None,
    max_val: int = MAX_MESSAGE_LIMIT
) -> tuple[int | None, str | None]:
    """
    Extract and validate limit from arguments dict.

    Args:
        arguments: The arguments dict from the tool call
        default: Default value if not provided (None leaves it to the server)
        max_val: Maximum allowed value

    Returns:
        Tuple of (limit_value, error_message). Uses default if not provided.
    """
    limit_raw = arguments.get("limit")
    limit, error = validate_positive_int(limit_raw, "limit", max_val=max_val)
    if error:
        return default, error
    return limit if limit is not None else default, None


def validate_enum(
    value,
    name: str,
    allowed_values: list[str],
    default: Optional[str] = None,
    required: bool = False
) -> tuple[str | None, str | None]:
    """
    Validate that a value is one of the allowed values.

    Args:
        value: Value to validate
        name: Parameter name for error messages
        allowed_values: List of valid values
        default: Default value if not provided
        required: Whether a missing value is an error

    Returns:
        Tuple of (validated_value, error_message).
    """
    if value is None:
        if required and default is None:
            return None, f"Missing required parameter: {name}"
        return default, None

    if value not in allowed_values:
        return None, (
            f"Invalid {name}: must be one of {allowed_values}, "
            f"got '{value}'"
        )

    return value, None
