"""
Contacts Handlers

Handles tools for the macOS Contacts database behind BlueBubbles:
- bb_get_contacts: List all contacts
- bb_search_contacts: Search by name
- bb_get_contact_detail, bb_get_contact_photo: Per-handle info (Private API)
- bb_check_imessage_status: Batch iMessage registration check (Private API)
- bb_get_suggested_names: Siri-suggested names for unknown handles (Private API)
- bb_detect_business: Business handle detection (Private API)
- bb_resolve_contact: Resolve a phone/email through the cached contact index
"""

import logging
from mcp import types

from bluebubbles.normalize import normalize_address
from bluebubbles_mcp.utils.validation import (
    validate_enum,
    validate_non_empty_string,
    validate_string_list,
)
from bluebubbles_mcp.utils.responses import json_response, validation_error
from bluebubbles_mcp.utils.errors import handle_api_error

logger = logging.getLogger(__name__)

PHOTO_QUALITIES = ["low", "medium", "high"]


def _data(result):
    return result.get("data") if isinstance(result, dict) else result


async def handle_get_contacts(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_get_contacts tool call.

    Args:
        arguments: {} (no arguments needed)
        client: BlueBubblesClient instance
    """
    try:
        result = await client.get_contacts()
    except Exception as e:
        return handle_api_error(e, "fetching contacts")

    return json_response(_data(result))


async def handle_search_contacts(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_search_contacts tool call.

    Args:
        arguments: {"query": str} matched against first, last and display name
        client: BlueBubblesClient instance
    """
    query, error = validate_non_empty_string(arguments.get("query"), "query")
    if error:
        return validation_error(error)

    where = [{
        "statement": "firstName LIKE :query OR lastName LIKE :query OR displayName LIKE :query",
        "args": {"query": f"%{query}%"},
    }]

    try:
        result = await client.query_contacts(where)
    except Exception as e:
        return handle_api_error(e, "searching contacts")

    return json_response(_data(result))


async def handle_get_contact_detail(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_get_contact_detail tool call.

    Args:
        arguments: {"address": str}
        client: BlueBubblesClient instance
    """
    address, error = validate_non_empty_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    try:
        result = await client.get_contact_for_handle(address)
    except Exception as e:
        return handle_api_error(e, "fetching contact detail")

    return json_response(_data(result))


async def handle_get_contact_photo(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_get_contact_photo tool call.

    Args:
        arguments: {"address": str, "quality": "low" | "medium" | "high" (optional)}
        client: BlueBubblesClient instance
    """
    address, error = validate_non_empty_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    quality, error = validate_enum(arguments.get("quality"), "quality", PHOTO_QUALITIES)
    if error:
        return validation_error(error)

    try:
        result = await client.get_contact_photo(address, quality)
    except Exception as e:
        return handle_api_error(e, "fetching contact photo")

    return json_response(_data(result))


async def handle_check_imessage_status(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_check_imessage_status tool call.

    Args:
        arguments: {"addresses": list[str]}
        client: BlueBubblesClient instance
    """
    addresses, error = validate_string_list(arguments.get("addresses"), "addresses")
    if error:
        return validation_error(error)

    try:
        result = await client.batch_check_imessage(addresses)
    except Exception as e:
        return handle_api_error(e, "checking iMessage status")

    return json_response(_data(result))


async def handle_get_suggested_names(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """Handle bb_get_suggested_names tool call (no arguments)."""
    try:
        result = await client.get_suggested_names()
    except Exception as e:
        return handle_api_error(e, "fetching suggested names")

    return json_response(_data(result))


async def handle_detect_business(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_detect_business tool call.

    Args:
        arguments: {"address": str}
        client: BlueBubblesClient instance
    """
    address, error = validate_non_empty_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    try:
        result = await client.detect_business(address)
    except Exception as e:
        return handle_api_error(e, "detecting business")

    return json_response(_data(result))


async def handle_resolve_contact(
    arguments: dict,
    client,
    resolver
) -> list[types.TextContent]:
    """
    Handle bb_resolve_contact tool call.

    Looks the address up in the cached contact index instead of querying
    the server per call. A miss is a normal result (name is null).

    Args:
        arguments: {"address": str}
        client: BlueBubblesClient instance (unused, the resolver owns fetching)
        resolver: ContactResolver instance
    """
    address, error = validate_non_empty_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    name = await resolver.resolve(address)
    logger.info(f"Contact lookup: {'found' if name else 'no match'}")

    return json_response({
        "address": address,
        "normalized": normalize_address(address),
        "name": name,
        "cache": resolver.stats(),
    })
