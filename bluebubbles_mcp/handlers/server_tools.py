"""
Server & Utility Handlers

Handles tools about the BlueBubbles server and handles:
- bb_get_server_info, bb_get_server_stats: Status and statistics
- bb_get_handles: Query handles (addresses) with their chats
- bb_check_handle_availability: iMessage + FaceTime availability
- bb_get_focus_status: Focus / Do Not Disturb state (Private API)
- bb_get_scheduled_messages, bb_create_scheduled_message,
  bb_delete_scheduled_message: Scheduled sends
- bb_restart_imessage: Restart Messages.app on the server Mac
"""

import logging
from datetime import datetime
from mcp import types

from bluebubbles_mcp.utils.validation import (
    validate_enum,
    validate_non_empty_string,
    validate_offset,
    validate_optional_string,
    validate_positive_int,
)
from bluebubbles_mcp.utils.responses import json_response, validation_error
from bluebubbles_mcp.utils.errors import handle_api_error

logger = logging.getLogger(__name__)

DEFAULT_HANDLE_LIMIT = 100
SCHEDULE_METHODS = ["apple-script", "private-api"]


def _data(result):
    return result.get("data") if isinstance(result, dict) else result


async def handle_get_server_info(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """Handle bb_get_server_info tool call (no arguments)."""
    try:
        result = await client.get_server_info()
    except Exception as e:
        return handle_api_error(e, "fetching server info")

    return json_response(_data(result))


async def handle_get_server_stats(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_get_server_stats tool call.

    Returns:
        {"totals": ..., "media": ...}
    """
    try:
        totals = await client.get_stat_totals()
        media = await client.get_stat_media()
    except Exception as e:
        return handle_api_error(e, "fetching server stats")

    return json_response({"totals": _data(totals), "media": _data(media)})


async def handle_get_handles(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_get_handles tool call.

    Args:
        arguments: {"limit": int (default 100), "offset": int (default 0),
                    "address": str (optional)}
        client: BlueBubblesClient instance
    """
    limit, error = validate_positive_int(arguments.get("limit"), "limit")
    if error:
        return validation_error(error)

    offset, error = validate_offset(arguments.get("offset"))
    if error:
        return validation_error(error)

    address, error = validate_optional_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    body = {
        "limit": limit if limit is not None else DEFAULT_HANDLE_LIMIT,
        "offset": offset if offset is not None else 0,
        "with": ["chat"],
    }
    if address:
        body["address"] = address

    try:
        result = await client.query_handles(body)
    except Exception as e:
        return handle_api_error(e, "fetching handles")

    return json_response(_data(result))


async def handle_check_handle_availability(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_check_handle_availability tool call.

    Args:
        arguments: {"address": str}
        client: BlueBubblesClient instance

    Returns:
        {"address": ..., "imessage": ..., "facetime": ...}
    """
    address, error = validate_non_empty_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    try:
        imessage, facetime = await client.check_availability(address)
    except Exception as e:
        return handle_api_error(e, "checking availability")

    return json_response({
        "address": address,
        "imessage": _data(imessage),
        "facetime": _data(facetime),
    })


async def handle_get_focus_status(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_get_focus_status tool call.

    Args:
        arguments: {"handleGuid": str}
        client: BlueBubblesClient instance
    """
    handle_guid, error = validate_non_empty_string(arguments.get("handleGuid"), "handleGuid")
    if error:
        return validation_error(error)

    try:
        result = await client.get_focus_status(handle_guid)
    except Exception as e:
        return handle_api_error(e, "fetching focus status")

    return json_response(_data(result))


async def handle_get_scheduled_messages(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """Handle bb_get_scheduled_messages tool call (no arguments)."""
    try:
        result = await client.get_scheduled_messages()
    except Exception as e:
        return handle_api_error(e, "fetching scheduled messages")

    return json_response(_data(result))


async def handle_create_scheduled_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_create_scheduled_message tool call.

    Args:
        arguments: {"chatGuid": str, "message": str, "scheduledFor": ISO 8601 str,
                    "method": str (optional, default apple-script)}
        client: BlueBubblesClient instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    message, error = validate_non_empty_string(arguments.get("message"), "message")
    if error:
        return validation_error(error)

    scheduled_for, error = validate_non_empty_string(arguments.get("scheduledFor"), "scheduledFor")
    if error:
        return validation_error(error)
    try:
        datetime.fromisoformat(scheduled_for.replace("Z", "+00:00"))
    except ValueError:
        return validation_error(
            f"Invalid scheduledFor: must be an ISO 8601 datetime, got '{scheduled_for}'"
        )

    method, error = validate_enum(
        arguments.get("method"), "method", SCHEDULE_METHODS, default="apple-script"
    )
    if error:
        return validation_error(error)

    body = {
        "chatGuid": chat_guid,
        "message": message,
        "scheduledFor": scheduled_for,
        "type": "send-message",
        "payload": {"chatGuid": chat_guid, "message": message, "method": method},
    }

    try:
        result = await client.create_scheduled_message(body)
    except Exception as e:
        return handle_api_error(e, "creating scheduled message")

    logger.debug(f"Scheduled message for {chat_guid} at {scheduled_for}")
    return json_response(_data(result))


async def handle_delete_scheduled_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_delete_scheduled_message tool call.

    Args:
        arguments: {"id": str | int}
        client: BlueBubblesClient instance
    """
    raw_id = arguments.get("id")
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        raw_id = str(raw_id)
    schedule_id, error = validate_non_empty_string(raw_id, "id")
    if error:
        return validation_error(error)

    try:
        result = await client.delete_scheduled_message(schedule_id)
    except Exception as e:
        return handle_api_error(e, "deleting scheduled message")

    return json_response(_data(result))


async def handle_restart_imessage(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """Handle bb_restart_imessage tool call (no arguments)."""
    logger.info("Restarting Messages.app on the server")
    try:
        result = await client.restart_messages_app()
    except Exception as e:
        return handle_api_error(e, "restarting Messages.app")

    return json_response(_data(result))
