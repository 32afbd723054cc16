"""
Chat Handlers

Handles tools for conversations:
- bb_list_chats, bb_get_chat: Read chats (blank 1:1 names resolved from contacts)
- bb_create_group_chat, bb_rename_group_chat: Group lifecycle
- bb_add_participant, bb_remove_participant: Group membership
- bb_mark_chat_read, bb_mark_chat_unread: Unread state
- bb_start_typing, bb_stop_typing: Typing indicator
- bb_leave_chat, bb_delete_chat, bb_delete_message: Destructive operations
"""

import logging
from mcp import types

from bluebubbles_mcp.utils.validation import (
    validate_enum,
    validate_limit,
    validate_non_empty_string,
    validate_offset,
    validate_optional_string,
    validate_string_list,
)
from bluebubbles_mcp.utils.responses import json_response, validation_error
from bluebubbles_mcp.utils.errors import handle_api_error
from bluebubbles_mcp.utils.enrichment import enrich_envelope

logger = logging.getLogger(__name__)

CHAT_SORTS = ["lastmessage", "ASC", "DESC"]
SERVICES = ["iMessage", "SMS"]


async def handle_list_chats(
    arguments: dict,
    client,
    resolver
) -> list[types.TextContent]:
    """
    Handle bb_list_chats tool call.

    Args:
        arguments: {"limit": int, "offset": int, "sort": str} (all optional)
        client: BlueBubblesClient instance
        resolver: ContactResolver instance

    Returns:
        Chats with last message info and resolved display names
    """
    body = {"with": ["lastMessage"]}

    limit, error = validate_limit(arguments)
    if error:
        return validation_error(error)
    if limit is not None:
        body["limit"] = limit

    offset, error = validate_offset(arguments.get("offset"))
    if error:
        return validation_error(error)
    if offset is not None:
        body["offset"] = offset

    sort, error = validate_enum(arguments.get("sort"), "sort", CHAT_SORTS)
    if error:
        return validation_error(error)
    if sort:
        body["sort"] = sort

    try:
        result = await client.query_chats(body)
    except Exception as e:
        return handle_api_error(e, "listing chats")

    result = await enrich_envelope(result, resolver.enrich_chats)
    return json_response(result)


async def handle_get_chat(
    arguments: dict,
    client,
    resolver
) -> list[types.TextContent]:
    """
    Handle bb_get_chat tool call.

    Args:
        arguments: {"chatGuid": str}
        client: BlueBubblesClient instance
        resolver: ContactResolver instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    try:
        result = await client.get_chat(chat_guid)
    except Exception as e:
        return handle_api_error(e, "getting chat")

    result = await enrich_envelope(result, resolver.enrich_chat)
    return json_response(result)


async def handle_create_group_chat(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_create_group_chat tool call.

    Args:
        arguments: {"addresses": list[str] (>= 2), "message": str (optional),
                    "service": str (optional)}
        client: BlueBubblesClient instance
    """
    addresses, error = validate_string_list(arguments.get("addresses"), "addresses", min_items=2)
    if error:
        return validation_error(error)

    message, error = validate_optional_string(arguments.get("message"), "message")
    if error:
        return validation_error(error)

    service, error = validate_enum(arguments.get("service"), "service", SERVICES)
    if error:
        return validation_error(error)

    try:
        result = await client.create_chat(addresses, message, service)
    except Exception as e:
        return handle_api_error(e, "creating group chat")

    logger.info(f"Group chat created with {len(addresses)} participants")
    return json_response(result)


async def handle_rename_group_chat(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_rename_group_chat tool call.

    Args:
        arguments: {"chatGuid": str, "displayName": str}
        client: BlueBubblesClient instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    display_name, error = validate_non_empty_string(arguments.get("displayName"), "displayName")
    if error:
        return validation_error(error)

    try:
        result = await client.update_chat(chat_guid, display_name)
    except Exception as e:
        return handle_api_error(e, "renaming group chat")

    return json_response(result)


async def _participant_change(arguments: dict, client, add: bool) -> list[types.TextContent]:
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    address, error = validate_non_empty_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    try:
        if add:
            result = await client.add_participant(chat_guid, address)
        else:
            result = await client.remove_participant(chat_guid, address)
    except Exception as e:
        return handle_api_error(e, "adding participant" if add else "removing participant")

    return json_response(result)


async def handle_add_participant(arguments: dict, client) -> list[types.TextContent]:
    """Handle bb_add_participant tool call: {"chatGuid": str, "address": str}."""
    return await _participant_change(arguments, client, add=True)


async def handle_remove_participant(arguments: dict, client) -> list[types.TextContent]:
    """Handle bb_remove_participant tool call: {"chatGuid": str, "address": str}."""
    return await _participant_change(arguments, client, add=False)


async def _chat_action(
    arguments: dict,
    action,
    operation: str
) -> list[types.TextContent]:
    """Validate chatGuid, run a single-argument client call, return its JSON."""
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    try:
        result = await action(chat_guid)
    except Exception as e:
        return handle_api_error(e, operation)

    return json_response(result)


async def handle_mark_chat_read(arguments: dict, client) -> list[types.TextContent]:
    return await _chat_action(arguments, client.mark_chat_read, "marking chat as read")


async def handle_mark_chat_unread(arguments: dict, client) -> list[types.TextContent]:
    return await _chat_action(arguments, client.mark_chat_unread, "marking chat as unread")


async def handle_start_typing(arguments: dict, client) -> list[types.TextContent]:
    return await _chat_action(arguments, client.start_typing, "starting typing indicator")


async def handle_stop_typing(arguments: dict, client) -> list[types.TextContent]:
    return await _chat_action(arguments, client.stop_typing, "stopping typing indicator")


async def handle_leave_chat(arguments: dict, client) -> list[types.TextContent]:
    logger.debug(f"Leaving chat {arguments.get('chatGuid')}")
    return await _chat_action(arguments, client.leave_chat, "leaving chat")


async def handle_delete_chat(arguments: dict, client) -> list[types.TextContent]:
    logger.debug(f"Deleting chat {arguments.get('chatGuid')}")
    return await _chat_action(arguments, client.delete_chat, "deleting chat")


async def handle_delete_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_delete_message tool call.

    Args:
        arguments: {"chatGuid": str, "messageGuid": str}
        client: BlueBubblesClient instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    message_guid, error = validate_non_empty_string(arguments.get("messageGuid"), "messageGuid")
    if error:
        return validation_error(error)

    try:
        result = await client.delete_chat_message(chat_guid, message_guid)
    except Exception as e:
        return handle_api_error(e, "deleting message")

    logger.debug(f"Deleted message {message_guid} from {chat_guid}")
    return json_response(result)
