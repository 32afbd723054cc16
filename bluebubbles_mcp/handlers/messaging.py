"""
Messaging Handlers

Handles tools for sending and reading messages:
- bb_send_message: Send to an existing chat GUID
- bb_send_message_to_address: Start (or reuse) a chat with a phone/email
- bb_reply_to_message, bb_react_to_message: Threaded replies and tapbacks
- bb_edit_message, bb_unsend_message: Change sent iMessages
- bb_search_messages, bb_get_recent_messages, bb_get_message: Read history,
  with sender names resolved from contacts
"""

import logging
from mcp import types

from bluebubbles_mcp.utils.validation import (
    validate_enum,
    validate_limit,
    validate_non_empty_string,
    validate_number,
    validate_offset,
    validate_optional_string,
    validate_part_index,
)
from bluebubbles_mcp.utils.responses import json_response, validation_error
from bluebubbles_mcp.utils.errors import handle_api_error
from bluebubbles_mcp.utils.enrichment import enrich_envelope

logger = logging.getLogger(__name__)

SEND_METHODS = ["private-api", "apple-script"]
SERVICES = ["iMessage", "SMS"]
SORT_ORDERS = ["ASC", "DESC"]
REACTIONS = ["love", "like", "dislike", "laugh", "emphasize", "question"]
ALL_REACTIONS = REACTIONS + [f"-{r}" for r in REACTIONS]


async def handle_send_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_send_message tool call.

    Args:
        arguments: {"chatGuid": str, "message": str, "method": str (optional),
                    "effectId": str (optional), "subject": str (optional)}
        client: BlueBubblesClient instance

    Returns:
        Server response as JSON
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    message, error = validate_non_empty_string(arguments.get("message"), "message")
    if error:
        return validation_error(error)

    method, error = validate_enum(arguments.get("method"), "method", SEND_METHODS)
    if error:
        return validation_error(error)

    effect_id, error = validate_optional_string(arguments.get("effectId"), "effectId")
    if error:
        return validation_error(error)

    subject, error = validate_optional_string(arguments.get("subject"), "subject")
    if error:
        return validation_error(error)

    try:
        result = await client.send_text(
            chat_guid, message, method=method, effect_id=effect_id, subject=subject
        )
    except Exception as e:
        return handle_api_error(e, "sending message")

    logger.debug(f"Message sent to {chat_guid}")
    return json_response(result)


async def handle_send_message_to_address(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_send_message_to_address tool call - message a phone/email directly.

    Creates a new chat if one doesn't exist.

    Args:
        arguments: {"address": str, "message": str, "service": str (optional)}
        client: BlueBubblesClient instance
    """
    address, error = validate_non_empty_string(arguments.get("address"), "address")
    if error:
        return validation_error(error)

    message, error = validate_non_empty_string(arguments.get("message"), "message")
    if error:
        return validation_error(error)

    service, error = validate_enum(arguments.get("service"), "service", SERVICES)
    if error:
        return validation_error(error)

    try:
        result = await client.create_chat([address], message, service)
    except Exception as e:
        return handle_api_error(e, "sending message to address")

    logger.info("Message sent to new address")
    return json_response(result)


async def handle_reply_to_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_reply_to_message tool call (threaded reply, Private API).

    Args:
        arguments: {"chatGuid": str, "message": str, "replyGuid": str,
                    "partIndex": int (optional)}
        client: BlueBubblesClient instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    message, error = validate_non_empty_string(arguments.get("message"), "message")
    if error:
        return validation_error(error)

    reply_guid, error = validate_non_empty_string(arguments.get("replyGuid"), "replyGuid")
    if error:
        return validation_error(error)

    part_index, error = validate_part_index(arguments.get("partIndex"))
    if error:
        return validation_error(error)

    try:
        result = await client.send_reply(chat_guid, message, reply_guid, part_index)
    except Exception as e:
        return handle_api_error(e, "replying to message")

    return json_response(result)


async def handle_react_to_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_react_to_message tool call - add or remove a tapback.

    Args:
        arguments: {"chatGuid": str, "selectedMessageGuid": str,
                    "reaction": str, "partIndex": int (optional)}
        client: BlueBubblesClient instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    selected_guid, error = validate_non_empty_string(
        arguments.get("selectedMessageGuid"), "selectedMessageGuid"
    )
    if error:
        return validation_error(error)

    reaction, error = validate_enum(
        arguments.get("reaction"), "reaction", ALL_REACTIONS, required=True
    )
    if error:
        return validation_error(error)

    part_index, error = validate_part_index(arguments.get("partIndex"))
    if error:
        return validation_error(error)

    try:
        result = await client.react(chat_guid, selected_guid, reaction, part_index)
    except Exception as e:
        return handle_api_error(e, "reacting to message")

    return json_response(result)


async def handle_edit_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_edit_message tool call (iMessage only, Private API, macOS Ventura+).

    Args:
        arguments: {"messageGuid": str, "editedMessage": str,
                    "backwardsCompatMessage": str, "partIndex": int (optional)}
        client: BlueBubblesClient instance
    """
    message_guid, error = validate_non_empty_string(arguments.get("messageGuid"), "messageGuid")
    if error:
        return validation_error(error)

    edited, error = validate_non_empty_string(arguments.get("editedMessage"), "editedMessage")
    if error:
        return validation_error(error)

    compat, error = validate_non_empty_string(
        arguments.get("backwardsCompatMessage"), "backwardsCompatMessage"
    )
    if error:
        return validation_error(error)

    part_index, error = validate_part_index(arguments.get("partIndex"))
    if error:
        return validation_error(error)

    try:
        result = await client.edit_message(message_guid, edited, compat, part_index)
    except Exception as e:
        return handle_api_error(e, "editing message")

    return json_response(result)


async def handle_unsend_message(
    arguments: dict,
    client
) -> list[types.TextContent]:
    """
    Handle bb_unsend_message tool call.

    Args:
        arguments: {"messageGuid": str, "partIndex": int (optional)}
        client: BlueBubblesClient instance
    """
    message_guid, error = validate_non_empty_string(arguments.get("messageGuid"), "messageGuid")
    if error:
        return validation_error(error)

    part_index, error = validate_part_index(arguments.get("partIndex"))
    if error:
        return validation_error(error)

    try:
        result = await client.unsend_message(message_guid, part_index)
    except Exception as e:
        return handle_api_error(e, "unsending message")

    return json_response(result)


async def handle_search_messages(
    arguments: dict,
    client,
    resolver
) -> list[types.TextContent]:
    """
    Handle bb_search_messages tool call.

    Args:
        arguments: {"chatGuid", "limit", "offset", "sort", "after", "before",
                    "withChat"} (all optional)
        client: BlueBubblesClient instance
        resolver: ContactResolver instance

    Returns:
        Matching messages with resolved sender names
    """
    body = {}

    chat_guid, error = validate_optional_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)
    if chat_guid:
        body["chatGuid"] = chat_guid

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

    sort, error = validate_enum(arguments.get("sort"), "sort", SORT_ORDERS)
    if error:
        return validation_error(error)
    if sort:
        body["sort"] = sort

    for key in ("after", "before"):
        value, error = validate_number(arguments.get(key), key)
        if error:
            return validation_error(error)
        if value is not None:
            body[key] = value

    if arguments.get("withChat"):
        body["with"] = ["chat"]

    try:
        result = await client.query_messages(body)
    except Exception as e:
        return handle_api_error(e, "searching messages")

    result = await enrich_envelope(result, resolver.enrich_messages)
    return json_response(result)


async def handle_get_recent_messages(
    arguments: dict,
    client,
    resolver
) -> list[types.TextContent]:
    """
    Handle bb_get_recent_messages tool call.

    Args:
        arguments: {"chatGuid": str, "limit", "offset", "sort", "after",
                    "before" (optional)}
        client: BlueBubblesClient instance
        resolver: ContactResolver instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    params = {}

    limit, error = validate_limit(arguments)
    if error:
        return validation_error(error)
    if limit is not None:
        params["limit"] = limit

    offset, error = validate_offset(arguments.get("offset"))
    if error:
        return validation_error(error)
    if offset is not None:
        params["offset"] = offset

    sort, error = validate_enum(arguments.get("sort"), "sort", SORT_ORDERS)
    if error:
        return validation_error(error)
    if sort:
        params["sort"] = sort

    for key in ("after", "before"):
        value = arguments.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            params[key] = value
            continue
        value, error = validate_optional_string(value, key)
        if error:
            return validation_error(error)
        if value:
            params[key] = value

    try:
        result = await client.get_chat_messages(chat_guid, params)
    except Exception as e:
        return handle_api_error(e, "getting recent messages")

    result = await enrich_envelope(result, resolver.enrich_messages)
    return json_response(result)


async def handle_get_message(
    arguments: dict,
    client,
    resolver
) -> list[types.TextContent]:
    """
    Handle bb_get_message tool call.

    Args:
        arguments: {"messageGuid": str, "withChat": bool (optional)}
        client: BlueBubblesClient instance
        resolver: ContactResolver instance
    """
    message_guid, error = validate_non_empty_string(arguments.get("messageGuid"), "messageGuid")
    if error:
        return validation_error(error)

    with_query = "chat" if arguments.get("withChat") else None

    try:
        result = await client.get_message(message_guid, with_query)
    except Exception as e:
        return handle_api_error(e, "getting message")

    result = await enrich_envelope(result, resolver.enrich_message)
    return json_response(result)
