"""
Tool definitions for the BlueBubbles MCP server.

Declarative JSON schemas only; behaviour lives in handlers/.
"""

from mcp import types

from bluebubbles_mcp.handlers.chats import CHAT_SORTS
from bluebubbles_mcp.handlers.contacts import PHOTO_QUALITIES
from bluebubbles_mcp.handlers.messaging import (
    ALL_REACTIONS,
    SEND_METHODS,
    SERVICES,
    SORT_ORDERS,
)
from bluebubbles_mcp.handlers.server_tools import SCHEDULE_METHODS

CHAT_GUID_EXAMPLE = "e.g. 'iMessage;-;+1234567890' for a DM or 'iMessage;+;chat123456' for a group"


def _tool(name: str, description: str, properties: dict | None = None, required: list[str] | None = None) -> types.Tool:
    return types.Tool(
        name=name,
        description=description,
        inputSchema={
            "type": "object",
            "properties": properties or {},
            "required": required or [],
        },
    )


def _string(description: str) -> dict:
    return {"type": "string", "description": description}


def _number(description: str) -> dict:
    return {"type": "number", "description": description}


def _enum(values: list[str], description: str) -> dict:
    return {"type": "string", "enum": values, "description": description}


def _strings(description: str, min_items: int = 0) -> dict:
    schema = {"type": "array", "items": {"type": "string"}, "description": description}
    if min_items:
        schema["minItems"] = min_items
    return schema


def _bool(description: str) -> dict:
    return {"type": "boolean", "description": description}


PART_INDEX = _number("Part index of the message (default 0)")


MESSAGING_TOOLS = [
    _tool(
        "bb_send_message",
        "Send a text message to an existing iMessage/SMS chat. Requires the chat GUID "
        f"({CHAT_GUID_EXAMPLE}). Use bb_list_chats to find chat GUIDs.",
        {
            "chatGuid": _string("The chat GUID to send the message to (e.g. 'iMessage;-;+1234567890')"),
            "message": _string("The text message to send"),
            "method": _enum(SEND_METHODS, "Send method. 'private-api' supports more features. Defaults to server setting."),
            "effectId": _string("iMessage effect ID (e.g. 'com.apple.MobileSMS.expressivesend.impact' for slam)"),
            "subject": _string("Subject line for the message"),
        },
        ["chatGuid", "message"],
    ),
    _tool(
        "bb_send_message_to_address",
        "Start a new conversation or send a message to a phone number or email address. "
        "Creates a new chat if one doesn't exist. Use this when you have a phone number or "
        "email but not a chat GUID.",
        {
            "address": _string("Phone number (e.g. '+1234567890') or email address to message"),
            "message": _string("The text message to send"),
            "service": _enum(SERVICES, "Service to use. Defaults to iMessage."),
        },
        ["address", "message"],
    ),
    _tool(
        "bb_reply_to_message",
        "Reply to a specific message in a chat. The reply will appear as a threaded reply "
        "linked to the original message. Requires the Private API.",
        {
            "chatGuid": _string("The chat GUID containing the message to reply to"),
            "message": _string("The reply text"),
            "replyGuid": _string("The GUID of the message to reply to"),
            "partIndex": PART_INDEX,
        },
        ["chatGuid", "message", "replyGuid"],
    ),
    _tool(
        "bb_react_to_message",
        "Add a tapback reaction to a message. Valid reactions: 'love', 'like', 'dislike', "
        "'laugh', 'emphasize', 'question'. Prefix with '-' to remove a reaction (e.g. '-love'). "
        "Requires the Private API.",
        {
            "chatGuid": _string("The chat GUID containing the message"),
            "selectedMessageGuid": _string("The GUID of the message to react to"),
            "reaction": _enum(ALL_REACTIONS, "The reaction type. Prefix with '-' to remove."),
            "partIndex": PART_INDEX,
        },
        ["chatGuid", "selectedMessageGuid", "reaction"],
    ),
    _tool(
        "bb_edit_message",
        "Edit a previously sent iMessage. Only works on messages you sent, and only on "
        "iMessage (not SMS). Requires the Private API and macOS Ventura+.",
        {
            "messageGuid": _string("The GUID of the message to edit"),
            "editedMessage": _string("The new message text"),
            "backwardsCompatMessage": _string("Fallback text shown to recipients on older devices (e.g. 'Edited to: new text')"),
            "partIndex": PART_INDEX,
        },
        ["messageGuid", "editedMessage", "backwardsCompatMessage"],
    ),
    _tool(
        "bb_unsend_message",
        "Unsend/retract a previously sent iMessage. Only works on messages you sent, on "
        "iMessage, and within 2 minutes of sending. Requires the Private API and macOS Ventura+.",
        {
            "messageGuid": _string("The GUID of the message to unsend"),
            "partIndex": PART_INDEX,
        },
        ["messageGuid"],
    ),
    _tool(
        "bb_search_messages",
        "Search messages with flexible filters. Can filter by chat, date range, and sort order. "
        "Returns message content, sender (with resolved contact name), timestamps, and "
        "associated chat info.",
        {
            "chatGuid": _string("Filter to a specific chat GUID"),
            "limit": _number("Max number of messages to return (default 25, max 1000)"),
            "offset": _number("Number of messages to skip for pagination"),
            "sort": _enum(SORT_ORDERS, "Sort by date: 'DESC' for newest first (default), 'ASC' for oldest first"),
            "after": _number("Only messages after this Unix timestamp"),
            "before": _number("Only messages before this Unix timestamp"),
            "withChat": _bool("Include associated chat details in the response"),
        },
    ),
    _tool(
        "bb_get_recent_messages",
        "Get recent messages from a specific chat. Returns messages with sender info "
        "(resolved contact names) and timestamps. Supports pagination for scrolling through history.",
        {
            "chatGuid": _string("The chat GUID to get messages from"),
            "limit": _number("Max number of messages to return (default 25)"),
            "offset": _number("Number of messages to skip for pagination"),
            "sort": _enum(SORT_ORDERS, "Sort order: 'DESC' for newest first (default), 'ASC' for oldest first"),
            "after": _string("Only messages after this date (ISO 8601 or Unix timestamp)"),
            "before": _string("Only messages before this date (ISO 8601 or Unix timestamp)"),
        },
        ["chatGuid"],
    ),
    _tool(
        "bb_get_message",
        "Get a specific message by its GUID. Returns full message details including text, "
        "sender, timestamps, reactions, and thread info.",
        {
            "messageGuid": _string("The GUID of the message to retrieve"),
            "withChat": _bool("Include associated chat details in the response"),
        },
        ["messageGuid"],
    ),
]


CHAT_TOOLS = [
    _tool(
        "bb_list_chats",
        "List iMessage/SMS conversations with pagination and sorting. Returns chat GUIDs, "
        "display names (1:1 chats are named from your contacts), participant lists, and last "
        "message info. Use this to discover chat GUIDs for other tools.",
        {
            "limit": _number("Max number of chats to return (default 25)"),
            "offset": _number("Number of chats to skip for pagination"),
            "sort": _enum(CHAT_SORTS, "Sort order: 'lastmessage' for most recent activity (default)"),
        },
    ),
    _tool(
        "bb_get_chat",
        "Get detailed information about a specific chat by its GUID. Returns display name, "
        "participants, service type, and metadata.",
        {"chatGuid": _string(f"The chat GUID ({CHAT_GUID_EXAMPLE})")},
        ["chatGuid"],
    ),
    _tool(
        "bb_create_group_chat",
        "Create a new group chat with multiple participants. Requires at least 2 addresses. "
        "Optionally sends an initial message. Returns the new chat GUID.",
        {
            "addresses": _strings("Phone numbers or email addresses to add to the group (minimum 2)", min_items=2),
            "message": _string("Optional initial message to send to the group"),
            "service": _enum(SERVICES, "Service to use. Defaults to iMessage."),
        },
        ["addresses"],
    ),
    _tool(
        "bb_rename_group_chat",
        "Rename a group chat. Sets the display name visible to all participants. Requires the Private API.",
        {
            "chatGuid": _string("The group chat GUID to rename"),
            "displayName": _string("The new display name for the group chat"),
        },
        ["chatGuid", "displayName"],
    ),
    _tool(
        "bb_add_participant",
        "Add a participant to a group chat. The address must be a phone number or email. "
        "Requires the Private API.",
        {
            "chatGuid": _string("The group chat GUID to add the participant to"),
            "address": _string("Phone number or email address of the person to add"),
        },
        ["chatGuid", "address"],
    ),
    _tool(
        "bb_remove_participant",
        "Remove a participant from a group chat. Requires the Private API.",
        {
            "chatGuid": _string("The group chat GUID to remove the participant from"),
            "address": _string("Phone number or email address of the person to remove"),
        },
        ["chatGuid", "address"],
    ),
    _tool(
        "bb_mark_chat_read",
        "Mark all messages in a chat as read. Clears the unread badge for this conversation.",
        {"chatGuid": _string("The chat GUID to mark as read")},
        ["chatGuid"],
    ),
    _tool(
        "bb_mark_chat_unread",
        "Mark a chat as unread. Adds an unread badge to the conversation.",
        {"chatGuid": _string("The chat GUID to mark as unread")},
        ["chatGuid"],
    ),
    _tool(
        "bb_start_typing",
        "Show a typing indicator in a chat. The recipient will see the '...' bubble. Requires the Private API.",
        {"chatGuid": _string("The chat GUID to show typing indicator in")},
        ["chatGuid"],
    ),
    _tool(
        "bb_stop_typing",
        "Stop the typing indicator in a chat. Requires the Private API.",
        {"chatGuid": _string("The chat GUID to stop typing indicator in")},
        ["chatGuid"],
    ),
    _tool(
        "bb_leave_chat",
        "Leave a group chat. You will no longer receive messages from this chat. This cannot be undone.",
        {"chatGuid": _string("The group chat GUID to leave")},
        ["chatGuid"],
    ),
    _tool(
        "bb_delete_chat",
        "Delete a chat entirely. This removes the conversation from your device. This cannot be undone.",
        {"chatGuid": _string("The chat GUID to delete")},
        ["chatGuid"],
    ),
    _tool(
        "bb_delete_message",
        "Delete a specific message from a chat. This removes it from your local conversation. "
        "This cannot be undone.",
        {
            "chatGuid": _string("The chat GUID containing the message"),
            "messageGuid": _string("The GUID of the message to delete"),
        },
        ["chatGuid", "messageGuid"],
    ),
]


CONTACT_TOOLS = [
    _tool("bb_get_contacts", "Get all contacts from the macOS Contacts database"),
    _tool(
        "bb_search_contacts",
        "Search contacts by name, email, or phone number",
        {"query": _string("Search query to match against contact names, emails, or phone numbers")},
        ["query"],
    ),
    _tool(
        "bb_get_contact_detail",
        "Get detailed contact info for a handle/address. Requires Private API to be enabled.",
        {"address": _string("Phone number or email address to look up")},
        ["address"],
    ),
    _tool(
        "bb_get_contact_photo",
        "Get the contact photo as base64 data for a handle/address. Requires Private API to be enabled.",
        {
            "address": _string("Phone number or email address"),
            "quality": _enum(PHOTO_QUALITIES, "Image quality (default: medium)"),
        },
        ["address"],
    ),
    _tool(
        "bb_check_imessage_status",
        "Batch check whether addresses are registered with iMessage. Requires Private API to be enabled.",
        {"addresses": _strings("List of phone numbers or email addresses to check", min_items=1)},
        ["addresses"],
    ),
    _tool(
        "bb_get_suggested_names",
        "Get Siri-suggested names for handles that are not in the Contacts database. "
        "Requires Private API to be enabled.",
    ),
    _tool(
        "bb_detect_business",
        "Check if a handle/address belongs to a business. Requires Private API to be enabled.",
        {"address": _string("Phone number or email address to check")},
        ["address"],
    ),
    _tool(
        "bb_resolve_contact",
        "Resolve a phone number or email address to a contact name using the cached contacts "
        "index. Formatting and country codes are ignored for phone numbers. Returns null when "
        "no contact matches.",
        {"address": _string("Phone number or email address to resolve")},
        ["address"],
    ),
]


FINDMY_TOOLS = [
    _tool("bb_get_findmy_devices", "Get Find My device locations for your iCloud account"),
    _tool("bb_refresh_findmy_devices", "Refresh Find My device locations to get the latest positions"),
    _tool("bb_get_findmy_friends", "Get Find My friend locations. Requires Private API to be enabled."),
    _tool(
        "bb_refresh_findmy_friends",
        "Refresh Find My friend locations to get the latest positions. Requires Private API to be enabled.",
    ),
]


SERVER_TOOLS = [
    _tool("bb_get_server_info", "Get BlueBubbles server status, version, and capabilities"),
    _tool("bb_get_server_stats", "Get message, chat, and attachment statistics from the server"),
    _tool(
        "bb_get_handles",
        "Query handles (contacts/addresses) with pagination",
        {
            "limit": _number("Max number of handles to return (default: 100)"),
            "offset": _number("Number of handles to skip for pagination"),
            "address": _string("Filter by specific address (phone number or email)"),
        },
    ),
    _tool(
        "bb_check_handle_availability",
        "Check iMessage and FaceTime availability for an address",
        {"address": _string("Phone number or email address to check")},
        ["address"],
    ),
    _tool(
        "bb_get_focus_status",
        "Get the focus/Do Not Disturb status for a handle. Requires Private API to be enabled.",
        {"handleGuid": _string("The handle GUID to check focus status for")},
        ["handleGuid"],
    ),
    _tool("bb_get_scheduled_messages", "List all scheduled messages"),
    _tool(
        "bb_create_scheduled_message",
        "Schedule a message for future delivery",
        {
            "chatGuid": _string("Chat GUID to send the message to (e.g. iMessage;-;+1234567890)"),
            "message": _string("The message text to send"),
            "scheduledFor": _string("ISO 8601 datetime string for when to send the message"),
            "method": _enum(SCHEDULE_METHODS, "Send method: apple-script or private-api (default: apple-script)"),
        },
        ["chatGuid", "message", "scheduledFor"],
    ),
    _tool(
        "bb_delete_scheduled_message",
        "Cancel a scheduled message by its ID",
        {"id": _string("The scheduled message ID to cancel")},
        ["id"],
    ),
    _tool(
        "bb_restart_imessage",
        "Restart the Messages.app on the server Mac. Use this to recover from connection issues.",
    ),
]


TOOL_DEFINITIONS: list[types.Tool] = (
    MESSAGING_TOOLS + CHAT_TOOLS + CONTACT_TOOLS + FINDMY_TOOLS + SERVER_TOOLS
)
