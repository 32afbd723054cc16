#!/usr/bin/env python3
"""
BlueBubbles MCP Server - iMessage access for AI assistants.

Exposes the BlueBubbles REST API as MCP tools, resources and prompts over
stdio. Chat names and message senders are resolved from the contacts
database through a cached ContactResolver.

Usage:
    BLUEBUBBLES_URL=http://localhost:1234 BLUEBUBBLES_PASSWORD=... bluebubbles-mcp
"""

import asyncio
import logging
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp import types

from bluebubbles.api_client import BlueBubblesClient
from bluebubbles.contact_resolver import ContactResolver

from bluebubbles_mcp.config import ConfigError, Settings, load_settings, setup_logging, usage_text
from bluebubbles_mcp.handlers import messaging, chats, contacts, findmy, server_tools
from bluebubbles_mcp.prompts import build_prompt, list_prompts
from bluebubbles_mcp.resources import (
    list_resource_templates,
    list_resources,
    read_resource_contents,
)
from bluebubbles_mcp.tools import TOOL_DEFINITIONS
from bluebubbles_mcp.utils.responses import text_response

logger = logging.getLogger(__name__)


# =============================================================================
# TOOL REGISTRY
# =============================================================================

# Maps tool name to (handler_function, dependency_type):
# - "client": handler(arguments, client)
# - "client_resolver": handler(arguments, client, resolver)
TOOL_REGISTRY = {
    # Messaging
    "bb_send_message": (messaging.handle_send_message, "client"),
    "bb_send_message_to_address": (messaging.handle_send_message_to_address, "client"),
    "bb_reply_to_message": (messaging.handle_reply_to_message, "client"),
    "bb_react_to_message": (messaging.handle_react_to_message, "client"),
    "bb_edit_message": (messaging.handle_edit_message, "client"),
    "bb_unsend_message": (messaging.handle_unsend_message, "client"),
    "bb_search_messages": (messaging.handle_search_messages, "client_resolver"),
    "bb_get_recent_messages": (messaging.handle_get_recent_messages, "client_resolver"),
    "bb_get_message": (messaging.handle_get_message, "client_resolver"),
    # Chats
    "bb_list_chats": (chats.handle_list_chats, "client_resolver"),
    "bb_get_chat": (chats.handle_get_chat, "client_resolver"),
    "bb_create_group_chat": (chats.handle_create_group_chat, "client"),
    "bb_rename_group_chat": (chats.handle_rename_group_chat, "client"),
    "bb_add_participant": (chats.handle_add_participant, "client"),
    "bb_remove_participant": (chats.handle_remove_participant, "client"),
    "bb_mark_chat_read": (chats.handle_mark_chat_read, "client"),
    "bb_mark_chat_unread": (chats.handle_mark_chat_unread, "client"),
    "bb_start_typing": (chats.handle_start_typing, "client"),
    "bb_stop_typing": (chats.handle_stop_typing, "client"),
    "bb_leave_chat": (chats.handle_leave_chat, "client"),
    "bb_delete_chat": (chats.handle_delete_chat, "client"),
    "bb_delete_message": (chats.handle_delete_message, "client"),
    # Contacts
    "bb_get_contacts": (contacts.handle_get_contacts, "client"),
    "bb_search_contacts": (contacts.handle_search_contacts, "client"),
    "bb_get_contact_detail": (contacts.handle_get_contact_detail, "client"),
    "bb_get_contact_photo": (contacts.handle_get_contact_photo, "client"),
    "bb_check_imessage_status": (contacts.handle_check_imessage_status, "client"),
    "bb_get_suggested_names": (contacts.handle_get_suggested_names, "client"),
    "bb_detect_business": (contacts.handle_detect_business, "client"),
    "bb_resolve_contact": (contacts.handle_resolve_contact, "client_resolver"),
    # Find My
    "bb_get_findmy_devices": (findmy.handle_get_findmy_devices, "client"),
    "bb_refresh_findmy_devices": (findmy.handle_refresh_findmy_devices, "client"),
    "bb_get_findmy_friends": (findmy.handle_get_findmy_friends, "client"),
    "bb_refresh_findmy_friends": (findmy.handle_refresh_findmy_friends, "client"),
    # Server
    "bb_get_server_info": (server_tools.handle_get_server_info, "client"),
    "bb_get_server_stats": (server_tools.handle_get_server_stats, "client"),
    "bb_get_handles": (server_tools.handle_get_handles, "client"),
    "bb_check_handle_availability": (server_tools.handle_check_handle_availability, "client"),
    "bb_get_focus_status": (server_tools.handle_get_focus_status, "client"),
    "bb_get_scheduled_messages": (server_tools.handle_get_scheduled_messages, "client"),
    "bb_create_scheduled_message": (server_tools.handle_create_scheduled_message, "client"),
    "bb_delete_scheduled_message": (server_tools.handle_delete_scheduled_message, "client"),
    "bb_restart_imessage": (server_tools.handle_restart_imessage, "client"),
}


async def dispatch_tool(name: str, arguments: dict, client, resolver) -> list[types.TextContent]:
    """
    Handle MCP tool calls using the tool registry pattern.

    Args:
        name: Tool name
        arguments: Tool arguments
        client: BlueBubblesClient instance
        resolver: ContactResolver instance

    Returns:
        List of TextContent responses
    """
    logger.info(f"Tool called: {name}")
    logger.debug(f"{name} argument keys: {sorted(arguments or {})}")
    arguments = arguments or {}

    try:
        if name not in TOOL_REGISTRY:
            raise ValueError(f"Unknown tool: {name}")

        handler, dep_type = TOOL_REGISTRY[name]

        if dep_type == "client":
            return await handler(arguments, client)
        elif dep_type == "client_resolver":
            return await handler(arguments, client, resolver)
        else:
            raise ValueError(f"Unknown dependency type: {dep_type}")

    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return text_response(f"Error: {str(e)}")


def create_server(settings: Settings, client, resolver) -> Server:
    """Build the MCP server with tools, resources and prompts bound to client/resolver."""
    app = Server(settings.server_name, version=settings.version)

    @app.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return TOOL_DEFINITIONS

    @app.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        return await dispatch_tool(name, arguments, client, resolver)

    @app.list_resources()
    async def handle_list_resources() -> list[types.Resource]:
        return list_resources()

    @app.list_resource_templates()
    async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
        return list_resource_templates()

    @app.read_resource()
    async def handle_read_resource(uri):
        return await read_resource_contents(uri, client, resolver)

    @app.list_prompts()
    async def handle_list_prompts() -> list[types.Prompt]:
        return list_prompts()

    @app.get_prompt()
    async def handle_get_prompt(name: str, arguments: dict | None) -> types.GetPromptResult:
        return await build_prompt(name, arguments, client, resolver)

    return app


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

async def main():
    """Run the MCP server."""
    try:
        settings = load_settings()
    except ConfigError as e:
        print(usage_text(str(e)), file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.log_level, settings.log_dir)
    logger.info("Starting BlueBubbles MCP Server...")
    logger.info(f"Server name: {settings.server_name}")
    logger.info(f"Version: {settings.version}")

    client = BlueBubblesClient(
        settings.bluebubbles_url,
        settings.bluebubbles_password,
        timeout=settings.request_timeout,
    )
    resolver = ContactResolver(
        client,
        ttl_seconds=settings.contact_cache_ttl,
        refresh_timeout=settings.contact_refresh_timeout,
    )

    # Reachability is informative only; tools report connection errors themselves
    try:
        await client.ping()
        logger.info(f"Connected to BlueBubbles at {settings.bluebubbles_url}")
    except Exception as e:
        logger.warning(f"BlueBubbles server not reachable at startup: {e}")

    app = create_server(settings, client, resolver)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options()
            )
    finally:
        await client.aclose()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
