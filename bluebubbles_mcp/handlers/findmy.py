"""
Find My Handlers

- bb_get_findmy_devices, bb_refresh_findmy_devices: Device locations
- bb_get_findmy_friends, bb_refresh_findmy_friends: Friend locations (Private API)
"""

import logging
from mcp import types

from bluebubbles_mcp.utils.responses import json_response
from bluebubbles_mcp.utils.errors import handle_api_error

logger = logging.getLogger(__name__)


async def _fetch(call, operation: str) -> list[types.TextContent]:
    try:
        result = await call()
    except Exception as e:
        return handle_api_error(e, operation)
    return json_response(result.get("data") if isinstance(result, dict) else result)


async def handle_get_findmy_devices(arguments: dict, client) -> list[types.TextContent]:
    return await _fetch(client.get_devices, "fetching Find My devices")


async def handle_refresh_findmy_devices(arguments: dict, client) -> list[types.TextContent]:
    return await _fetch(client.refresh_devices, "refreshing Find My devices")


async def handle_get_findmy_friends(arguments: dict, client) -> list[types.TextContent]:
    return await _fetch(client.get_friends, "fetching Find My friends")


async def handle_refresh_findmy_friends(arguments: dict, client) -> list[types.TextContent]:
    return await _fetch(client.refresh_friends, "refreshing Find My friends")
