"""
Error handling utilities for MCP tool handlers.

Translates BlueBubbles API and transport failures into responses the agent
can act on.
"""

import logging

import httpx
from mcp import types

from bluebubbles.api_client import BlueBubblesAPIError

logger = logging.getLogger(__name__)

CONNECTION_HELP = """
To fix:

1. Make sure the BlueBubbles server app is running on the Mac
2. Check BLUEBUBBLES_URL (including the port, e.g. http://localhost:1234)
3. If the server is remote, confirm the tunnel/proxy URL is still valid
"""

PRIVATE_API_HINT = (
    "Some features (typing indicators, reactions, edits, contact details, "
    "Find My friends) require the BlueBubbles Private API to be enabled."
)


def handle_api_error(
    e: Exception,
    operation: str = ""
) -> list[types.TextContent]:
    """
    Handle errors raised while calling the BlueBubbles server.

    Args:
        e: The exception that was raised
        operation: Description of what operation was being performed

    Returns:
        Formatted error response with troubleshooting info
    """
    error_msg = f"Error {operation}: {e}" if operation else f"Error: {e}"

    if isinstance(e, httpx.TimeoutException):
        logger.warning(error_msg)
        return [types.TextContent(
            type="text",
            text=(
                f"⏳ BlueBubbles server timed out"
                f"{' while ' + operation if operation else ''}\n\n"
                "The server may be busy (e.g. syncing or indexing). "
                "Try again, or raise BLUEBUBBLES_TIMEOUT."
            )
        )]

    if isinstance(e, httpx.TransportError):
        logger.error(error_msg)
        return [types.TextContent(
            type="text",
            text=(
                f"❌ Cannot reach the BlueBubbles server\n\n"
                f"Error: {e!r}\n"
                f"{CONNECTION_HELP}"
            )
        )]

    if isinstance(e, BlueBubblesAPIError):
        logger.error(error_msg)
        if e.status_code == 401:
            return [types.TextContent(
                type="text",
                text=(
                    f"❌ BlueBubbles rejected the password\n\n"
                    f"Error: {e}\n\n"
                    "Check BLUEBUBBLES_PASSWORD against the server settings."
                )
            )]
        text = error_msg
        if e.status_code in (400, 500) and e.error:
            text += f"\n\nNote: {PRIVATE_API_HINT}"
        return [types.TextContent(type="text", text=text)]

    logger.error(error_msg, exc_info=True)
    return [types.TextContent(type="text", text=error_msg)]
