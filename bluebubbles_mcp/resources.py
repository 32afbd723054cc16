"""
MCP resources exposed by the BlueBubbles server.

- bluebubbles://server/info: server status, version and capabilities
- bluebubbles://chats: the 50 most recently active chats, named from contacts
- bluebubbles://chat/{guid}/messages: the 50 newest messages in one chat,
  with sender names resolved
"""

import logging
import re
from urllib.parse import unquote

from mcp import types
from mcp.server.lowlevel.helper_types import ReadResourceContents

from bluebubbles_mcp.utils.enrichment import enrich_payload
from bluebubbles_mcp.utils.responses import to_json

logger = logging.getLogger(__name__)

MIME_JSON = "application/json"
SERVER_INFO_URI = "bluebubbles://server/info"
CHATS_URI = "bluebubbles://chats"
CHAT_MESSAGES_TEMPLATE = "bluebubbles://chat/{guid}/messages"

RESOURCE_LIMIT = 50

_CHAT_MESSAGES_RE = re.compile(r"^bluebubbles://chat/(?P<guid>.+)/messages/?$")


def list_resources() -> list[types.Resource]:
    return [
        types.Resource(
            uri=SERVER_INFO_URI,
            name="server-info",
            description="BlueBubbles server status, version, and capabilities",
            mimeType=MIME_JSON,
        ),
        types.Resource(
            uri=CHATS_URI,
            name="recent-chats",
            description="List of recent chats with participants",
            mimeType=MIME_JSON,
        ),
    ]


def list_resource_templates() -> list[types.ResourceTemplate]:
    return [
        types.ResourceTemplate(
            uriTemplate=CHAT_MESSAGES_TEMPLATE,
            name="chat-messages",
            description="Recent messages in a specific chat (percent-encode the chat GUID)",
            mimeType=MIME_JSON,
        ),
    ]


def _data(result):
    return result.get("data") if isinstance(result, dict) else result


async def fetch_recent_chats(client, resolver, limit: int = RESOURCE_LIMIT):
    """Most recently active chats with their last message, named from contacts."""
    result = await client.query_chats({
        "limit": limit,
        "offset": 0,
        "sort": "lastmessage",
        "with": ["lastMessage", "sms"],
    })
    return await enrich_payload(_data(result), resolver.enrich_chats)


async def fetch_chat_messages(client, resolver, chat_guid: str, limit: int = RESOURCE_LIMIT):
    """Newest messages of a chat with sender names resolved."""
    result = await client.get_chat_messages(chat_guid, {
        "limit": limit,
        "sort": "DESC",
        "with": "chat,handle",
    })
    return await enrich_payload(_data(result), resolver.enrich_messages)


async def read_resource_contents(uri, client, resolver) -> list[ReadResourceContents]:
    """
    Read one resource as JSON.

    Args:
        uri: Resource URI (str or AnyUrl)
        client: BlueBubblesClient instance
        resolver: ContactResolver instance

    Raises:
        ValueError: for URIs this server does not serve
    """
    uri = str(uri)
    logger.info(f"Resource read: {uri}")

    if uri == SERVER_INFO_URI:
        data = _data(await client.get_server_info())
    elif uri.rstrip("/") == CHATS_URI:
        data = await fetch_recent_chats(client, resolver)
    else:
        match = _CHAT_MESSAGES_RE.match(uri)
        if not match:
            raise ValueError(f"Unknown resource: {uri}")
        data = await fetch_chat_messages(client, resolver, unquote(match.group("guid")))

    return [ReadResourceContents(content=to_json(data), mime_type=MIME_JSON)]
