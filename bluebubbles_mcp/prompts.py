"""
MCP prompts: conversation summaries and reply drafting.

Each prompt embeds live chat data (with contact names resolved) into a
single user message.
"""

import logging

from mcp import types

from bluebubbles_mcp.resources import fetch_chat_messages, fetch_recent_chats
from bluebubbles_mcp.utils.responses import to_json

logger = logging.getLogger(__name__)

SUMMARY_MESSAGE_LIMIT = 50
DRAFT_MESSAGE_LIMIT = 25
CATCH_UP_CHAT_LIMIT = 20

CHAT_GUID_ARGUMENT = types.PromptArgument(
    name="chatGuid",
    description="Chat GUID (e.g. iMessage;-;+1234567890)",
    required=True,
)

PROMPTS = [
    types.Prompt(
        name="summarize_chat",
        description="Summarize recent messages in a chat",
        arguments=[CHAT_GUID_ARGUMENT],
    ),
    types.Prompt(
        name="draft_reply",
        description="Draft a reply based on conversation context",
        arguments=[CHAT_GUID_ARGUMENT],
    ),
    types.Prompt(
        name="catch_up",
        description="Summarize unread messages across all chats",
        arguments=[],
    ),
]


def list_prompts() -> list[types.Prompt]:
    return PROMPTS


def _user_prompt(description: str, text: str) -> types.GetPromptResult:
    return types.GetPromptResult(
        description=description,
        messages=[
            types.PromptMessage(
                role="user",
                content=types.TextContent(type="text", text=text),
            )
        ],
    )


def _chat_guid(arguments: dict | None) -> str:
    chat_guid = (arguments or {}).get("chatGuid")
    if not isinstance(chat_guid, str) or not chat_guid.strip():
        raise ValueError("chatGuid is required")
    return chat_guid.strip()


async def build_prompt(name: str, arguments: dict | None, client, resolver) -> types.GetPromptResult:
    """
    Render a prompt with live data.

    Raises:
        ValueError: for unknown prompt names or a missing chatGuid
    """
    logger.info(f"Prompt requested: {name}")

    if name == "summarize_chat":
        chat_guid = _chat_guid(arguments)
        messages = await fetch_chat_messages(client, resolver, chat_guid, SUMMARY_MESSAGE_LIMIT)
        return _user_prompt(
            "Summarize recent messages in a chat",
            f"Here are the most recent messages from the chat {chat_guid}:\n\n"
            f"{to_json(messages)}\n\n"
            "Please provide a concise summary of this conversation, highlighting the key "
            "topics discussed, any decisions made, and any action items or follow-ups mentioned.",
        )

    if name == "draft_reply":
        chat_guid = _chat_guid(arguments)
        messages = await fetch_chat_messages(client, resolver, chat_guid, DRAFT_MESSAGE_LIMIT)
        return _user_prompt(
            "Draft a reply based on conversation context",
            f"Here are the most recent messages from the chat {chat_guid}:\n\n"
            f"{to_json(messages)}\n\n"
            "Based on this conversation context, draft a thoughtful reply. Consider the tone "
            "and style of the conversation, any questions that were asked, and any topics that "
            "need follow-up. Provide 2-3 reply options ranging from brief to detailed.",
        )

    if name == "catch_up":
        chats = await fetch_recent_chats(client, resolver, CATCH_UP_CHAT_LIMIT)
        return _user_prompt(
            "Summarize unread messages across all chats",
            "Here are my most recent chats with their last messages:\n\n"
            f"{to_json(chats)}\n\n"
            "Please give me a catch-up summary of what's been happening across my "
            "conversations. Group by chat and highlight anything that seems important "
            "or needs a response.",
        )

    raise ValueError(f"Unknown prompt: {name}")
