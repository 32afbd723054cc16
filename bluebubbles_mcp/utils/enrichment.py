"""
Apply contact enrichment to API envelopes.

Enrichment never decides whether a tool call succeeds: if it fails for any
reason the unenriched payload is returned.
"""

import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


async def enrich_envelope(result: Any, enrich: Callable[[Any], Awaitable[Any]]) -> Any:
    """
    Enrich ``result["data"]`` in place with a ContactResolver method.

    Args:
        result: BlueBubbles response envelope
        enrich: e.g. resolver.enrich_chats or resolver.enrich_message

    Returns:
        The same envelope
    """
    if not isinstance(result, dict) or result.get("data") is None:
        return result
    try:
        result["data"] = await enrich(result["data"])
    except Exception as e:
        logger.warning(f"Contact enrichment skipped: {e!r}")
    return result


async def enrich_payload(data: Any, enrich: Callable[[Any], Awaitable[Any]]) -> Any:
    """Enrich a bare payload (no envelope), returning it unchanged on failure."""
    try:
        return await enrich(data)
    except Exception as e:
        logger.warning(f"Contact enrichment skipped: {e!r}")
        return data
