"""
Contact resolution and data enrichment.

BlueBubbles chat objects often return a blank displayName for 1:1 chats, so
an agent only sees raw phone numbers. This module builds a lookup table from
the server's contacts list and enriches chat/message payloads with resolved
names.

Enrichment is best-effort: a failed contacts fetch leaves the previous cache
in place and is never raised to the caller.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .normalize import normalize_address

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 5 * 60  # seconds
DEFAULT_REFRESH_TIMEOUT = 30.0  # seconds


def _text(value) -> str:
    """Return value if it is a string, else an empty string."""
    return value if isinstance(value, str) else ""


def _entry_address(entry) -> str:
    """Address of a phoneNumbers/emails entry: {"address": ...} or a bare string."""
    if isinstance(entry, dict):
        return _text(entry.get("address"))
    return _text(entry)


@dataclass
class ContactRecord:
    """A contact from the BlueBubbles contacts list."""

    display_name: str = ""
    first_name: str = ""
    last_name: str = ""
    phone_numbers: List[str] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ContactRecord":
        return cls(
            display_name=_text(payload.get("displayName")),
            first_name=_text(payload.get("firstName")),
            last_name=_text(payload.get("lastName")),
            phone_numbers=[
                a for a in map(_entry_address, payload.get("phoneNumbers") or []) if a
            ],
            emails=[a for a in map(_entry_address, payload.get("emails") or []) if a],
        )

    @property
    def name(self) -> str:
        """displayName wins; otherwise "first last"."""
        return self.display_name or f"{self.first_name} {self.last_name}".strip()

    @property
    def addresses(self) -> List[str]:
        return self.phone_numbers + self.emails


def build_index(contacts) -> Dict[str, str]:
    """
    Build a normalized-address -> name index from raw contact payloads.

    Contacts without a usable name are skipped. Later contacts overwrite
    earlier ones for the same normalized address.

    Raises:
        TypeError: if contacts is not a list
    """
    if not isinstance(contacts, list):
        raise TypeError(f"Expected a list of contacts, got {type(contacts).__name__}")

    index: Dict[str, str] = {}
    for payload in contacts:
        if not isinstance(payload, dict):
            continue
        record = ContactRecord.from_payload(payload)
        name = record.name
        if not name:
            continue
        for address in record.addresses:
            key = normalize_address(address)
            if key:
                index[key] = name
    return index


def participant_address(participant) -> str:
    """
    Address of a chat participant.

    Precedence: handle.address, handle.id, participant.address.
    """
    if not isinstance(participant, dict):
        return ""
    handle = participant.get("handle")
    if isinstance(handle, dict):
        address = _text(handle.get("address")) or _text(handle.get("id"))
        if address:
            return address
    return _text(participant.get("address"))


def sender_address(message: Dict[str, Any]) -> str:
    """
    Address of a message sender.

    Precedence: handle.address, handle.id, handleId. BlueBubbles usually sends
    handleId as a numeric row id, which is not an address and is ignored.
    """
    handle = message.get("handle")
    if isinstance(handle, dict):
        address = _text(handle.get("address")) or _text(handle.get("id"))
        if address:
            return address
    return _text(message.get("handleId"))


def guid_address(guid) -> str:
    """
    Address embedded in a chat GUID.

    "iMessage;-;+19186257838" -> "+19186257838". Everything from the third
    segment on is kept.
    """
    parts = _text(guid).split(";")
    if len(parts) >= 3:
        return ";".join(parts[2:])
    return ""


class ContactResolver:
    """
    Resolves phone numbers and emails to contact names.

    The index is loaded lazily from ``client.list_contacts()`` and refreshed
    once it is older than ``ttl_seconds``. Concurrent callers hitting a cold
    or expired cache share a single in-flight refresh.
    """

    def __init__(
        self,
        client,
        ttl_seconds: float = DEFAULT_CACHE_TTL,
        refresh_timeout: Optional[float] = DEFAULT_REFRESH_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            client: Object with an async ``list_contacts()`` returning raw contacts
            ttl_seconds: How long a successful refresh is trusted
            refresh_timeout: Upper bound for one contacts fetch (None disables it)
            clock: Monotonic time source
        """
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.refresh_timeout = refresh_timeout
        self._clock = clock
        self._index: Dict[str, str] = {}
        self._last_refresh: Optional[float] = None
        self._refresh_task: Optional[asyncio.Future] = None
        self._refresh_count = 0
        self._failed_refresh_count = 0

    def _is_fresh(self) -> bool:
        if not self._index or self._last_refresh is None:
            return False
        return self._clock() - self._last_refresh < self.ttl_seconds

    async def _ensure_fresh(self) -> None:
        """Make sure the index is loaded and not expired."""
        if self._is_fresh():
            return

        # One refresh at a time; the slot is cleared by the task itself,
        # so a cancelled caller never opens it for a second fetch
        if self._refresh_task is None:
            task = asyncio.ensure_future(self._refresh())
            task.add_done_callback(self._refresh_done)
            self._refresh_task = task
        await asyncio.shield(self._refresh_task)

    def _refresh_done(self, task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _refresh(self) -> bool:
        """
        Reload the index from the contacts list.

        Returns:
            True if the index was rebuilt, False if the fetch failed. A failed
            refresh keeps the previous index and timestamp.
        """
        try:
            contacts = await asyncio.wait_for(
                self.client.list_contacts(), timeout=self.refresh_timeout
            )
            index = build_index(contacts)
        except Exception as e:
            self._failed_refresh_count += 1
            logger.warning(f"Contact refresh failed, keeping cached names: {e!r}")
            return False

        self._index = index
        self._last_refresh = self._clock()
        self._refresh_count += 1
        logger.info(f"Loaded {len(index)} contact addresses")
        return True

    def invalidate(self) -> None:
        """Force the next resolution to refresh the index."""
        self._last_refresh = None

    def stats(self) -> Dict[str, Any]:
        """Cache statistics."""
        age = None
        if self._last_refresh is not None:
            age = self._clock() - self._last_refresh
        return {
            "addresses": len(self._index),
            "ttl_seconds": self.ttl_seconds,
            "last_refresh_age_seconds": age,
            "refreshes": self._refresh_count,
            "failed_refreshes": self._failed_refresh_count,
            "refreshing": self._refresh_task is not None,
        }

    async def resolve(self, address) -> Optional[str]:
        """
        Resolve an address (phone/email) to a contact name.

        Returns:
            The contact name, or None if there is no match
        """
        if not address:
            return None
        await self._ensure_fresh()
        return self._index.get(normalize_address(address))

    async def enrich_chat(self, chat):
        """
        Fill in a blank chat displayName from its participants.

        Falls back to the address in the chat GUID when there is no
        participant data. Sets ``_resolvedName`` when a name was synthesized.
        """
        if not isinstance(chat, dict):
            return chat
        display_name = chat.get("displayName")
        if isinstance(display_name, str) and display_name.strip():
            return chat

        participants = chat.get("participants")
        if not isinstance(participants, list):
            participants = []
        addresses = [a for a in map(participant_address, participants) if a]

        if not addresses:
            fallback = guid_address(chat.get("guid"))
            if fallback:
                addresses.append(fallback)

        if not addresses:
            return chat

        names = await asyncio.gather(*(self.resolve(a) for a in addresses))
        chat["displayName"] = ", ".join(
            name or address for name, address in zip(names, addresses)
        )
        chat["_resolvedName"] = True
        return chat

    async def enrich_chats(self, chats):
        """Enrich a list of chats concurrently, preserving order."""
        if not isinstance(chats, list):
            return chats
        return list(await asyncio.gather(*(self.enrich_chat(c) for c in chats)))

    async def enrich_message(self, message):
        """Add ``_senderName`` to a message whose sender is a known contact."""
        if not isinstance(message, dict) or message.get("_senderName"):
            return message

        address = sender_address(message)
        if not address:
            return message

        name = await self.resolve(address)
        if name:
            message["_senderName"] = name
            handle = message.get("handle")
            if isinstance(handle, dict):
                handle["_resolvedName"] = name
        return message

    async def enrich_messages(self, messages):
        """Enrich a list of messages concurrently, preserving order."""
        if not isinstance(messages, list):
            return messages
        return list(await asyncio.gather(*(self.enrich_message(m) for m in messages)))
