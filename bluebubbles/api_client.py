"""
BlueBubbles REST API client.

Wraps the HTTP calls to a BlueBubbles server (``/api/v1/...``). Every request
carries the server password as a query parameter; responses are the
BlueBubbles envelope ``{status, message, data, metadata?, error?}``.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0  # seconds


class BlueBubblesAPIError(Exception):
    """The server answered with an error status or an unreadable body."""

    def __init__(self, status_code: int, message: str, error: Any = None):
        self.status_code = status_code
        self.message = message
        self.error = error
        super().__init__(self._describe())

    def _describe(self) -> str:
        text = f"HTTP {self.status_code}: {self.message}"
        if self.error:
            text += f" ({self.error})"
        return text


def _segment(value: str) -> str:
    """Percent-encode a single URL path segment."""
    return quote(str(value), safe="")


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


class BlueBubblesClient:
    """Async client for the BlueBubbles server REST API."""

    def __init__(
        self,
        base_url: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Server URL, e.g. http://localhost:1234
            password: BlueBubbles server password
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._password = password
        self._http = httpx.AsyncClient(
            base_url=f"{self.base_url}/api/v1/",
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "BlueBubblesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send a request and return the decoded envelope.

        Raises:
            BlueBubblesAPIError: on HTTP status >= 400 or a non-JSON body
            httpx.HTTPError: on transport failures
        """
        query = {"password": self._password}
        if params:
            query.update({k: str(v) for k, v in params.items() if v is not None})

        response = await self._http.request(
            method,
            path,
            params=query,
            json=body,
        )

        try:
            payload = response.json()
        except ValueError:
            raise BlueBubblesAPIError(
                response.status_code,
                f"Invalid JSON response for {method} {path}",
            )

        if response.status_code >= 400:
            if isinstance(payload, dict):
                message = payload.get("message") or response.reason_phrase
                error = payload.get("error")
            else:
                message, error = response.reason_phrase, None
            logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
            raise BlueBubblesAPIError(response.status_code, message, error)

        return payload

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: Any = None, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("POST", path, body=body, params=params)

    async def put(self, path: str, body: Any = None, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("PUT", path, body=body, params=params)

    async def delete(self, path: str, body: Any = None, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("DELETE", path, body=body, params=params)

    # ── Server ──

    async def ping(self):
        return await self.get("ping")

    async def get_server_info(self):
        return await self.get("server/info")

    async def get_stat_totals(self):
        return await self.get("server/statistics/totals")

    async def get_stat_media(self):
        return await self.get("server/statistics/media")

    # ── Messages ──

    async def send_text(
        self,
        chat_guid: str,
        message: str,
        method: Optional[str] = None,
        effect_id: Optional[str] = None,
        subject: Optional[str] = None,
        selected_message_guid: Optional[str] = None,
        part_index: Optional[int] = None,
    ):
        body = _drop_none({
            "chatGuid": chat_guid,
            "message": message,
            "method": method,
            "effectId": effect_id,
            "subject": subject,
            "selectedMessageGuid": selected_message_guid,
            "partIndex": part_index,
        })
        return await self.post("message/text", body)

    async def send_reply(self, chat_guid: str, message: str, reply_guid: str, part_index: Optional[int] = None):
        return await self.send_text(
            chat_guid,
            message,
            selected_message_guid=reply_guid,
            part_index=part_index if part_index is not None else 0,
        )

    async def react(self, chat_guid: str, selected_message_guid: str, reaction: str, part_index: Optional[int] = None):
        return await self.post("message/react", _drop_none({
            "chatGuid": chat_guid,
            "selectedMessageGuid": selected_message_guid,
            "reaction": reaction,
            "partIndex": part_index,
        }))

    async def edit_message(
        self,
        message_guid: str,
        edited_message: str,
        backwards_compat_message: str,
        part_index: Optional[int] = None,
    ):
        return await self.post(f"message/{_segment(message_guid)}/edit", _drop_none({
            "editedMessage": edited_message,
            "backwardsCompatibilityMessage": backwards_compat_message,
            "partIndex": part_index,
        }))

    async def unsend_message(self, message_guid: str, part_index: Optional[int] = None):
        return await self.post(
            f"message/{_segment(message_guid)}/unsend",
            _drop_none({"partIndex": part_index}),
        )

    async def get_message(self, message_guid: str, with_query: Optional[str] = None):
        return await self.get(f"message/{_segment(message_guid)}", {"with": with_query})

    async def query_messages(self, body: Dict[str, Any]):
        return await self.post("message/query", body)

    # ── Chats ──

    async def create_chat(self, addresses: List[str], message: Optional[str] = None, service: Optional[str] = None):
        return await self.post("chat/new", _drop_none({
            "addresses": addresses,
            "message": message,
            "service": service,
        }))

    async def query_chats(self, body: Dict[str, Any]):
        return await self.post("chat/query", body)

    async def get_chat(self, chat_guid: str):
        return await self.get(f"chat/{_segment(chat_guid)}")

    async def get_chat_messages(self, chat_guid: str, params: Optional[Dict[str, Any]] = None):
        return await self.get(f"chat/{_segment(chat_guid)}/message", params)

    async def update_chat(self, chat_guid: str, display_name: str):
        return await self.put(f"chat/{_segment(chat_guid)}", {"displayName": display_name})

    async def add_participant(self, chat_guid: str, address: str):
        return await self.post(f"chat/{_segment(chat_guid)}/participant/add", {"address": address})

    async def remove_participant(self, chat_guid: str, address: str):
        return await self.post(f"chat/{_segment(chat_guid)}/participant/remove", {"address": address})

    async def mark_chat_read(self, chat_guid: str):
        return await self.post(f"chat/{_segment(chat_guid)}/read")

    async def mark_chat_unread(self, chat_guid: str):
        return await self.post(f"chat/{_segment(chat_guid)}/unread")

    async def start_typing(self, chat_guid: str):
        return await self.post(f"chat/{_segment(chat_guid)}/typing")

    async def stop_typing(self, chat_guid: str):
        return await self.delete(f"chat/{_segment(chat_guid)}/typing")

    async def leave_chat(self, chat_guid: str):
        return await self.post(f"chat/{_segment(chat_guid)}/leave")

    async def delete_chat(self, chat_guid: str):
        return await self.delete(f"chat/{_segment(chat_guid)}")

    async def delete_chat_message(self, chat_guid: str, message_guid: str):
        return await self.delete(f"chat/{_segment(chat_guid)}/{_segment(message_guid)}")

    # ── Contacts ──

    async def get_contacts(self):
        return await self.get("contact")

    async def list_contacts(self) -> List[Dict[str, Any]]:
        """All contacts as a list (the ``data`` of GET /contact)."""
        result = await self.get_contacts()
        data = result.get("data") if isinstance(result, dict) else None
        return data if data is not None else []

    async def query_contacts(self, body: Any):
        return await self.post("contact/query", body)

    async def get_contact_for_handle(self, address: str):
        return await self.get(f"contact/papi/handle/{_segment(address)}")

    async def get_contact_photo(self, address: str, quality: Optional[str] = None):
        return await self.get(f"contact/papi/handle/{_segment(address)}/photo", {"quality": quality})

    async def batch_check_imessage(self, addresses: List[str]):
        return await self.post("contact/papi/imessage-status", {"addresses": addresses})

    async def get_suggested_names(self):
        return await self.get("contact/papi/suggested-names")

    async def detect_business(self, address: str):
        return await self.get(f"contact/papi/handle/{_segment(address)}/business")

    # ── Handles ──

    async def query_handles(self, body: Dict[str, Any]):
        return await self.post("handle/query", body)

    async def check_imessage_availability(self, address: str):
        return await self.get("handle/availability/imessage", {"address": address})

    async def check_facetime_availability(self, address: str):
        return await self.get("handle/availability/facetime", {"address": address})

    async def check_availability(self, address: str):
        """iMessage and FaceTime availability, fetched concurrently."""
        return await asyncio.gather(
            self.check_imessage_availability(address),
            self.check_facetime_availability(address),
        )

    async def get_focus_status(self, handle_guid: str):
        return await self.get(f"handle/{_segment(handle_guid)}/focus")

    # ── Find My ──

    async def get_devices(self):
        return await self.get("icloud/findmy/devices")

    async def refresh_devices(self):
        return await self.post("icloud/findmy/devices/refresh")

    async def get_friends(self):
        return await self.get("icloud/findmy/friends")

    async def refresh_friends(self):
        return await self.post("icloud/findmy/friends/refresh")

    # ── Scheduled Messages ──

    async def get_scheduled_messages(self):
        return await self.get("message/schedule")

    async def create_scheduled_message(self, body: Dict[str, Any]):
        return await self.post("message/schedule", body)

    async def delete_scheduled_message(self, schedule_id: str):
        return await self.delete(f"message/schedule/{_segment(schedule_id)}")

    # ── macOS ──

    async def restart_messages_app(self):
        return await self.post("mac/imessage/restart")
