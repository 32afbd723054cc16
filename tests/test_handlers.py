"""
Tests for MCP tool handlers.

Handlers are called directly with an AsyncMock BlueBubblesClient, verifying
argument validation, the API call made, enrichment, and error text.
"""

import json
import logging

import httpx
import pytest

from bluebubbles.api_client import BlueBubblesAPIError
from bluebubbles_mcp.handlers import chats, contacts, findmy, messaging, server_tools


def payload(result):
    """Decode the JSON text of a single-item handler response."""
    assert len(result) == 1
    return json.loads(result[0].text)


# =============================================================================
# Messaging
# =============================================================================

class TestSendMessage:

    @pytest.mark.asyncio
    async def test_missing_chat_guid(self, mock_client):
        result = await messaging.handle_send_message({"message": "hi"}, mock_client)

        assert result[0].text == "Validation error: Missing required parameter: chatGuid"
        mock_client.send_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_message(self, mock_client):
        result = await messaging.handle_send_message({"chatGuid": "c", "message": "  "}, mock_client)

        assert "Validation error" in result[0].text
        assert "cannot be empty" in result[0].text

    @pytest.mark.asyncio
    async def test_invalid_method(self, mock_client):
        result = await messaging.handle_send_message(
            {"chatGuid": "c", "message": "hi", "method": "carrier-pigeon"}, mock_client
        )

        assert "Validation error" in result[0].text
        assert "method" in result[0].text

    @pytest.mark.asyncio
    async def test_sends(self, mock_client):
        mock_client.send_text.return_value = {"status": 200, "data": {"guid": "m1"}}

        result = await messaging.handle_send_message(
            {"chatGuid": "iMessage;-;+15551234567", "message": "hi", "effectId": "impact"},
            mock_client,
        )

        mock_client.send_text.assert_awaited_once_with(
            "iMessage;-;+15551234567", "hi", method=None, effect_id="impact", subject=None
        )
        assert payload(result)["data"]["guid"] == "m1"


class TestMessagingActions:

    @pytest.mark.asyncio
    async def test_send_to_address_creates_chat(self, mock_client):
        mock_client.create_chat.return_value = {"status": 200, "data": {"guid": "SMS;-;+1"}}

        await messaging.handle_send_message_to_address(
            {"address": "+15551234567", "message": "hello", "service": "SMS"}, mock_client
        )

        mock_client.create_chat.assert_awaited_once_with(["+15551234567"], "hello", "SMS")

    @pytest.mark.asyncio
    async def test_reply(self, mock_client):
        mock_client.send_reply.return_value = {"status": 200}

        await messaging.handle_reply_to_message(
            {"chatGuid": "c", "message": "yes", "replyGuid": "m1", "partIndex": 1}, mock_client
        )

        mock_client.send_reply.assert_awaited_once_with("c", "yes", "m1", 1)

    @pytest.mark.asyncio
    async def test_react_rejects_unknown_reaction(self, mock_client):
        result = await messaging.handle_react_to_message(
            {"chatGuid": "c", "selectedMessageGuid": "m1", "reaction": "wow"}, mock_client
        )

        assert "Validation error" in result[0].text
        mock_client.react.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_react_removal(self, mock_client):
        mock_client.react.return_value = {"status": 200}

        await messaging.handle_react_to_message(
            {"chatGuid": "c", "selectedMessageGuid": "m1", "reaction": "-love"}, mock_client
        )

        mock_client.react.assert_awaited_once_with("c", "m1", "-love", None)

    @pytest.mark.asyncio
    async def test_edit_requires_compat_text(self, mock_client):
        result = await messaging.handle_edit_message(
            {"messageGuid": "m1", "editedMessage": "fixed"}, mock_client
        )

        assert "backwardsCompatMessage" in result[0].text

    @pytest.mark.asyncio
    async def test_unsend_negative_part_index(self, mock_client):
        result = await messaging.handle_unsend_message(
            {"messageGuid": "m1", "partIndex": -1}, mock_client
        )

        assert "Validation error" in result[0].text
        assert "partIndex" in result[0].text


class TestReadingMessages:

    @pytest.mark.asyncio
    async def test_search_builds_body_and_names_senders(self, mock_client, resolver):
        mock_client.query_messages.return_value = {
            "status": 200,
            "data": [
                {"guid": "m1", "text": "hey", "handle": {"address": "+19186257838"}},
                {"guid": "m2", "text": "yo", "handle": {"address": "+12025550199"}},
            ],
        }

        result = await messaging.handle_search_messages(
            {"chatGuid": "c", "limit": 10, "sort": "ASC", "after": 1700000000, "withChat": True},
            mock_client,
            resolver,
        )

        mock_client.query_messages.assert_awaited_once_with({
            "chatGuid": "c",
            "limit": 10,
            "sort": "ASC",
            "after": 1700000000,
            "with": ["chat"],
        })
        data = payload(result)["data"]
        assert data[0]["_senderName"] == "Alice Smith"
        assert "_senderName" not in data[1]

    @pytest.mark.asyncio
    async def test_search_limit_bounds(self, mock_client, resolver):
        result = await messaging.handle_search_messages({"limit": 0}, mock_client, resolver)
        assert "Validation error" in result[0].text

        result = await messaging.handle_search_messages({"limit": 100000}, mock_client, resolver)
        assert "Validation error" in result[0].text

    @pytest.mark.asyncio
    async def test_search_rejects_string_timestamp(self, mock_client, resolver):
        result = await messaging.handle_search_messages({"before": "yesterday"}, mock_client, resolver)

        assert "Validation error" in result[0].text
        mock_client.query_messages.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recent_messages_params(self, mock_client, resolver):
        mock_client.get_chat_messages.return_value = {"status": 200, "data": []}

        await messaging.handle_get_recent_messages(
            {"chatGuid": "c", "limit": 5, "offset": 10, "after": "2025-01-01T00:00:00Z", "before": 1700000000},
            mock_client,
            resolver,
        )

        mock_client.get_chat_messages.assert_awaited_once_with(
            "c", {"limit": 5, "offset": 10, "after": "2025-01-01T00:00:00Z", "before": 1700000000}
        )

    @pytest.mark.asyncio
    async def test_get_message_enriched(self, mock_client, resolver):
        mock_client.get_message.return_value = {
            "status": 200,
            "data": {"guid": "m1", "handle": {"address": "alice@example.com"}},
        }

        result = await messaging.handle_get_message({"messageGuid": "m1", "withChat": True}, mock_client, resolver)

        mock_client.get_message.assert_awaited_once_with("m1", "chat")
        data = payload(result)["data"]
        assert data["_senderName"] == "Alice Smith"
        assert data["handle"]["_resolvedName"] == "Alice Smith"

    @pytest.mark.asyncio
    async def test_contacts_outage_does_not_fail_read(self, mock_client, resolver, contacts_client):
        contacts_client.error = ConnectionError("contacts down")
        mock_client.get_message.return_value = {
            "status": 200,
            "data": {"guid": "m1", "handle": {"address": "alice@example.com"}},
        }

        result = await messaging.handle_get_message({"messageGuid": "m1"}, mock_client, resolver)

        data = payload(result)["data"]
        assert data["guid"] == "m1"
        assert "_senderName" not in data


# =============================================================================
# Chats
# =============================================================================

class TestChats:

    @pytest.mark.asyncio
    async def test_list_chats_names_dms(self, mock_client, resolver):
        mock_client.query_chats.return_value = {
            "status": 200,
            "data": [
                {"guid": "iMessage;-;+19186257838", "displayName": "", "participants": [{"address": "+19186257838"}]},
                {"guid": "iMessage;+;chat99", "displayName": "Family", "participants": []},
            ],
            "metadata": {"total": 2},
        }

        result = await chats.handle_list_chats({"limit": 2, "sort": "lastmessage"}, mock_client, resolver)

        mock_client.query_chats.assert_awaited_once_with(
            {"with": ["lastMessage"], "limit": 2, "sort": "lastmessage"}
        )
        body = payload(result)
        assert body["data"][0]["displayName"] == "Alice Smith"
        assert body["data"][0]["_resolvedName"] is True
        assert body["data"][1]["displayName"] == "Family"
        assert body["metadata"] == {"total": 2}

    @pytest.mark.asyncio
    async def test_list_chats_invalid_sort(self, mock_client, resolver):
        result = await chats.handle_list_chats({"sort": "alphabetical"}, mock_client, resolver)

        assert "Validation error" in result[0].text

    @pytest.mark.asyncio
    async def test_get_chat_enriched(self, mock_client, resolver):
        mock_client.get_chat.return_value = {"status": 200, "data": {"guid": "SMS;-;555-123-4567"}}

        result = await chats.handle_get_chat({"chatGuid": "SMS;-;555-123-4567"}, mock_client, resolver)

        assert payload(result)["data"]["displayName"] == "Bob Jones"

    @pytest.mark.asyncio
    async def test_group_needs_two_addresses(self, mock_client):
        result = await chats.handle_create_group_chat({"addresses": ["+15551234567"]}, mock_client)

        assert "at least 2" in result[0].text
        mock_client.create_chat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_group_created(self, mock_client):
        mock_client.create_chat.return_value = {"status": 200, "data": {"guid": "iMessage;+;chat1"}}

        await chats.handle_create_group_chat(
            {"addresses": ["+15551234567", "bob@example.com"], "message": "welcome"}, mock_client
        )

        mock_client.create_chat.assert_awaited_once_with(
            ["+15551234567", "bob@example.com"], "welcome", None
        )

    @pytest.mark.asyncio
    async def test_rename(self, mock_client):
        mock_client.update_chat.return_value = {"status": 200}

        await chats.handle_rename_group_chat({"chatGuid": "g", "displayName": "Trip"}, mock_client)

        mock_client.update_chat.assert_awaited_once_with("g", "Trip")

    @pytest.mark.asyncio
    async def test_participants(self, mock_client):
        mock_client.add_participant.return_value = {"status": 200}
        mock_client.remove_participant.return_value = {"status": 200}

        await chats.handle_add_participant({"chatGuid": "g", "address": "a@b.c"}, mock_client)
        await chats.handle_remove_participant({"chatGuid": "g", "address": "a@b.c"}, mock_client)

        mock_client.add_participant.assert_awaited_once_with("g", "a@b.c")
        mock_client.remove_participant.assert_awaited_once_with("g", "a@b.c")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("handler,method", [
        (chats.handle_mark_chat_read, "mark_chat_read"),
        (chats.handle_mark_chat_unread, "mark_chat_unread"),
        (chats.handle_start_typing, "start_typing"),
        (chats.handle_stop_typing, "stop_typing"),
        (chats.handle_leave_chat, "leave_chat"),
        (chats.handle_delete_chat, "delete_chat"),
    ])
    async def test_single_chat_actions(self, mock_client, handler, method):
        getattr(mock_client, method).return_value = {"status": 200, "message": "Success"}

        result = await handler({"chatGuid": "iMessage;-;+1"}, mock_client)

        getattr(mock_client, method).assert_awaited_once_with("iMessage;-;+1")
        assert payload(result)["message"] == "Success"

    @pytest.mark.asyncio
    async def test_delete_message(self, mock_client):
        mock_client.delete_chat_message.return_value = {"status": 200}

        await chats.handle_delete_message({"chatGuid": "c", "messageGuid": "m"}, mock_client)

        mock_client.delete_chat_message.assert_awaited_once_with("c", "m")


# =============================================================================
# Contacts
# =============================================================================

class TestContacts:

    @pytest.mark.asyncio
    async def test_get_contacts_returns_data(self, mock_client, sample_contacts):
        mock_client.get_contacts.return_value = {"status": 200, "data": sample_contacts}

        result = await contacts.handle_get_contacts({}, mock_client)

        assert payload(result) == sample_contacts

    @pytest.mark.asyncio
    async def test_search_contacts_query(self, mock_client):
        mock_client.query_contacts.return_value = {"status": 200, "data": []}

        await contacts.handle_search_contacts({"query": "ali"}, mock_client)

        (where,), _ = mock_client.query_contacts.await_args
        assert where[0]["args"] == {"query": "%ali%"}
        assert "displayName LIKE :query" in where[0]["statement"]

    @pytest.mark.asyncio
    async def test_photo_quality(self, mock_client):
        result = await contacts.handle_get_contact_photo({"address": "+1", "quality": "ultra"}, mock_client)
        assert "Validation error" in result[0].text

        mock_client.get_contact_photo.return_value = {"status": 200, "data": "base64"}
        await contacts.handle_get_contact_photo({"address": "+1", "quality": "high"}, mock_client)
        mock_client.get_contact_photo.assert_awaited_once_with("+1", "high")

    @pytest.mark.asyncio
    async def test_imessage_status_needs_list(self, mock_client):
        result = await contacts.handle_check_imessage_status({"addresses": "+1"}, mock_client)
        assert "must be a list" in result[0].text

        result = await contacts.handle_check_imessage_status({"addresses": []}, mock_client)
        assert "at least 1" in result[0].text

    @pytest.mark.asyncio
    async def test_private_api_lookups(self, mock_client):
        mock_client.get_contact_for_handle.return_value = {"status": 200, "data": {"name": "A"}}
        mock_client.detect_business.return_value = {"status": 200, "data": {"isBusiness": False}}
        mock_client.get_suggested_names.return_value = {"status": 200, "data": []}

        assert payload(await contacts.handle_get_contact_detail({"address": "+1"}, mock_client)) == {"name": "A"}
        assert payload(await contacts.handle_detect_business({"address": "+1"}, mock_client)) == {"isBusiness": False}
        assert payload(await contacts.handle_get_suggested_names({}, mock_client)) == []

    @pytest.mark.asyncio
    async def test_resolve_contact(self, mock_client, resolver):
        result = await contacts.handle_resolve_contact({"address": "+1 918 625 7838"}, mock_client, resolver)

        body = payload(result)
        assert body["name"] == "Alice Smith"
        assert body["normalized"] == "9186257838"
        assert body["cache"]["refreshes"] == 1

    @pytest.mark.asyncio
    async def test_resolve_contact_miss(self, mock_client, resolver):
        result = await contacts.handle_resolve_contact({"address": "nobody@example.com"}, mock_client, resolver)

        assert payload(result)["name"] is None

    @pytest.mark.asyncio
    async def test_resolve_contact_keeps_address_out_of_info_logs(self, mock_client, resolver, caplog):
        caplog.set_level(logging.INFO)

        await contacts.handle_resolve_contact({"address": "+1 918 625 7838"}, mock_client, resolver)

        assert "Contact lookup: found" in caplog.text
        assert "918" not in caplog.text


# =============================================================================
# Find My and server tools
# =============================================================================

class TestFindMy:

    @pytest.mark.asyncio
    async def test_devices(self, mock_client):
        mock_client.get_devices.return_value = {"status": 200, "data": [{"name": "iPhone"}]}

        result = await findmy.handle_get_findmy_devices({}, mock_client)

        assert payload(result) == [{"name": "iPhone"}]

    @pytest.mark.asyncio
    async def test_friends_private_api_error(self, mock_client):
        mock_client.get_friends.side_effect = BlueBubblesAPIError(
            500, "Private API is not enabled", {"type": "iMessage Error"}
        )

        result = await findmy.handle_get_findmy_friends({}, mock_client)

        assert result[0].text.startswith("Error fetching Find My friends: HTTP 500")
        assert "Private API" in result[0].text


class TestServerTools:

    @pytest.mark.asyncio
    async def test_stats_combines_totals_and_media(self, mock_client):
        mock_client.get_stat_totals.return_value = {"data": {"messages": 10}}
        mock_client.get_stat_media.return_value = {"data": {"images": 2}}

        result = await server_tools.handle_get_server_stats({}, mock_client)

        assert payload(result) == {"totals": {"messages": 10}, "media": {"images": 2}}

    @pytest.mark.asyncio
    async def test_handles_defaults(self, mock_client):
        mock_client.query_handles.return_value = {"data": []}

        await server_tools.handle_get_handles({"address": "+15551234567"}, mock_client)

        mock_client.query_handles.assert_awaited_once_with(
            {"limit": 100, "offset": 0, "with": ["chat"], "address": "+15551234567"}
        )

    @pytest.mark.asyncio
    async def test_availability(self, mock_client):
        mock_client.check_availability.return_value = (
            {"data": {"available": True}},
            {"data": {"available": False}},
        )

        result = await server_tools.handle_check_handle_availability({"address": "a@b.c"}, mock_client)

        assert payload(result) == {
            "address": "a@b.c",
            "imessage": {"available": True},
            "facetime": {"available": False},
        }

    @pytest.mark.asyncio
    async def test_schedule_rejects_bad_date(self, mock_client):
        result = await server_tools.handle_create_scheduled_message(
            {"chatGuid": "c", "message": "hi", "scheduledFor": "next tuesday"}, mock_client
        )

        assert "ISO 8601" in result[0].text
        mock_client.create_scheduled_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_schedule_body(self, mock_client):
        mock_client.create_scheduled_message.return_value = {"data": {"id": 7}}

        await server_tools.handle_create_scheduled_message(
            {"chatGuid": "c", "message": "hi", "scheduledFor": "2026-01-01T09:00:00Z"}, mock_client
        )

        mock_client.create_scheduled_message.assert_awaited_once_with({
            "chatGuid": "c",
            "message": "hi",
            "scheduledFor": "2026-01-01T09:00:00Z",
            "type": "send-message",
            "payload": {"chatGuid": "c", "message": "hi", "method": "apple-script"},
        })

    @pytest.mark.asyncio
    async def test_delete_scheduled_accepts_numeric_id(self, mock_client):
        mock_client.delete_scheduled_message.return_value = {"status": 200}

        await server_tools.handle_delete_scheduled_message({"id": 7}, mock_client)

        mock_client.delete_scheduled_message.assert_awaited_once_with("7")


# =============================================================================
# Error translation
# =============================================================================

class TestErrorResponses:

    @pytest.mark.asyncio
    async def test_connection_refused(self, mock_client):
        mock_client.get_server_info.side_effect = httpx.ConnectError("refused")

        result = await server_tools.handle_get_server_info({}, mock_client)

        assert "Cannot reach the BlueBubbles server" in result[0].text
        assert "BLUEBUBBLES_URL" in result[0].text

    @pytest.mark.asyncio
    async def test_timeout(self, mock_client):
        mock_client.restart_messages_app.side_effect = httpx.ReadTimeout("slow")

        result = await server_tools.handle_restart_imessage({}, mock_client)

        assert "timed out" in result[0].text

    @pytest.mark.asyncio
    async def test_bad_password(self, mock_client):
        mock_client.get_scheduled_messages.side_effect = BlueBubblesAPIError(401, "Unauthorized")

        result = await server_tools.handle_get_scheduled_messages({}, mock_client)

        assert "BLUEBUBBLES_PASSWORD" in result[0].text

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, mock_client):
        mock_client.get_focus_status.side_effect = RuntimeError("boom")

        result = await server_tools.handle_get_focus_status({"handleGuid": "h"}, mock_client)

        assert result[0].text == "Error fetching focus status: boom"
