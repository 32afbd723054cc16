"""
Shared fixtures for BlueBubbles MCP tests.

The BlueBubbles server is never contacted: handler tests use an AsyncMock
client, client tests use httpx.MockTransport.
"""

import pytest
from unittest.mock import AsyncMock

from bluebubbles.api_client import BlueBubblesClient
from bluebubbles.contact_resolver import ContactResolver


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeContactsClient:
    """Serves a fixed contacts list and counts fetches."""

    def __init__(self, contacts=None, error: Exception = None):
        self.contacts = contacts if contacts is not None else []
        self.error = error
        self.calls = 0

    async def list_contacts(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.contacts


@pytest.fixture
def sample_contacts():
    """Raw contacts as returned by GET /api/v1/contact."""
    return [
        {
            "displayName": "Alice Smith",
            "firstName": "Alice",
            "lastName": "Smith",
            "phoneNumbers": [{"address": "+1 (918) 625-7838"}],
            "emails": [{"address": "Alice@Example.com"}],
        },
        {
            "firstName": "Bob",
            "lastName": "Jones",
            "phoneNumbers": [{"address": "555-123-4567"}],
            "emails": [],
        },
        {
            "displayName": "",
            "firstName": "",
            "lastName": "",
            "phoneNumbers": [{"address": "+15550000000"}],
        },
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def contacts_client(sample_contacts):
    return FakeContactsClient(sample_contacts)


@pytest.fixture
def resolver(contacts_client, clock):
    return ContactResolver(contacts_client, ttl_seconds=300, clock=clock)


@pytest.fixture
def mock_client():
    """BlueBubblesClient stand-in whose API methods are AsyncMocks."""
    return AsyncMock(spec=BlueBubblesClient)
