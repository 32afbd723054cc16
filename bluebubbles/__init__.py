"""
BlueBubbles core library.

- api_client: async REST client for a BlueBubbles server
- normalize: phone/email normalization for contact lookups
- contact_resolver: cached contact-name resolution and payload enrichment
"""

from .api_client import BlueBubblesClient, BlueBubblesAPIError
from .contact_resolver import ContactRecord, ContactResolver
from .normalize import normalize_address, normalize_phone

__all__ = [
    "BlueBubblesClient",
    "BlueBubblesAPIError",
    "ContactRecord",
    "ContactResolver",
    "normalize_address",
    "normalize_phone",
]
