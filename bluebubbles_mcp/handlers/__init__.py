"""
MCP Tool Handlers Package

Organized by domain:
- messaging: send, reply, react, edit, unsend, search and read messages
- chats: list/get chats, group management, read state, typing
- contacts: contacts database, Private API lookups, cached name resolution
- findmy: Find My devices and friends
- server_tools: server info/stats, handles, scheduled messages, restart
"""

from . import messaging
from . import chats
from . import contacts
from . import findmy
from . import server_tools

__all__ = [
    "messaging",
    "chats",
    "contacts",
    "findmy",
    "server_tools",
]
