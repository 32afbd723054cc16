"""BlueBubbles MCP server: iMessage tools, resources and prompts over stdio."""

__version__ = "1.0.0"
