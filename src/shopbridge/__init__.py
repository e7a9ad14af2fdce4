"""Cart, catalog and chat-relay backend exposed over REST and MCP."""

__version__ = "0.1.0"
