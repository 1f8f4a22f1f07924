"""MCP server exposing a content index."""

from workpacket.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
