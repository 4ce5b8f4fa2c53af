"""MCP server exposing a Zammad helpdesk as resources and tools."""

__version__ = "1.0.0"
