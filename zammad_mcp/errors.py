"""
errors.py — Error taxonomy for the Zammad MCP server
=====================================================
Two families:
  - ToolError and subclasses : caller or backend problems. The dispatcher
                               turns them into a tool result with isError=True.
  - SerializationError       : a successful result could not be encoded.
                               Surfaced as a protocol-level error.
"""

from typing import Optional

# JSON-RPC code MCP clients use for "resource not found".
RESOURCE_NOT_FOUND = -32002


class ZammadMCPError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(ZammadMCPError):
    """Required configuration is missing or malformed."""


class ToolError(ZammadMCPError):
    """An error the assistant should see as a failed tool call."""


class ValidationError(ToolError):
    """Missing or invalid caller input. Raised before any backend call."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(
            "Missing or invalid required arguments: " + ", ".join(fields)
        )


class BackendError(ToolError):
    """The Zammad API failed or answered with an unexpected status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ResourceNotFound(BackendError):
    """An id-keyed lookup found nothing, or the id itself was malformed."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class SerializationError(ZammadMCPError):
    """JSON encoding of an otherwise successful result failed."""
