"""
resources.py — MCP resources for tickets and users
===================================================
Four URI-addressed, read-only views, all application/json:

  zammad://tickets               every ticket visible to the API token
  zammad://tickets/{ticket_id}   one ticket
  zammad://users                 every user visible to the API token
  zammad://users/{user_id}       one user

Lookups by ID report any failure, including a malformed ID, as
ResourceNotFound so clients can tell "doesn't exist" from "backend broke".
"""

import re
from typing import Awaitable, Callable, Optional

from mcp import types

from zammad_mcp.client import ZammadClient
from zammad_mcp.errors import BackendError, ResourceNotFound
from zammad_mcp.logger import get_logger
from zammad_mcp.tools.common import to_json

logger = get_logger(__name__)

MIME_TYPE = "application/json"

resources = [
    types.Resource(
        uri="zammad://tickets",
        name="List Tickets",
        description="Lists all tickets accessible by the API token.",
        mimeType=MIME_TYPE,
    ),
    types.Resource(
        uri="zammad://users",
        name="List Users",
        description="Lists all users accessible by the API token.",
        mimeType=MIME_TYPE,
    ),
]

resource_templates = [
    types.ResourceTemplate(
        uriTemplate="zammad://tickets/{ticket_id}",
        name="Show Ticket (Resource)",
        description="Shows details for a specific ticket by its ID (via resource read).",
        mimeType=MIME_TYPE,
    ),
    types.ResourceTemplate(
        uriTemplate="zammad://users/{user_id}",
        name="Show User (Resource)",
        description="Shows details for a specific user by their ID (via resource read).",
        mimeType=MIME_TYPE,
    ),
]

_URI = re.compile(r"^zammad://(?P<collection>tickets|users)(?:/(?P<item>[^/]+))?/?$")


_ID = re.compile(r"-?\d+", re.ASCII)


def _parse_id(raw: str, kind: str) -> int:
    # int() alone would also take "+42", " 42", "4_2" and non-ASCII digits.
    if not _ID.fullmatch(raw):
        raise ResourceNotFound(f"invalid {kind}_id format: '{raw}'")
    value = int(raw)
    if value <= 0:
        raise ResourceNotFound(f"invalid {kind}_id: {value} (must be a positive number)")
    return value


async def _list_tickets(client: ZammadClient, _: Optional[str]) -> str:
    try:
        tickets = await client.list_tickets()
    except BackendError as e:
        logger.error(f"Error fetching tickets from Zammad: {e}")
        raise BackendError(f"failed to fetch tickets: {e}", status_code=e.status_code) from e
    return to_json(tickets)


async def _show_ticket(client: ZammadClient, raw_id: Optional[str]) -> str:
    ticket_id = _parse_id(raw_id or "", "ticket")
    try:
        ticket = await client.show_ticket(ticket_id)
    except BackendError as e:
        logger.error(f"Error fetching ticket {ticket_id} from Zammad: {e}")
        raise ResourceNotFound(f"failed to fetch ticket {ticket_id}: {e}") from e
    return to_json(ticket)


async def _list_users(client: ZammadClient, _: Optional[str]) -> str:
    try:
        users = await client.list_users()
    except BackendError as e:
        logger.error(f"Error fetching users from Zammad: {e}")
        raise BackendError(f"failed to fetch users: {e}", status_code=e.status_code) from e
    return to_json(users)


async def _show_user(client: ZammadClient, raw_id: Optional[str]) -> str:
    user_id = _parse_id(raw_id or "", "user")
    try:
        user = await client.show_user(user_id)
    except BackendError as e:
        logger.error(f"Error fetching user {user_id} from Zammad: {e}")
        raise ResourceNotFound(f"failed to fetch user {user_id}: {e}") from e
    return to_json(user)


_READERS: dict[tuple[str, bool], Callable[[ZammadClient, Optional[str]], Awaitable[str]]] = {
    ("tickets", False): _list_tickets,
    ("tickets", True): _show_ticket,
    ("users", False): _list_users,
    ("users", True): _show_user,
}


async def read_resource(client: ZammadClient, uri: str) -> str:
    """
    Read one resource and return its JSON text.

    Raises:
        ResourceNotFound: unknown URI, malformed ID, or the lookup failed
        BackendError: a collection read failed
        SerializationError: the result could not be encoded
    """
    logger.info(f"Handling request for resource: {uri}")
    match = _URI.match(uri)
    if match is None:
        raise ResourceNotFound(f"unknown resource: {uri}")

    item = match.group("item")
    reader = _READERS[(match.group("collection"), item is not None)]
    return await reader(client, item)
