"""
tools/users.py — MCP tools for user lookup
===========================================
Two tools:
  - get_user     : one user by ID, standard fields or the full record
  - search_users : backend user search (email, login, name, ...)
"""

from mcp import types
from pydantic import Field

from zammad_mcp.client import ZammadClient
from zammad_mcp.logger import get_logger
from zammad_mcp.tools.common import (
    DEFAULT_LIMIT,
    ToolArguments,
    failing_as,
    input_schema,
    parse_arguments,
    text,
    to_json,
)

logger = get_logger(__name__)


# ── get_user ──────────────────────────────────────────────────────────────────
# Standard mode returns a fixed field set. Extended mode returns the raw record,
# which carries custom fields the User model doesn't declare.


class GetUserArgs(ToolArguments):
    user_id: int = Field(gt=0, description="The ID of the user to retrieve.")
    with_extended_data: bool = Field(
        default=False,
        description=(
            "If true, returns all user data including custom fields. "
            "If false (default), returns only standard fields."
        ),
    )


get_user_tool = types.Tool(
    name="get_user",
    description="Retrieves details for a specific Zammad user by their ID.",
    inputSchema=input_schema(GetUserArgs),
)


async def get_user(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(GetUserArgs, arguments)

    if args.with_extended_data:
        with failing_as(f"Failed to get extended data for user {args.user_id}"):
            data = await client.show_user_raw(args.user_id)
        data_type = "extended"
    else:
        with failing_as(f"Failed to get user {args.user_id}"):
            user = await client.show_user(args.user_id)
        data = user.standard_fields()
        data_type = "standard"

    logger.info(f"Successfully retrieved {data_type} data for user ID {args.user_id}")
    return text(f"User {args.user_id} details ({data_type} data):\n{to_json(data)}")


# ── search_users ──────────────────────────────────────────────────────────────


class SearchUsersArgs(ToolArguments):
    query: str = Field(min_length=1, description="The search query string.")
    limit: int = Field(default=DEFAULT_LIMIT, gt=0, description="Maximum number of results. Default: 50.")


search_users_tool = types.Tool(
    name="search_users",
    description="Searches for Zammad users based on a query string (e.g., email, login, name).",
    inputSchema=input_schema(SearchUsersArgs),
)


async def search_users(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(SearchUsersArgs, arguments)

    with failing_as("Failed to search users"):
        users = await client.search_users(args.query, args.limit)

    logger.info(f"Found {len(users)} users matching query '{args.query}'")
    return text(f"User Search Results ({len(users)} found):\n{to_json(users)}")
