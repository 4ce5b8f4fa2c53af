"""
tools/tags.py — MCP tools for tags
===================================
Four tools:
  - add_tag_to_ticket : tag a ticket, then read the tags back to verify
  - get_ticket_tags   : tags on one ticket
  - list_all_tags     : the global tag catalog (needs admin.tag permission)
  - search_tags       : native tag search (no admin permission needed)
"""

from enum import Enum

from mcp import types
from pydantic import Field

from zammad_mcp.client import ZammadClient
from zammad_mcp.errors import ToolError
from zammad_mcp.logger import get_logger
from zammad_mcp.tools.common import (
    DEFAULT_LIMIT,
    FollowUp,
    NoArguments,
    ToolArguments,
    failing_as,
    input_schema,
    parse_arguments,
    text,
    to_json,
)

logger = get_logger(__name__)

MAX_TAG_LENGTH = 100


# ── add_tag_to_ticket ─────────────────────────────────────────────────────────
# Once Zammad accepted the tag, the add has succeeded. The verification read is
# informational: verified, not (yet) visible, or the read itself failed.


class TagVerification(str, Enum):
    VERIFIED = "verified"
    NOT_FOUND = "not_found"


class AddTagArgs(ToolArguments):
    ticket_id: int = Field(gt=0, description="The ID of the ticket to add the tag to.")
    tag_name: str = Field(
        min_length=1,
        max_length=MAX_TAG_LENGTH,
        description="The name of the tag to add to the ticket (max 100 characters).",
    )


add_tag_to_ticket_tool = types.Tool(
    name="add_tag_to_ticket",
    description="Add a tag to a Zammad ticket.",
    inputSchema=input_schema(AddTagArgs),
)


async def verify_tag(client: ZammadClient, ticket_id: int, tag_name: str) -> FollowUp:
    try:
        tags = await client.ticket_tags(ticket_id)
    except ToolError as e:
        logger.warning(f"Tag added, but verification failed: {e}")
        return FollowUp(step="tag verification", ok=False, detail=str(e))

    if any(tag.name == tag_name for tag in tags):
        return FollowUp(step="tag verification", ok=True, detail=TagVerification.VERIFIED.value)

    logger.warning(f"Tag '{tag_name}' was added to ticket {ticket_id} but not found in verification list")
    return FollowUp(step="tag verification", ok=True, detail=TagVerification.NOT_FOUND.value)


async def add_tag_to_ticket(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(AddTagArgs, arguments)
    ticket_id, tag_name = args.ticket_id, args.tag_name

    with failing_as(f"Failed to add tag '{tag_name}' to ticket {ticket_id}"):
        status = await client.add_tag(ticket_id, tag_name)
    if status == 201:
        logger.info(f"Successfully added tag '{tag_name}' to ticket ID {ticket_id} (Status: 201)")
    else:
        logger.info(f"Tag '{tag_name}' added to ticket ID {ticket_id} (Status: {status} - may have already existed)")

    verification = await verify_tag(client, ticket_id, tag_name)
    if not verification.ok:
        return text(
            f"Tag '{tag_name}' added to ticket {ticket_id} "
            f"(verification failed: {verification.detail})"
        )
    if verification.detail == TagVerification.VERIFIED.value:
        return text(f"Tag '{tag_name}' successfully added to ticket {ticket_id} (verified)")
    return text(
        f"Tag '{tag_name}' added to ticket {ticket_id} "
        "(not found in verification - may need time to propagate)"
    )


# ── get_ticket_tags ───────────────────────────────────────────────────────────


class TicketTagsArgs(ToolArguments):
    ticket_id: int = Field(gt=0, description="The ID of the ticket to get tags for.")


get_ticket_tags_tool = types.Tool(
    name="get_ticket_tags",
    description="Get all tags currently assigned to a specific ticket.",
    inputSchema=input_schema(TicketTagsArgs),
)


async def get_ticket_tags(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(TicketTagsArgs, arguments)

    with failing_as(f"Failed to get tags for ticket {args.ticket_id}"):
        tags = await client.ticket_tags(args.ticket_id)

    if not tags:
        return text(f"No tags found for ticket {args.ticket_id}")
    return text(f"Tags for ticket {args.ticket_id} ({len(tags)} found):\n{to_json(tags)}")


# ── list_all_tags ─────────────────────────────────────────────────────────────


list_all_tags_tool = types.Tool(
    name="list_all_tags",
    description="List all tags available in the Zammad system (requires admin.tag permission).",
    inputSchema=input_schema(NoArguments),
)


async def list_all_tags(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    parse_arguments(NoArguments, arguments)

    with failing_as("Failed to list all tags"):
        tags = await client.list_tags()

    if not tags:
        return text("No tags found in the system")
    return text(f"All tags in system ({len(tags)} found):\n{to_json(tags)}")


# ── search_tags ───────────────────────────────────────────────────────────────
# Uses Zammad's tag_search, which any agent may call, not the admin-only catalog.


class SearchTagsArgs(ToolArguments):
    search_term: str = Field(default="", description="Text to look for in tag names. Empty matches every tag.")
    limit: int = Field(default=DEFAULT_LIMIT, gt=0, description="Maximum number of results. Default: 50.")


search_tags_tool = types.Tool(
    name="search_tags",
    description="Search for tags by name in the Zammad system (case-insensitive).",
    inputSchema=input_schema(SearchTagsArgs),
)


async def search_tags(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(SearchTagsArgs, arguments)

    with failing_as(f"Failed to search tags with term '{args.search_term}'"):
        tags = await client.search_tags(args.search_term, args.limit)

    matches = tags[: args.limit]

    if not matches:
        return text(f"No tags found matching search term '{args.search_term}'")
    return text(
        f"Tags matching '{args.search_term}' ({len(matches)} found):\n{to_json(matches)}"
    )
