"""
tools/text_modules.py — MCP tools for text modules (canned responses)
======================================================================
  - list_text_modules   : every text module
  - get_text_module     : one text module by ID
  - search_text_modules : client-side, case-insensitive match on name,
                          keywords or content
"""

from mcp import types
from pydantic import Field

from zammad_mcp.client import ZammadClient
from zammad_mcp.errors import ResourceNotFound, ToolError
from zammad_mcp.logger import get_logger
from zammad_mcp.schema import TextModule
from zammad_mcp.tools.common import (
    DEFAULT_LIMIT,
    NoArguments,
    ToolArguments,
    contains_ignore_case,
    failing_as,
    input_schema,
    parse_arguments,
    text,
    to_json,
)

logger = get_logger(__name__)


list_text_modules_tool = types.Tool(
    name="list_text_modules",
    description="List all text modules available in the Zammad system.",
    inputSchema=input_schema(NoArguments),
)


async def list_text_modules(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    parse_arguments(NoArguments, arguments)

    with failing_as("Failed to fetch text modules"):
        modules = await client.list_text_modules()

    if not modules:
        return text("No text modules found")
    return text(f"Text modules ({len(modules)} found):\n{to_json(modules)}")


class GetTextModuleArgs(ToolArguments):
    text_module_id: int = Field(gt=0, description="The ID of the text module to retrieve.")


get_text_module_tool = types.Tool(
    name="get_text_module",
    description="Get details of a specific text module by ID.",
    inputSchema=input_schema(GetTextModuleArgs),
)


async def get_text_module(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(GetTextModuleArgs, arguments)

    try:
        module = await client.show_text_module(args.text_module_id)
    except ResourceNotFound as e:
        raise ResourceNotFound(f"Text module {args.text_module_id} not found") from e
    except ToolError as e:
        logger.error(f"Error fetching text module {args.text_module_id}: {e}")
        raise

    return text(f"Text module {args.text_module_id}:\n{to_json(module)}")


class SearchTextModulesArgs(ToolArguments):
    search_term: str = Field(
        default="",
        description="Text to look for in text module names, keywords or content. Empty matches everything.",
    )
    limit: int = Field(default=DEFAULT_LIMIT, gt=0, description="Maximum number of results. Default: 50.")


search_text_modules_tool = types.Tool(
    name="search_text_modules",
    description="Search for text modules by name, keywords or content (case-insensitive).",
    inputSchema=input_schema(SearchTextModulesArgs),
)


def matches_text_module(module: TextModule, term: str) -> bool:
    return (
        contains_ignore_case(module.name, term)
        or contains_ignore_case(module.keywords, term)
        or contains_ignore_case(module.content, term)
    )


async def search_text_modules(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(SearchTextModulesArgs, arguments)

    with failing_as("Failed to fetch text modules for search"):
        modules = await client.list_text_modules()

    matches = [m for m in modules if matches_text_module(m, args.search_term)][: args.limit]

    if not matches:
        return text(f"No text modules found matching search term '{args.search_term}'")
    return text(
        f"Text modules matching '{args.search_term}' ({len(matches)} found):\n{to_json(matches)}"
    )
