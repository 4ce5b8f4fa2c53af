"""
tools/tickets.py — MCP tools for ticket operations
====================================================
Eight tools live here:
  - create_ticket        : create a ticket with its first article
  - search_tickets       : backend full-text ticket search
  - get_ticket           : one ticket by ID
  - get_ticket_articles  : every article (note/email) of a ticket
  - add_note_to_ticket   : append a note article
  - reply_to_ticket      : send an email article, deriving "Re: <title>" if needed
  - close_ticket         : set state to closed, then optionally add a note
  - assign_ticket        : set the owner, then optionally add a note

Each tool follows the same three-part pattern:
  1. A pydantic model → the arguments, and (generated) the inputSchema
  2. A types.Tool     → the MCP tool descriptor
  3. An async def     → the handler, taking the Zammad client and raw arguments

close_ticket and assign_ticket are two-phase: the ticket update is the result,
the note is a FollowUp whose failure only adds a warning to the response.
"""

from typing import Optional

from mcp import types
from pydantic import Field

from zammad_mcp.client import ZammadClient
from zammad_mcp.logger import get_logger
from zammad_mcp.tools.common import (
    DEFAULT_LIMIT,
    ToolArguments,
    attach_note,
    failing_as,
    input_schema,
    parse_arguments,
    text,
    to_json,
)

logger = get_logger(__name__)


# ── create_ticket ─────────────────────────────────────────────────────────────


class CreateTicketArgs(ToolArguments):
    title: str = Field(min_length=1, description="Title of the new ticket.")
    group: str = Field(min_length=1, description="Name of the group the ticket belongs to (e.g. 'Users').")
    customer: str = Field(min_length=1, description="Customer email address or login.")
    body: str = Field(min_length=1, description="Body of the first article.")
    article_type: str = Field(
        default="note", alias="type", description="Type of the first article (default: note)."
    )
    internal: bool = Field(default=False, description="Whether the first article is internal (default: false).")


create_ticket_tool = types.Tool(
    name="create_ticket",
    description=(
        "Create a new Zammad ticket together with its first article. "
        "Returns the created ticket."
    ),
    inputSchema=input_schema(CreateTicketArgs),
)


async def create_ticket(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(CreateTicketArgs, arguments)

    payload = {
        "title": args.title,
        "group": args.group,
        "customer": args.customer,
        "article": {
            "body": args.body,
            "type": args.article_type,
            "internal": args.internal,
        },
    }
    with failing_as("Failed to create ticket"):
        ticket = await client.create_ticket(payload)

    logger.info(f"Successfully created ticket ID {ticket.id}")
    return text(f"Ticket created successfully:\n{to_json(ticket)}")


# ── search_tickets ────────────────────────────────────────────────────────────


class SearchTicketsArgs(ToolArguments):
    query: str = Field(min_length=1, description="Search query (Zammad search syntax, e.g. 'state.name:open printer').")
    limit: int = Field(default=DEFAULT_LIMIT, gt=0, description="Maximum number of results. Default: 50.")


search_tickets_tool = types.Tool(
    name="search_tickets",
    description="Search Zammad tickets with a query string. Returns matching tickets.",
    inputSchema=input_schema(SearchTicketsArgs),
)


async def search_tickets(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(SearchTicketsArgs, arguments)

    with failing_as("Failed to search tickets"):
        tickets = await client.search_tickets(args.query, args.limit)

    logger.info(f"Found {len(tickets)} tickets matching query '{args.query}'")
    return text(f"Search Results ({len(tickets)} found):\n{to_json(tickets)}")


# ── get_ticket ────────────────────────────────────────────────────────────────


class TicketIdArgs(ToolArguments):
    ticket_id: int = Field(gt=0, description="The ID of the ticket.")


get_ticket_tool = types.Tool(
    name="get_ticket",
    description="Retrieves details for a specific Zammad ticket by its ID.",
    inputSchema=input_schema(TicketIdArgs),
)


async def get_ticket(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(TicketIdArgs, arguments)

    with failing_as(f"Failed to get ticket {args.ticket_id}"):
        ticket = await client.show_ticket(args.ticket_id)

    logger.info(f"Successfully retrieved ticket ID {args.ticket_id} via tool")
    return text(f"Ticket {args.ticket_id} details:\n{to_json(ticket)}")


# ── get_ticket_articles ───────────────────────────────────────────────────────

get_ticket_articles_tool = types.Tool(
    name="get_ticket_articles",
    description="Retrieves all articles (communications) for a specific Zammad ticket.",
    inputSchema=input_schema(TicketIdArgs),
)


async def get_ticket_articles(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(TicketIdArgs, arguments)

    with failing_as(f"Failed to get articles for ticket {args.ticket_id}"):
        articles = await client.list_articles(args.ticket_id)

    logger.info(f"Retrieved {len(articles)} articles for ticket ID {args.ticket_id}")
    return text(
        f"Ticket {args.ticket_id} Articles ({len(articles)} found):\n{to_json(articles)}"
    )


# ── add_note_to_ticket ────────────────────────────────────────────────────────


class AddNoteArgs(ToolArguments):
    ticket_id: int = Field(gt=0, description="The ID of the ticket to add the note to.")
    body: str = Field(min_length=1, description="The note content.")
    internal: bool = Field(default=True, description="Whether the note is internal (default: true).")


add_note_to_ticket_tool = types.Tool(
    name="add_note_to_ticket",
    description="Add a note article to an existing Zammad ticket.",
    inputSchema=input_schema(AddNoteArgs),
)


async def add_note_to_ticket(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(AddNoteArgs, arguments)

    with failing_as(f"Failed to add note to ticket {args.ticket_id}"):
        article = await client.create_article(
            {
                "ticket_id": args.ticket_id,
                "body": args.body,
                "type": "note",
                "internal": args.internal,
            }
        )

    logger.info(f"Successfully added note (Article ID {article.id}) to ticket ID {args.ticket_id}")
    return text(f"Note added successfully to ticket {args.ticket_id}:\n{to_json(article)}")


# ── reply_to_ticket ───────────────────────────────────────────────────────────
# The only tool that reads before it writes: without a subject the ticket
# title is fetched first.


class ReplyArgs(ToolArguments):
    ticket_id: int = Field(gt=0, description="The ID of the ticket to reply to.")
    body: str = Field(min_length=1, description="The email body (HTML allowed).")
    to: Optional[str] = Field(default=None, description="Recipient address(es). Defaults to the ticket customer.")
    cc: Optional[str] = Field(default=None, description="CC address(es).")
    subject: Optional[str] = Field(default=None, description="Email subject. Defaults to 'Re: <ticket title>'.")
    internal: bool = Field(default=False, description="Whether the email article is internal (default: false).")


reply_to_ticket_tool = types.Tool(
    name="reply_to_ticket",
    description="Reply to a Zammad ticket by email.",
    inputSchema=input_schema(ReplyArgs),
)


async def reply_to_ticket(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(ReplyArgs, arguments)

    subject = args.subject
    if not subject:
        with failing_as(f"Failed to fetch ticket {args.ticket_id}"):
            ticket = await client.show_ticket(args.ticket_id)
        subject = f"Re: {ticket.title}"

    with failing_as(f"Failed to send email reply to ticket {args.ticket_id}"):
        article = await client.create_article(
            {
                "ticket_id": args.ticket_id,
                "body": args.body,
                "type": "email",
                "sender": "Agent",
                "subject": subject,
                "to": args.to,
                "cc": args.cc,
                "internal": args.internal,
                "content_type": "text/html",
            }
        )

    logger.info(f"Successfully sent email reply (Article ID {article.id}) to ticket ID {args.ticket_id}")
    return text(f"Email reply sent successfully to ticket {args.ticket_id}:\n{to_json(article)}")


# ── close_ticket ──────────────────────────────────────────────────────────────


class CloseTicketArgs(ToolArguments):
    ticket_id: int = Field(gt=0, description="The ID of the ticket to close.")
    note: Optional[str] = Field(default=None, description="Optional closing note to add to the ticket.")


close_ticket_tool = types.Tool(
    name="close_ticket",
    description=(
        "Close a Zammad ticket by setting its state to 'closed'. "
        "An optional note is added as an internal note afterwards."
    ),
    inputSchema=input_schema(CloseTicketArgs),
)


async def close_ticket(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(CloseTicketArgs, arguments)

    with failing_as(f"Failed to close ticket {args.ticket_id}"):
        ticket = await client.update_ticket(args.ticket_id, {"state": "closed"})
    logger.info(f"Successfully closed ticket ID {args.ticket_id}")

    message = f"Ticket {args.ticket_id} closed successfully:\n{to_json(ticket)}"
    if args.note:
        follow_up = await attach_note(
            client, args.ticket_id, args.note, subject="Ticket closed", step="closing note"
        )
        message += f"\n\n{follow_up.describe()}"
    return text(message)


# ── assign_ticket ─────────────────────────────────────────────────────────────


class AssignTicketArgs(ToolArguments):
    ticket_id: int = Field(gt=0, description="The ID of the ticket to assign.")
    agent_id: int = Field(gt=0, description="The ID of the agent user to assign the ticket to.")
    note: Optional[str] = Field(default=None, description="Optional note to add when assigning the ticket.")


assign_ticket_tool = types.Tool(
    name="assign_ticket",
    description="Assign a Zammad ticket to a specific agent user.",
    inputSchema=input_schema(AssignTicketArgs),
)


async def assign_ticket(client: ZammadClient, arguments: dict) -> list[types.TextContent]:
    args = parse_arguments(AssignTicketArgs, arguments)

    with failing_as(f"Failed to assign ticket {args.ticket_id}"):
        ticket = await client.update_ticket(args.ticket_id, {"owner_id": args.agent_id})
    logger.info(f"Successfully assigned ticket ID {args.ticket_id} to agent ID {args.agent_id}")

    message = (
        f"Ticket {args.ticket_id} assigned to agent {args.agent_id} successfully:\n"
        f"{to_json(ticket)}"
    )
    if args.note:
        follow_up = await attach_note(
            client, args.ticket_id, args.note, subject="Ticket assigned", step="assignment note"
        )
        message += f"\n\n{follow_up.describe()}"
    return text(message)
