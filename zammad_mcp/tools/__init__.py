from functools import partial

from zammad_mcp.client import ZammadClient
from zammad_mcp.tools.tags import (
    add_tag_to_ticket_tool, add_tag_to_ticket,
    get_ticket_tags_tool, get_ticket_tags,
    list_all_tags_tool, list_all_tags,
    search_tags_tool, search_tags,
)
from zammad_mcp.tools.text_modules import (
    list_text_modules_tool, list_text_modules,
    get_text_module_tool, get_text_module,
    search_text_modules_tool, search_text_modules,
)
from zammad_mcp.tools.tickets import (
    create_ticket_tool, create_ticket,
    search_tickets_tool, search_tickets,
    add_note_to_ticket_tool, add_note_to_ticket,
    reply_to_ticket_tool, reply_to_ticket,
    get_ticket_tool, get_ticket,
    get_ticket_articles_tool, get_ticket_articles,
    close_ticket_tool, close_ticket,
    assign_ticket_tool, assign_ticket,
)
from zammad_mcp.tools.users import (
    get_user_tool, get_user,
    search_users_tool, search_users,
)

# (descriptor, handler) pairs in the order tools are listed to clients.
# To add a tool: write its descriptor + handler in the right module, then add
# one line here. server.py needs no changes.
TOOL_HANDLERS = [
    (create_ticket_tool, create_ticket),
    (search_tickets_tool, search_tickets),
    (add_note_to_ticket_tool, add_note_to_ticket),
    (reply_to_ticket_tool, reply_to_ticket),
    (get_ticket_tool, get_ticket),
    (get_user_tool, get_user),
    (search_users_tool, search_users),
    (get_ticket_articles_tool, get_ticket_articles),
    (close_ticket_tool, close_ticket),
    (assign_ticket_tool, assign_ticket),
    (add_tag_to_ticket_tool, add_tag_to_ticket),
    (get_ticket_tags_tool, get_ticket_tags),
    (list_all_tags_tool, list_all_tags),
    (search_tags_tool, search_tags),
    (list_text_modules_tool, list_text_modules),
    (get_text_module_tool, get_text_module),
    (search_text_modules_tool, search_text_modules),
]


def build_tools(client: ZammadClient) -> dict:
    """
    Registry mapping tool name -> {"tool": types.Tool, "handler": callable}.

    Each handler is bound to `client`, so it is called as `await handler(arguments)`.
    """
    return {
        tool.name: {"tool": tool, "handler": partial(handler, client)}
        for tool, handler in TOOL_HANDLERS
    }
