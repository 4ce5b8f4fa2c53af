"""
tools/common.py — Helpers shared by every tool module
=====================================================
  - parse_arguments    : validate raw MCP arguments against a pydantic model
  - to_json / text     : build the JSON-in-a-sentence results the tools return
  - contains_ignore_case
  - FollowUp / attach_note : best-effort secondary steps (note after close/assign)
  - failing_as         : prefix backend errors with the action that failed
"""

import json
from contextlib import contextmanager
from typing import Any, Optional, Type, TypeVar

from mcp import types
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from zammad_mcp.client import ZammadClient
from zammad_mcp.errors import (
    BackendError,
    ResourceNotFound,
    SerializationError,
    ToolError,
    ValidationError,
)
from zammad_mcp.logger import get_logger

logger = get_logger(__name__)

ArgsT = TypeVar("ArgsT", bound=BaseModel)

DEFAULT_LIMIT = 50


class ToolArguments(BaseModel):
    """Base for tool argument models. Unknown arguments are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NoArguments(ToolArguments):
    pass


def input_schema(model: Type[BaseModel]) -> dict:
    """JSON Schema for a tool's inputSchema, generated from its argument model."""
    schema = model.model_json_schema(by_alias=True)
    schema.pop("title", None)
    schema.setdefault("properties", {})
    return schema


def parse_arguments(model: Type[ArgsT], arguments: Optional[dict]) -> ArgsT:
    """
    Validate raw tool arguments.

    Raises:
        ValidationError: naming every missing or invalid field. Raised before
            any backend call is made.
    """
    try:
        return model.model_validate(arguments or {})
    except PydanticValidationError as e:
        fields = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"]) or "arguments"
            problem = f"{name} ({error['msg']})"
            if problem not in fields:
                fields.append(problem)
        raise ValidationError(fields) from e


def _plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.to_dict() if hasattr(data, "to_dict") else data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_plain(item) for item in data]
    return data


def to_json(data: Any) -> str:
    """
    Indented JSON for models, lists of models or plain data.

    Raises:
        SerializationError: if the data can't be encoded.
    """
    try:
        return json.dumps(_plain(data), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to encode result as JSON: {e}") from e


def text(message: str) -> list[types.TextContent]:
    return [types.TextContent(type="text", text=message)]


def contains_ignore_case(value: Optional[str], term: str) -> bool:
    """Case-insensitive substring test. An empty term matches everything."""
    if not term:
        return True
    if not value:
        return False
    value, term = value.casefold(), term.casefold()
    if len(value) < len(term):
        return False
    return term in value


# ── Best-effort secondary steps ───────────────────────────────────────────────


class FollowUp(BaseModel):
    """Outcome of a secondary step. Never changes the primary outcome."""

    step: str
    ok: bool
    detail: str = ""

    def describe(self) -> str:
        if self.ok:
            return f"{self.step.capitalize()} added ({self.detail})."
        return f"Warning: {self.step} could not be added: {self.detail}"


async def attach_note(
    client: ZammadClient, ticket_id: int, note: str, subject: str, step: str
) -> FollowUp:
    """
    Add an internal note after a primary mutation already succeeded.

    Failures are logged and returned, not raised.
    """
    try:
        article = await client.create_article(
            {
                "ticket_id": ticket_id,
                "body": note,
                "type": "note",
                "internal": True,
                "subject": subject,
            }
        )
    except ToolError as e:
        logger.warning(f"Ticket {ticket_id} updated successfully, but failed to add {step}: {e}")
        return FollowUp(step=step, ok=False, detail=str(e))

    logger.info(f"Added {step} (Article ID {article.id}) to ticket ID {ticket_id}")
    return FollowUp(step=step, ok=True, detail=f"article {article.id}")


@contextmanager
def failing_as(action: str):
    """
    Prefix backend errors with what the tool was trying to do.

    Usage: `with failing_as(f"Failed to get ticket {ticket_id}"): ...`
    """
    try:
        yield
    except ResourceNotFound as e:
        logger.error(f"{action}: {e}")
        raise ResourceNotFound(f"{action}: {e}") from e
    except BackendError as e:
        logger.error(f"{action}: {e}")
        raise BackendError(f"{action}: {e}", status_code=e.status_code) from e
