"""
schema.py — Pydantic models for Zammad records
===============================================
These are pass-through views of what the Zammad API returns. Zammad is the
only source of truth; nothing here is stored between requests.

Tickets, articles and users keep every field the backend sends (extra="allow")
and serialize back only the fields that were actually received, so a record
survives a parse/serialize round trip unchanged.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ZammadRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_dict(self) -> dict:
        """JSON-ready dict with exactly the fields the backend sent."""
        return self.model_dump(mode="json", exclude_unset=True)


class Ticket(ZammadRecord):
    id: Optional[int] = None
    number: Optional[Union[str, int]] = None
    title: Optional[str] = None
    group_id: Optional[int] = None
    customer_id: Optional[int] = None
    owner_id: Optional[int] = None
    state_id: Optional[int] = None
    state: Optional[str] = None
    priority_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Article(ZammadRecord):
    id: Optional[int] = None
    ticket_id: Optional[int] = None
    body: Optional[str] = None
    type: Optional[str] = None
    sender: Optional[str] = None
    content_type: Optional[str] = None
    internal: Optional[bool] = None
    subject: Optional[str] = None
    to: Optional[str] = None
    cc: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# Fields returned by get_user when extended data is not requested.
STANDARD_USER_FIELDS = (
    "id",
    "organization_id",
    "login",
    "firstname",
    "lastname",
    "email",
    "web",
    "last_login",
)


class User(ZammadRecord):
    id: Optional[int] = None
    organization_id: Optional[int] = None
    login: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None
    web: Optional[str] = None
    last_login: Optional[str] = None

    def standard_fields(self) -> dict:
        """The fixed standard field set, custom fields left out."""
        return self.model_dump(mode="json", include=set(STANDARD_USER_FIELDS))


class Tag(ZammadRecord):
    name: str
    id: Optional[int] = None
    count: Optional[int] = None


class TextModule(BaseModel):
    # Unknown backend fields are dropped for text modules.
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    keywords: Optional[str] = ""
    content: Optional[str] = ""
    note: Optional[str] = ""
    active: bool = True
    group_ids: list[int] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by_id: Optional[int] = None
    updated_by_id: Optional[int] = None

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
