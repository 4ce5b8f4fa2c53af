"""
Zammad API Client

Thin async wrapper over the Zammad REST API (/api/v1) used by the MCP
handlers:
- Tickets (list, show, search, create, partial update)
- Articles (list by ticket, create)
- Users (me, list, show, raw show, search)
- Tags (per ticket, add, catalog)
- Text modules (list, show)

Every call goes through raw_request(), the only place that knows how to
authenticate. No retries: each call is attempted exactly once.
"""
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from zammad_mcp.errors import BackendError, ResourceNotFound
from zammad_mcp.logger import get_logger
from zammad_mcp.schema import Article, Tag, TextModule, Ticket, User

logger = get_logger(__name__)


class ZammadClient:
    """
    Zammad API integration with a single authenticated request helper
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        username: str = "",
        password: str = "",
        oauth_token: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = base_url.rstrip("/")
        self.token = token
        self.username = username
        self.password = password
        self.oauth_token = oauth_token
        self.timeout = timeout
        self._http = httpx.AsyncClient(
            base_url=f"{self.url}/api/v1/",
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings) -> "ZammadClient":
        return cls(
            settings.zammad_url,
            token=settings.zammad_token,
            username=settings.zammad_username,
            password=settings.zammad_password,
            oauth_token=settings.zammad_oauth_token,
            timeout=settings.zammad_timeout,
        )

    async def __aenter__(self) -> "ZammadClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Transport ─────────────────────────────────────────────────────────────

    def _auth_kwargs(self) -> Dict[str, Any]:
        """
        Authentication for one request.

        Precedence: basic auth when username and password are both set,
        else API token, else OAuth bearer token.
        """
        if self.username and self.password:
            return {"auth": httpx.BasicAuth(self.username, self.password)}
        if self.token:
            return {"headers": {"Authorization": f"Token token={self.token}"}}
        if self.oauth_token:
            return {"headers": {"Authorization": f"Bearer {self.oauth_token}"}}
        return {}

    async def raw_request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send one authenticated request and return the raw response.

        Args:
            method: HTTP method (GET, POST, PUT, ...)
            path: Path relative to /api/v1/ (e.g. "tickets/42")
            body: Optional JSON body
            params: Optional query parameters

        Raises:
            BackendError: On transport failures (connect, timeout, ...)
        """
        try:
            return await self._http.request(
                method, path, json=body, params=params, **self._auth_kwargs()
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise BackendError(f"{method} {path} failed: {e}") from e

    async def _request_json(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        ok_statuses: tuple = (200,),
    ) -> Any:
        response = await self.raw_request(method, path, body=body, params=params)

        if response.status_code == 404:
            raise ResourceNotFound(f"{path} not found (HTTP 404)")
        if response.status_code not in ok_statuses:
            raise BackendError(
                f"{method} {path}: HTTP status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"{method} {path}: invalid JSON in response: {e}") from e

    @staticmethod
    def _parse(model, data: Any):
        try:
            if isinstance(data, list):
                return [model.model_validate(item) for item in data]
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise BackendError(f"Unexpected {model.__name__} payload from Zammad: {e}") from e

    # ── Users ─────────────────────────────────────────────────────────────────

    async def me(self) -> User:
        """Identity of the configured credentials. Used as a connection check."""
        return self._parse(User, await self._request_json("GET", "users/me"))

    async def list_users(self) -> List[User]:
        return self._parse(User, await self._request_json("GET", "users"))

    async def show_user(self, user_id: int) -> User:
        return self._parse(User, await self._request_json("GET", f"users/{user_id}"))

    async def show_user_raw(self, user_id: int) -> Dict[str, Any]:
        """
        Full user record as returned by Zammad, custom fields included.
        """
        return await self._request_json("GET", f"users/{user_id}")

    async def search_users(self, query: str, limit: int) -> List[User]:
        data = await self._request_json(
            "GET", "users/search", params={"query": query, "limit": limit, "expand": "true"}
        )
        return self._parse(User, data)

    # ── Tickets ───────────────────────────────────────────────────────────────

    async def list_tickets(self) -> List[Ticket]:
        return self._parse(Ticket, await self._request_json("GET", "tickets"))

    async def show_ticket(self, ticket_id: int) -> Ticket:
        return self._parse(Ticket, await self._request_json("GET", f"tickets/{ticket_id}"))

    async def search_tickets(self, query: str, limit: int) -> List[Ticket]:
        data = await self._request_json(
            "GET", "tickets/search", params={"query": query, "limit": limit, "expand": "true"}
        )
        if isinstance(data, dict):
            # Older Zammad versions ignore expand and answer with ids + assets.
            assets = (data.get("assets") or {}).get("Ticket") or {}
            data = [assets.get(str(i), {"id": i}) for i in data.get("tickets") or []]
        return self._parse(Ticket, data)

    async def create_ticket(self, payload: Dict[str, Any]) -> Ticket:
        """
        Create a ticket together with its first article

        Args:
            payload: Ticket fields plus an "article" dict
        """
        logger.info(f"Creating ticket '{payload.get('title')}'")
        data = await self._request_json("POST", "tickets", body=payload, ok_statuses=(200, 201))
        return self._parse(Ticket, data)

    async def update_ticket(self, ticket_id: int, fields: Dict[str, Any]) -> Ticket:
        """
        Partial update: only the given fields are sent, so Zammad does not
        validate fields we never meant to touch.

        Args:
            ticket_id: Zammad ticket ID
            fields: e.g. {"state": "closed"} or {"owner_id": 3}
        """
        logger.info(f"Updating ticket {ticket_id} with {sorted(fields)}")
        data = await self._request_json("PUT", f"tickets/{ticket_id}", body=fields)
        return self._parse(Ticket, data)

    # ── Articles ──────────────────────────────────────────────────────────────

    async def list_articles(self, ticket_id: int) -> List[Article]:
        data = await self._request_json("GET", f"ticket_articles/by_ticket/{ticket_id}")
        return self._parse(Article, data)

    async def create_article(self, fields: Dict[str, Any]) -> Article:
        """
        Create an article on a ticket. Empty optional fields are not sent.

        Args:
            fields: Article fields, must include ticket_id
        """
        payload = {k: v for k, v in fields.items() if v is not None and v != ""}
        logger.info(f"Creating {payload.get('type', 'note')} article on ticket {payload.get('ticket_id')}")
        data = await self._request_json(
            "POST", "ticket_articles", body=payload, ok_statuses=(200, 201)
        )
        return self._parse(Article, data)

    # ── Tags ──────────────────────────────────────────────────────────────────

    async def ticket_tags(self, ticket_id: int) -> List[Tag]:
        data = await self._request_json(
            "GET", "tags", params={"object": "Ticket", "o_id": ticket_id}
        )
        names = data.get("tags", []) if isinstance(data, dict) else []
        return [Tag(name=name) for name in names]

    async def add_tag(self, ticket_id: int, tag_name: str) -> int:
        """
        Associate a tag with a ticket

        Returns:
            HTTP status: 201 when created, 200 when Zammad reports success
            (the tag may already have been there)

        Raises:
            BackendError: On any other status
        """
        payload = {"object": "Ticket", "o_id": ticket_id, "item": tag_name}
        logger.debug(f"Adding tag - data: {payload}")
        response = await self.raw_request("POST", "tags/add", body=payload)
        logger.debug(f"Tag add response: status {response.status_code}, body: {response.text}")

        if response.status_code not in (200, 201):
            raise BackendError(
                f"HTTP status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response.status_code

    async def list_tags(self) -> List[Tag]:
        """Global tag catalog. Needs the admin.tag permission."""
        return self._parse(Tag, await self._request_json("GET", "tag_list"))

    async def search_tags(self, term: str, limit: int) -> List[Tag]:
        """
        Native tag search, open to every agent

        Zammad matches the term as a case-insensitive substring; an empty
        term matches every tag. Results come back as {"id", "value"}.
        """
        data = await self._request_json(
            "GET", "tag_search", params={"term": term, "limit": limit}
        )
        if not isinstance(data, list):
            raise BackendError(f"GET tag_search: unexpected response: {data!r}")
        tags = []
        for item in data:
            fields = {"name": item.get("value") or item.get("name", "")}
            if item.get("id") is not None:
                fields["id"] = item["id"]
            tags.append(Tag(**fields))
        return tags

    # ── Text modules ──────────────────────────────────────────────────────────

    async def list_text_modules(self) -> List[TextModule]:
        return self._parse(TextModule, await self._request_json("GET", "text_modules"))

    async def show_text_module(self, text_module_id: int) -> TextModule:
        data = await self._request_json("GET", f"text_modules/{text_module_id}")
        return self._parse(TextModule, data)
