"""
Unit tests for the Zammad API client

Tests:
- Auth precedence (basic > token > oauth)
- Base URL handling
- Error mapping (404, other statuses, transport failures, bad JSON)
- Partial ticket updates
- Tag add status handling
- Search response shapes
"""
import base64

import httpx
import pytest

from zammad_mcp.client import ZammadClient
from zammad_mcp.errors import BackendError, ResourceNotFound

from tests.conftest import BASE_URL


def make_client(backend, **kwargs):
    return ZammadClient(BASE_URL, transport=httpx.MockTransport(backend.handle), **kwargs)


class TestAuthPrecedence:
    """Test raw_request authentication headers"""

    @pytest.mark.asyncio
    async def test_token_auth(self, backend):
        backend.on("GET", "users/me", body={"id": 1})
        client = make_client(backend, token="abc")

        await client.me()

        assert backend.calls[0].headers["Authorization"] == "Token token=abc"

    @pytest.mark.asyncio
    async def test_basic_auth_wins_over_token_and_oauth(self, backend):
        backend.on("GET", "users/me", body={"id": 1})
        client = make_client(
            backend, token="abc", username="agent", password="pw", oauth_token="oauth"
        )

        await client.me()

        expected = base64.b64encode(b"agent:pw").decode()
        assert backend.calls[0].headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_username_without_password_falls_back_to_token(self, backend):
        backend.on("GET", "users/me", body={"id": 1})
        client = make_client(backend, token="abc", username="agent")

        await client.me()

        assert backend.calls[0].headers["Authorization"] == "Token token=abc"

    @pytest.mark.asyncio
    async def test_oauth_used_when_nothing_else_set(self, backend):
        backend.on("GET", "users/me", body={"id": 1})
        client = make_client(backend, oauth_token="oauth")

        await client.me()

        assert backend.calls[0].headers["Authorization"] == "Bearer oauth"

    @pytest.mark.asyncio
    async def test_raw_request_applies_auth(self, backend):
        backend.on("GET", "users/5", body={"id": 5, "custom": "x"})
        client = make_client(backend, token="abc")

        response = await client.raw_request("GET", "users/5")

        assert response.status_code == 200
        assert backend.calls[0].headers["Authorization"] == "Token token=abc"


class TestRequests:
    """Test URL building and error mapping"""

    @pytest.mark.asyncio
    async def test_trailing_slash_in_base_url(self, backend):
        backend.on("GET", "tickets/1", body={"id": 1})
        client = ZammadClient(
            BASE_URL + "/", token="t", transport=httpx.MockTransport(backend.handle)
        )

        ticket = await client.show_ticket(1)

        assert ticket.id == 1
        assert str(backend.calls[0].url) == f"{BASE_URL}/api/v1/tickets/1"

    @pytest.mark.asyncio
    async def test_404_raises_resource_not_found(self, client):
        with pytest.raises(ResourceNotFound):
            await client.show_ticket(999)

    @pytest.mark.asyncio
    async def test_other_status_raises_backend_error(self, backend, client):
        backend.on("GET", "tickets/1", status=500, body={"error": "boom"})

        with pytest.raises(BackendError) as exc_info:
            await client.show_ticket(1)

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, ResourceNotFound)

    @pytest.mark.asyncio
    async def test_transport_error_raises_backend_error(self, backend, client):
        backend.fail("GET", "tickets", httpx.ConnectError("connection refused"))

        with pytest.raises(BackendError) as exc_info:
            await client.list_tickets()

        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_backend_error(self, backend, client):
        backend.on("GET", "tickets/1", body="<html>maintenance</html>")

        with pytest.raises(BackendError):
            await client.show_ticket(1)


class TestTickets:
    """Test ticket calls"""

    @pytest.mark.asyncio
    async def test_update_ticket_sends_only_given_fields(self, backend, client, ticket_data):
        backend.on("PUT", "tickets/42", body={**ticket_data, "state": "closed"})

        ticket = await client.update_ticket(42, {"state": "closed"})

        assert backend.json_sent("PUT", "tickets/42") == {"state": "closed"}
        assert ticket.state == "closed"

    @pytest.mark.asyncio
    async def test_search_tickets_sends_query_and_limit(self, backend, client, ticket_data):
        backend.on("GET", "tickets/search", body=[ticket_data])

        tickets = await client.search_tickets("printer", 10)

        params = backend.calls[0].url.params
        assert params["query"] == "printer"
        assert params["limit"] == "10"
        assert params["expand"] == "true"
        assert [t.id for t in tickets] == [42]

    @pytest.mark.asyncio
    async def test_search_tickets_with_assets_response(self, backend, client, ticket_data):
        backend.on(
            "GET",
            "tickets/search",
            body={"tickets": [42], "tickets_count": 1, "assets": {"Ticket": {"42": ticket_data}}},
        )

        tickets = await client.search_tickets("printer", 10)

        assert len(tickets) == 1
        assert tickets[0].title == "Printer jam"

    @pytest.mark.asyncio
    async def test_search_tickets_with_null_assets(self, backend, client):
        backend.on("GET", "tickets/search", body={"tickets": [42], "assets": None})

        tickets = await client.search_tickets("printer", 10)

        assert [t.id for t in tickets] == [42]

    @pytest.mark.asyncio
    async def test_create_article_drops_empty_fields(self, backend, client):
        backend.on("POST", "ticket_articles", status=201, body={"id": 9, "ticket_id": 42})

        await client.create_article({"ticket_id": 42, "body": "hi", "to": None, "cc": ""})

        assert backend.json_sent("POST", "ticket_articles") == {"ticket_id": 42, "body": "hi"}


class TestTags:
    """Test tag calls"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 201])
    async def test_add_tag_success_statuses(self, backend, client, status):
        backend.on("POST", "tags/add", status=status, body=True)

        result = await client.add_tag(42, "vip")

        assert result == status
        assert backend.json_sent("POST", "tags/add") == {"object": "Ticket", "o_id": 42, "item": "vip"}

    @pytest.mark.asyncio
    async def test_add_tag_failure_status(self, backend, client):
        backend.on("POST", "tags/add", status=422, body={"error": "invalid"})

        with pytest.raises(BackendError) as exc_info:
            await client.add_tag(42, "vip")

        assert "422" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_search_tags_maps_value_to_name(self, backend, client):
        backend.on("GET", "tag_search", body=[{"id": 7, "value": "vip"}])

        tags = await client.search_tags("vi", 5)

        assert [(t.name, t.id) for t in tags] == [("vip", 7)]
        params = backend.calls[0].url.params
        assert params["term"] == "vi"
        assert params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_search_tags_unexpected_shape(self, backend, client):
        backend.on("GET", "tag_search", body={"error": "weird"})

        with pytest.raises(BackendError):
            await client.search_tags("vi", 5)

    @pytest.mark.asyncio
    async def test_ticket_tags(self, backend, client):
        backend.on("GET", "tags", body={"tags": ["vip", "printer"]})

        tags = await client.ticket_tags(42)

        assert [t.name for t in tags] == ["vip", "printer"]
        params = backend.calls[0].url.params
        assert params["object"] == "Ticket"
        assert params["o_id"] == "42"
