"""
Shared fixtures: a call-recording Zammad stub behind httpx.MockTransport
"""
import json

import httpx
import pytest

from zammad_mcp.client import ZammadClient

BASE_URL = "https://zammad.example.com"
API_PREFIX = "/api/v1/"


class StubZammad:
    """
    In-memory stand-in for the Zammad REST API.

    Routes are keyed by (METHOD, path relative to /api/v1/). A route value is
    either a (status, json_body) tuple or a callable taking the httpx.Request
    and returning one. Unknown routes answer 404. Every request is recorded.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method: str, path: str, status: int = 200, body=None):
        self.routes[(method.upper(), path)] = (status, body)
        return self

    def on_call(self, method: str, path: str, func):
        self.routes[(method.upper(), path)] = func
        return self

    def fail(self, method: str, path: str, exc: Exception):
        def raise_(request):
            raise exc
        return self.on_call(method, path, raise_)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        self.calls.append(request)

        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"error": "Not Found"})
        if callable(route):
            route = route(request)
        status, body = route
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    # ── Inspection helpers ────────────────────────────────────────────────────

    def requests_to(self, method: str, path: str) -> list:
        return [
            r for r in self.calls
            if r.method == method.upper() and r.url.path == API_PREFIX + path
        ]

    def json_sent(self, method: str, path: str, index: int = -1) -> dict:
        return json.loads(self.requests_to(method, path)[index].content)


@pytest.fixture
def backend():
    """Fixture for the Zammad stub"""
    return StubZammad()


@pytest.fixture
def client(backend):
    """Fixture for a ZammadClient talking to the stub with token auth"""
    return ZammadClient(
        BASE_URL, token="secret-token", transport=httpx.MockTransport(backend.handle)
    )


@pytest.fixture
def ticket_data():
    return {
        "id": 42,
        "number": "31042",
        "title": "Printer jam",
        "group_id": 1,
        "customer_id": 7,
        "owner_id": 1,
        "state_id": 2,
        "state": "open",
        "priority_id": 2,
        "created_at": "2025-01-10T09:00:00.000Z",
        "updated_at": "2025-01-10T09:30:00.000Z",
        "preferences": {"channel_id": 3},
    }


@pytest.fixture
def article_data():
    return {
        "id": 301,
        "ticket_id": 42,
        "body": "Paper stuck in tray 2",
        "type": "note",
        "sender": "Agent",
        "content_type": "text/plain",
        "internal": True,
        "subject": None,
        "from": "Support Agent",
    }


@pytest.fixture
def user_data():
    return {
        "id": 7,
        "organization_id": 3,
        "login": "jane@example.com",
        "firstname": "Jane",
        "lastname": "Doe",
        "email": "jane@example.com",
        "web": "",
        "last_login": "2025-01-09T17:00:00.000Z",
        "active": True,
        "department": "Accounting",
        "cost_center": "CC-100",
    }


@pytest.fixture
def text_modules_data():
    return [
        {
            "id": 1,
            "name": "Greeting",
            "keywords": "hi welcome",
            "content": "Say Hello World to the customer",
            "note": "",
            "active": True,
            "group_ids": [1],
            "created_at": "2025-01-01T00:00:00.000Z",
            "updated_at": "2025-01-01T00:00:00.000Z",
            "created_by_id": 1,
            "updated_by_id": 1,
        },
        {
            "id": 2,
            "name": "Closing",
            "keywords": "bye",
            "content": "Kind regards, your support team",
            "note": "",
            "active": True,
            "group_ids": [],
            "created_at": "2025-01-01T00:00:00.000Z",
            "updated_at": "2025-01-01T00:00:00.000Z",
            "created_by_id": 1,
            "updated_by_id": 1,
        },
        {
            "id": 3,
            "name": "Printer FAQ",
            "keywords": None,
            "content": "Please restart the PRINTER first.",
            "note": "internal",
            "active": False,
            "group_ids": [2],
            "created_at": "2025-01-01T00:00:00.000Z",
            "updated_at": "2025-01-01T00:00:00.000Z",
            "created_by_id": 1,
            "updated_by_id": 1,
        },
    ]
