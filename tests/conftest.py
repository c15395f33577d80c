import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from admin_dashboard.api.client import DashboardApi
from admin_dashboard.dependencies.auth import AuthGuard, CredentialProvider
from admin_dashboard.services.api_client import ApiClient
from admin_dashboard.services.kv_store import MemoryStore

TOKEN = "test-admin-token"
API_PREFIX = "/api"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: Dict[str, str]
    headers: Dict[str, str]
    content_type: str
    body: bytes = b""
    form: Dict[str, Any] = field(default_factory=dict)


class FakeBackend:
    """In-process stand-in for the admin REST API"""

    def __init__(self):
        self.base_url = ""
        self.requests: List[RecordedRequest] = []
        self._routes: Dict[Tuple[str, str], Union[Handler, Tuple[int, Any, float]]] = {}

    def respond(self, method: str, path: str, status: int = 200, json: Any = None, delay: float = 0.0) -> None:
        self._routes[(method.upper(), API_PREFIX + path)] = (status, json, delay)

    def respond_with(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method.upper(), API_PREFIX + path)] = handler

    def last(self) -> RecordedRequest:
        return self.requests[-1]

    async def handle(self, request: web.Request) -> web.StreamResponse:
        recorded = RecordedRequest(
            method=request.method,
            path=request.path[len(API_PREFIX):],
            query=dict(request.query),
            headers=dict(request.headers),
            content_type=request.content_type,
        )
        if request.content_type.startswith("multipart/"):
            form = await request.post()
            for name, value in form.items():
                if isinstance(value, web.FileField):
                    recorded.form[name] = {"filename": value.filename, "content": value.file.read()}
                else:
                    recorded.form[name] = value
        else:
            recorded.body = await request.read()
        self.requests.append(recorded)

        route = self._routes.get((request.method, request.path))
        if route is None:
            return web.json_response({"message": "Not found"}, status=404)
        if callable(route):
            return await route(request)

        status, payload, delay = route
        if delay:
            await asyncio.sleep(delay)
        if payload is None:
            return web.Response(status=status)
        return web.json_response(payload, status=status)


@pytest_asyncio.fixture
async def backend():
    fake = FakeBackend()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    server = TestServer(app)
    await server.start_server()
    fake.base_url = str(server.make_url(API_PREFIX))
    yield fake
    await server.close()


@pytest.fixture
def token_store() -> MemoryStore:
    return MemoryStore({"smartiAdminToken": TOKEN})


@pytest.fixture
def credentials(token_store: MemoryStore) -> CredentialProvider:
    return CredentialProvider(token_store)


@pytest.fixture
def redirects() -> List[str]:
    return []


@pytest.fixture
def auth_guard(credentials: CredentialProvider, redirects: List[str]) -> AuthGuard:
    return AuthGuard(credentials, on_redirect=redirects.append)


@pytest_asyncio.fixture
async def api(backend: FakeBackend, credentials: CredentialProvider, auth_guard: AuthGuard):
    client = ApiClient(backend.base_url, credentials, auth_guard=auth_guard, timeout=2.0)
    async with DashboardApi(client) as dashboard_api:
        yield dashboard_api


def make_orders(count: int, start: int = 1, status: str = "Pending") -> List[Dict[str, Any]]:
    return [
        {
            "id": f"ord-{n}",
            "orderId": f"ORD-{1000 + n}",
            "customer": f"Customer {n}",
            "email": f"customer{n}@example.com",
            "total": f"${n * 10}.00",
            "date": "2024-05-01",
            "status": status,
        }
        for n in range(start, start + count)
    ]


def make_drafts(count: int, start: int = 1) -> List[Dict[str, Any]]:
    return [
        {
            "_id": f"db-{n}",
            "draftId": f"DR-{1000 + n}",
            "title": f"Draft {n}",
            "content": f"<p>Body {n}</p>",
            "updatedAt": "2024-05-01T10:00:00Z",
        }
        for n in range(start, start + count)
    ]


def order_page(items: List[Dict[str, Any]], page: int = 1, limit: int = 10, total: Optional[int] = None) -> Dict[str, Any]:
    total = len(items) if total is None else total
    return {"items": items, "total": total, "page": page, "limit": limit}
