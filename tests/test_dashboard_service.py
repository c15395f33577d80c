import pytest
from aiohttp import web

from admin_dashboard.exceptions import AuthenticationError
from admin_dashboard.models.schemas import OrderStatus
from admin_dashboard.services.dashboard_service import DashboardService

from conftest import make_drafts, make_orders, order_page


@pytest.mark.asyncio
async def test_overview(api, backend):
    orders = make_orders(2) + make_orders(1, start=3, status="Shipped")
    backend.respond("GET", "/orders", json=order_page(orders, limit=3, total=40))
    backend.respond("GET", "/newsletter", json={"data": make_drafts(3), "meta": {"total": 12}})
    backend.respond("GET", "/newsletter/subscription/count", json={"count": 318})

    overview = await DashboardService(api).load_overview()

    assert [o.identifier for o in overview.recent_orders] == ["ord-1", "ord-2", "ord-3"]
    assert [d.draft_id for d in overview.recent_drafts] == ["DR-1001", "DR-1002", "DR-1003"]
    assert overview.subscribers_count == 318
    assert overview.pending_orders == 2
    assert backend.requests[0].query == {"page": "1", "limit": "3"}


@pytest.mark.asyncio
async def test_paged_failure_retries_without_paging(api, backend):
    async def orders(request):
        if "page" in request.query:
            return web.json_response({"message": "paging not supported"}, status=400)
        return web.json_response(make_orders(5))

    backend.respond_with("GET", "/orders", orders)
    backend.respond("GET", "/newsletter", json=make_drafts(1))
    backend.respond("GET", "/newsletter/subscription/count", json={})

    overview = await DashboardService(api).load_overview()

    assert len(overview.recent_orders) == 3
    assert [r.query for r in backend.requests[:2]] == [{"page": "1", "limit": "3"}, {}]
    assert len(overview.recent_drafts) == 1
    assert overview.subscribers_count == 0


@pytest.mark.asyncio
async def test_unauthorized_is_not_retried(api, backend, redirects):
    backend.respond("GET", "/orders", status=401)

    with pytest.raises(AuthenticationError):
        await DashboardService(api).load_overview()

    assert len(backend.requests) == 1
    assert redirects == ["/login"]


@pytest.mark.asyncio
async def test_quick_actions_update_overview(api, backend):
    backend.respond("GET", "/orders", json=make_orders(1))
    backend.respond("GET", "/newsletter", json=[])
    backend.respond("GET", "/newsletter/subscription/count", json={"count": 1})
    backend.respond("PUT", "/orders/ord-1/status", json={})
    service = DashboardService(api)
    overview = await service.load_overview()
    assert overview.pending_orders == 1

    result = await service.coordinator.accept("ord-1")

    assert result.applied
    assert overview.recent_orders[0].status == OrderStatus.ACCEPTED
    assert overview.pending_orders == 0
