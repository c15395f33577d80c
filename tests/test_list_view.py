import asyncio

import pytest
from aiohttp import web

from admin_dashboard.services.list_view import ORDERS_PAGE_SIZE, PagedListView, RequestSequencer

from conftest import make_orders, order_page


def test_sequencer_only_latest_is_current():
    sequencer = RequestSequencer()
    first = sequencer.issue()
    second = sequencer.issue()
    assert not sequencer.is_current(first)
    assert sequencer.is_current(second)
    sequencer.close()
    assert not sequencer.is_current(second)


@pytest.mark.asyncio
async def test_load_applies_page(api, backend):
    backend.respond("GET", "/orders", json=order_page(make_orders(10), page=1, limit=10, total=25))
    view = PagedListView(api.orders.list, page_size=ORDERS_PAGE_SIZE, name="orders")

    assert await view.load(1)

    assert len(view.items) == 10
    assert (view.total, view.total_pages, view.page) == (25, 3, 1)
    assert not view.loading
    assert view.error is None
    assert backend.last().query == {"page": "1", "limit": "10"}


@pytest.mark.asyncio
async def test_slow_earlier_response_is_discarded(api, backend):
    async def orders(request):
        page = int(request.query["page"])
        if page == 1:
            await asyncio.sleep(0.3)
        return web.json_response(order_page(make_orders(10, start=page * 100), page=page, limit=10, total=30))

    backend.respond_with("GET", "/orders", orders)
    view = PagedListView(api.orders.list, page_size=10, name="orders")

    applied = await asyncio.gather(view.load(1), view.load(2))

    assert applied == [False, True]
    assert view.page == 2
    assert view.items[0].identifier == "ord-200"


@pytest.mark.asyncio
async def test_closed_view_ignores_inflight_response(api, backend):
    backend.respond("GET", "/orders", json=order_page(make_orders(3)), delay=0.2)
    view = PagedListView(api.orders.list, name="orders")

    pending = asyncio.ensure_future(view.load(1))
    await asyncio.sleep(0.05)
    view.close()

    assert await pending is False
    assert view.items == []
    assert await view.load(1) is False


@pytest.mark.asyncio
async def test_unauthorized_leaves_state_untouched(api, backend, credentials, redirects):
    backend.respond("GET", "/orders", json=order_page(make_orders(2)))
    view = PagedListView(api.orders.list, name="orders")
    await view.load(1)
    before = list(view.items)

    backend.respond("GET", "/orders", status=401, json={"items": make_orders(5, start=50), "total": 5})
    assert await view.load(1) is False

    assert view.items == before
    assert view.total == 2
    assert view.error is None
    assert credentials.get_token() is None
    assert redirects == ["/login"]


@pytest.mark.asyncio
async def test_server_error_keeps_previous_items(api, backend):
    backend.respond("GET", "/orders", json=order_page(make_orders(2)))
    view = PagedListView(api.orders.list, name="orders")
    await view.load(1)

    backend.respond("GET", "/orders", status=500, json={"error": "Upstream timeout"})
    assert await view.load(1) is False

    assert len(view.items) == 2
    assert view.error == "Upstream timeout"
    assert not view.loading


@pytest.mark.asyncio
async def test_filters_reset_to_first_page(api, backend):
    backend.respond("GET", "/orders", json=order_page(make_orders(10), page=3, limit=10, total=50))
    view = PagedListView(api.orders.list, name="orders")
    await view.load(3)

    backend.respond("GET", "/orders", json=order_page(make_orders(1, status="Shipped"), page=1, limit=10))
    await view.load(status="Shipped")

    assert backend.last().query == {"page": "1", "limit": "10", "status": "Shipped"}
    assert view.filters == {"status": "Shipped"}
    assert view.page == 1

    await view.load(status=None)
    assert view.filters == {}
    assert "status" not in backend.last().query


@pytest.mark.asyncio
async def test_page_navigation_bounds(api, backend):
    async def orders(request):
        page = int(request.query["page"])
        return web.json_response(order_page(make_orders(10), page=page, limit=10, total=20))

    backend.respond_with("GET", "/orders", orders)
    view = PagedListView(api.orders.list, name="orders")
    await view.load(1)

    assert await view.prev_page() is False
    assert await view.next_page() is True
    assert view.page == 2
    assert await view.next_page() is False
    assert await view.prev_page() is True
    assert view.page == 1
    assert len(backend.requests) == 3


@pytest.mark.asyncio
async def test_search_and_find(api, backend):
    orders = make_orders(3)
    orders[1]["customer"] = "Grace Hopper"
    backend.respond("GET", "/orders", json=order_page(orders))
    view = PagedListView(api.orders.list, name="orders")
    await view.load()

    assert [o.identifier for o in view.search("hopper")] == ["ord-2"]
    assert len(view.search("")) == 3
    assert view.find("ord-3").customer == "Customer 3"
    assert view.find("missing") is None
