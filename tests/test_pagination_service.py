import pytest

from admin_dashboard.models.pagination import PagedResult, coerce_int
from admin_dashboard.models.schemas import Order, OrderStatus
from admin_dashboard.services.pagination_service import PageShape, PaginationService, normalize_page

from conftest import make_orders

FIVE = [{"id": str(n)} for n in range(5)]


def summary(result: PagedResult):
    return len(result.items), result.total, result.total_pages


class TestShapes:
    def test_bare_array(self):
        assert summary(normalize_page(FIVE)) == (5, 5, 1)

    def test_items_envelope(self):
        result = normalize_page({"items": FIVE, "total": 5, "page": 1, "limit": 5})
        assert summary(result) == (5, 5, 1)
        assert result.limit == 5

    def test_data_envelope_with_meta(self):
        result = normalize_page({"data": FIVE, "meta": {"total": 5, "page": 1, "limit": 5, "totalPages": 1}})
        assert summary(result) == (5, 5, 1)

    def test_unrecognised_object(self):
        result = normalize_page({})
        assert summary(result) == (0, 0, 0)
        assert result.items == []

    @pytest.mark.parametrize("payload", [None, "oops", 42, {"items": "nope"}, {"data": {"a": 1}}, {"rows": [1, 2]}])
    def test_malformed_payloads_never_raise(self, payload):
        result = normalize_page(payload, page=2, limit=10)
        assert summary(result) == (0, 0, 0)
        assert result.page == 2
        assert result.limit == 10

    def test_empty_defaults(self):
        result = normalize_page(None)
        assert result.page == 1
        assert result.limit == 50

    def test_items_take_priority_over_data(self):
        payload = {"items": [{"id": "a"}], "data": [{"id": "b"}, {"id": "c"}]}
        assert PaginationService.detect_shape(payload) == PageShape.ITEMS
        assert normalize_page(payload).items == [{"id": "a"}]

    def test_detect_shape(self):
        assert PaginationService.detect_shape([]) == PageShape.ARRAY
        assert PaginationService.detect_shape({"data": []}) == PageShape.DATA
        assert PaginationService.detect_shape("text") == PageShape.EMPTY


class TestMetadata:
    def test_missing_metadata_uses_request(self):
        result = normalize_page({"items": FIVE}, page=3, limit=5)
        assert result.page == 3
        assert result.limit == 5
        assert result.total == 5
        assert result.total_pages == 1

    def test_items_top_level_wins_over_meta(self):
        payload = {"items": FIVE, "total": 25, "meta": {"total": 99, "page": 4}}
        result = normalize_page(payload, page=1, limit=5)
        assert result.total == 25
        assert result.page == 4
        assert result.total_pages == 5

    def test_data_meta_wins_over_top_level(self):
        payload = {"data": FIVE, "total": 99, "meta": {"total": 25, "limit": 5}}
        result = normalize_page(payload)
        assert result.total == 25
        assert result.limit == 5
        assert result.total_pages == 5

    def test_numeric_strings_are_accepted(self):
        result = normalize_page({"items": FIVE, "total": "30", "page": "2", "limit": "5"})
        assert (result.total, result.page, result.limit, result.total_pages) == (30, 2, 5, 6)

    def test_garbage_metadata_is_derived(self):
        result = normalize_page({"items": FIVE, "total": "lots", "page": -1, "limit": 0}, page=2, limit=5)
        assert result.total == 5
        assert result.page == 2
        assert result.limit == 5

    def test_inconsistent_total_pages_is_recomputed(self):
        result = normalize_page({"items": [], "total": 0, "totalPages": 3})
        assert result.total_pages == 0
        result = normalize_page({"items": FIVE, "total": 5, "limit": 5, "totalPages": 0})
        assert result.total_pages == 1

    def test_consistent_declared_total_pages_is_kept(self):
        result = normalize_page({"data": FIVE, "meta": {"total": 12, "limit": 5, "totalPages": 3}})
        assert result.total_pages == 3

    def test_limit_widened_when_page_overflows(self):
        result = normalize_page({"items": FIVE, "total": 5, "limit": 2})
        assert result.limit == 5
        assert result.total_pages == 1


class TestBareArrayPaging:
    def test_window_is_cut_when_server_ignores_paging(self):
        items = [{"id": str(n)} for n in range(25)]
        result = normalize_page(items, page=2, limit=10)
        assert [item["id"] for item in result.items] == [str(n) for n in range(10, 20)]
        assert result.total == 25
        assert result.total_pages == 3

    def test_page_past_the_end_is_empty(self):
        result = normalize_page(FIVE, page=4, limit=2)
        assert result.items == []
        assert result.total == 5
        assert result.total_pages == 3

    def test_empty_array(self):
        result = normalize_page([])
        assert summary(result) == (0, 0, 0)
        assert result.limit == 50


@pytest.mark.parametrize(
    "total,limit,expected",
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 12, 3), (100, 100, 1)],
)
def test_total_pages_is_ceiling(total, limit, expected):
    assert PaginationService.total_pages(total, limit) == expected


def test_calculate_offset():
    assert PaginationService.calculate_offset(1, 10) == 0
    assert PaginationService.calculate_offset(3, 12) == 24


@pytest.mark.parametrize(
    "payload",
    [
        FIVE,
        {"items": FIVE, "total": 23, "page": 2, "limit": 5},
        {"data": FIVE, "meta": {"total": 5}},
        {"something": "else"},
    ],
)
def test_normalize_is_idempotent(payload):
    once = normalize_page(payload, page=2, limit=5)
    assert normalize_page(once) == once
    assert normalize_page(once.to_payload()) == once


def test_invariant_zero_pages_iff_zero_total():
    for payload in ([], FIVE, {"items": [], "total": 7}, {"data": FIVE, "meta": {"totalPages": 0}}):
        result = normalize_page(payload)
        assert (result.total_pages == 0) == (result.total == 0)


class TestItemModel:
    def test_items_are_parsed(self):
        result = normalize_page({"items": make_orders(2), "total": 2}, item_model=Order)
        assert all(isinstance(order, Order) for order in result.items)
        assert result.items[0].order_id == "ORD-1001"

    def test_malformed_items_are_dropped(self):
        raw = make_orders(2) + [{"id": "bad", "customer": {"first": "Ada"}}, "not a record"]
        result = normalize_page({"items": raw, "total": 4}, item_model=Order)
        assert [order.identifier for order in result.items] == ["ord-1", "ord-2"]
        assert result.total == 4

    def test_unknown_status_rows_are_kept(self):
        raw = make_orders(1) + make_orders(1, start=2, status="Cancelled")
        result = normalize_page({"items": raw, "total": 2}, item_model=Order)
        assert [order.identifier for order in result.items] == ["ord-1", "ord-2"]
        assert result.items[1].status == OrderStatus.UNKNOWN
        assert result.items[1].status_label == "Cancelled"

    def test_idempotent_with_models(self):
        once = normalize_page({"items": make_orders(3), "total": 3}, page=1, limit=10, item_model=Order)
        again = normalize_page(once.to_payload(), item_model=Order)
        assert [o.model_dump() for o in again.items] == [o.model_dump() for o in once.items]
        assert again.total_pages == once.total_pages


class TestPagedResult:
    def test_navigation(self):
        result = PagedResult(items=[], total=25, page=2, limit=10, total_pages=3)
        assert result.has_next and result.has_prev
        assert result.next_page == 3
        assert result.prev_page == 1

    def test_empty(self):
        result = PagedResult.empty(page=0, limit=None)
        assert (result.page, result.limit, result.total_pages) == (1, 50, 0)
        assert not result.has_next and not result.has_prev

    def test_payload_uses_wire_names(self):
        payload = PagedResult(items=[1], total=1, page=1, limit=10, total_pages=1).to_payload()
        assert payload == {"items": [1], "total": 1, "page": 1, "limit": 10, "totalPages": 1}


@pytest.mark.parametrize(
    "value,expected",
    [(5, 5), ("7", 7), (" 3 ", 3), (2.9, 2), ("x", None), (None, None), (True, None), (float("nan"), None)],
)
def test_coerce_int(value, expected):
    assert coerce_int(value) == expected
