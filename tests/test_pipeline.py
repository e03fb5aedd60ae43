"""
End-to-end tests for SellThroughPipeline with a fake client and a capturing sink.
"""

import pytest

from conftest import FakeClient, make_item, make_order
from sell_through.errors import UpstreamError
from sell_through.pipelines.sell_through import SellThroughPipeline
from sell_through.utils import ProgressBar


class CapturingSink:
    def __init__(self):
        self.calls = []

    def __call__(self, rows):
        self.calls.append(list(rows))


def _client_for(orders: dict[int, list[dict]], page_size: int = 200, **kwargs) -> FakeClient:
    order_records = [make_order(order_id) for order_id in orders]
    pages = [order_records[i:i + page_size] for i in range(0, len(order_records), page_size)]
    items = {record["products"]["url"]: orders[record["id"]] for record in order_records}
    return FakeClient(pages=pages, items=items, **kwargs)


def _pipeline(client, window, sink, **kwargs):
    return SellThroughPipeline(client, window, sink=sink, progress=lambda done, total: None, **kwargs)


def test_end_to_end_example(window):
    client = _client_for({
        1: [make_item("X", 2)],
        2: [make_item("X", 3), make_item("Y", 1)],
    })
    sink = CapturingSink()

    rows = _pipeline(client, window, sink).run()

    assert [(row.sku, row.quantity) for row in rows] == [("X", 5), ("Y", 1)]
    assert sink.calls == [rows]


def test_brand_filter_end_to_end(window):
    client = _client_for({
        1: [make_item("X", 2, brand="Acme"), make_item("Z", 50, brand="Other")],
        2: [make_item("Y", 4, brand="Acme")],
    })
    sink = CapturingSink()

    rows = _pipeline(client, window, sink, brand_filter="Acme").run()

    assert [(row.sku, row.quantity) for row in rows] == [("Y", 4), ("X", 2)]


def test_many_pages_and_bounded_workers(window):
    orders = {order_id: [make_item(f"SKU-{order_id % 4}", 1)] for order_id in range(1, 24)}
    client = _client_for(orders, page_size=5)
    sink = CapturingSink()

    rows = _pipeline(client, window, sink, page_size=5, max_workers=3).run()

    assert sum(row.quantity for row in rows) == 23
    assert [row.sku for row in rows] == ["SKU-1", "SKU-2", "SKU-3", "SKU-0"]
    assert client.page_calls == [1, 2, 3, 4, 5]


def test_empty_window_writes_empty_report(window):
    client = _client_for({})
    sink = CapturingSink()

    rows = _pipeline(client, window, sink).run()

    assert rows == []
    assert sink.calls == [[]]


def test_line_item_failure_aborts_without_writing(window):
    client = _client_for(
        {1: [make_item("X", 1)], 2: [make_item("X", 1)], 3: [make_item("X", 1)]},
        fail_urls=[make_order(2)["products"]["url"]],
    )
    sink = CapturingSink()

    with pytest.raises(UpstreamError, match="order 2"):
        _pipeline(client, window, sink).run()
    assert sink.calls == []


def test_order_page_failure_aborts_before_line_items(window):
    client = _client_for({1: [make_item("X", 1)]}, fail_urls=[FakeClient.orders_url])
    sink = CapturingSink()

    with pytest.raises(UpstreamError):
        _pipeline(client, window, sink).run()
    assert [url for url, _ in client.calls] == [FakeClient.orders_url]
    assert sink.calls == []


def test_dry_run_skips_sink(window):
    client = _client_for({1: [make_item("X", 1)]})
    sink = CapturingSink()

    rows = _pipeline(client, window, sink, dry_run=True).run()

    assert len(rows) == 1
    assert sink.calls == []


def test_progress_observer_sees_every_order(window):
    client = _client_for({1: [make_item("X", 1)], 2: [], 3: [make_item("Y", 2)]})
    seen = []

    SellThroughPipeline(
        client, window, sink=CapturingSink(), progress=lambda done, total: seen.append((done, total))
    ).run()

    assert seen == [(1, 3), (2, 3), (3, 3)]


def test_default_progress_is_a_tqdm_bar(window):
    pipeline = SellThroughPipeline(FakeClient(), window, sink=CapturingSink())
    assert isinstance(pipeline.progress, ProgressBar)


def test_negative_workers_rejected_up_front(window):
    client = FakeClient()
    with pytest.raises(ValueError, match="max_workers"):
        SellThroughPipeline(client, window, sink=CapturingSink(), max_workers=-1)
    assert client.calls == []
