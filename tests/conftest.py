from datetime import datetime, timezone

import pytest

from sell_through.errors import UpstreamError
from sell_through.schemas import DateWindow, LineItem, Order

ORDERS_URL = "https://api.test/stores/abc123/v2/orders"


def make_order(order_id: int) -> dict:
    return {
        "id": order_id,
        "status_id": 2,
        "products": {
            "url": f"{ORDERS_URL}/{order_id}/products",
            "resource": f"/orders/{order_id}/products",
        },
    }


def make_item(sku: str, quantity: int, brand: str = "Acme", name: str | None = None) -> dict:
    return {"sku": sku, "brand": brand, "name": name or f"Product {sku}", "quantity": quantity}


class FakeClient:
    """
    Stands in for BigCommerceClient. Order pages are served from `pages` by page
    number; line items from `items` by URL. Every call is recorded.
    """

    orders_url = ORDERS_URL

    def __init__(self, pages=None, items=None, fail_urls=None):
        self.pages = pages or []
        self.items = items or {}
        self.fail_urls = set(fail_urls or [])
        self.calls = []

    def get_json(self, url, params=None):
        self.calls.append((url, dict(params) if params else None))
        if url in self.fail_urls:
            raise UpstreamError(f"{url} answered HTTP 500", url=url, status_code=500)
        if url == self.orders_url:
            page = params["page"]
            return self.pages[page - 1] if page <= len(self.pages) else []
        return self.items[url]

    @property
    def page_calls(self):
        return [params["page"] for url, params in self.calls if url == self.orders_url]


@pytest.fixture
def window():
    return DateWindow(
        start=datetime(2026, 9, 1, tzinfo=timezone.utc),
        end=datetime(2026, 10, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def order_factory():
    return lambda order_id: Order.model_validate(make_order(order_id))


@pytest.fixture
def item_factory():
    return lambda sku, quantity, brand="Acme", name=None: LineItem.model_validate(
        make_item(sku, quantity, brand, name)
    )
