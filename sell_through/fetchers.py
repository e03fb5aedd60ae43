import logging
from typing import Any, Protocol
from pydantic import ValidationError

from . import settings
from .date_window import to_api_timestamp
from .errors import UpstreamError
from .schemas import DateWindow, LineItem, Order

logger = logging.getLogger(__name__)


class JsonClient(Protocol):
    """What the fetchers need from a transport. `BigCommerceClient` is the real one."""

    orders_url: str

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any: ...


def _as_records(payload: Any, what: str, url: str) -> list[dict]:
    if not isinstance(payload, list):
        raise UpstreamError(
            f"Expected a JSON array of {what} from {url}, got {type(payload).__name__}", url=url
        )
    return payload


def fetch_orders(
    client: JsonClient,
    window: DateWindow,
    page_size: int = settings.PAGE_SIZE,
    max_pages: int = settings.MAX_PAGES,
    status_id: int = settings.ORDER_STATUS_ID,
) -> list[Order]:
    """
    Walks the orders listing page by page and returns every order in the window,
    in the order upstream returned them.

    Stops at the first empty page or the first page shorter than `page_size`.
    When the final page is exactly full, one more (empty) page is requested to
    confirm the end, so N orders cost ceil(N / page_size) requests, plus one
    when N is a multiple of page_size.

    Raises UpstreamError on any failed page, on more than `max_pages` pages, or
    when a full page repeats the previous page's order ids (upstream is not
    advancing, so the loop would never end).
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    params = {
        "status_id": status_id,
        "min_date_created": to_api_timestamp(window.start),
        "max_date_created": to_api_timestamp(window.end),
        "limit": page_size,
    }
    orders: list[Order] = []
    previous_ids: list[int] | None = None
    page = 1

    while True:
        if page > max_pages:
            raise UpstreamError(
                f"Gave up after {max_pages} pages of orders without reaching the last page.",
                url=client.orders_url,
            )

        payload = client.get_json(client.orders_url, params={**params, "page": page})
        records = _as_records(payload, "orders", client.orders_url)

        # Empty page: nothing more to read
        if not records:
            break

        try:
            page_orders = [Order.model_validate(record) for record in records]
        except ValidationError as e:
            raise UpstreamError(f"Page {page} of orders is malformed: {e}", url=client.orders_url) from e

        page_ids = [order.id for order in page_orders]
        if page_ids == previous_ids:
            raise UpstreamError(
                f"Page {page} of orders repeats page {page - 1}; upstream is not paginating.",
                url=client.orders_url,
            )

        orders.extend(page_orders)
        logger.debug(f"  > Page {page}: {len(page_orders)} orders (running total {len(orders)})")

        # Short page: this was the last one
        if len(records) < page_size:
            break

        previous_ids = page_ids
        page += 1

    logger.info(f"  > Fetched {len(orders)} orders across {page} page request(s).")
    return orders


def fetch_line_items(client: JsonClient, order: Order) -> list[LineItem]:
    """Fetches one order's products. Holds no state, so it is safe to call from many threads."""
    url = order.items_ref
    try:
        payload = client.get_json(url)
    except UpstreamError as e:
        raise UpstreamError(
            f"Line items for order {order.id} could not be fetched: {e}",
            url=url,
            status_code=e.status_code,
        ) from e

    records = _as_records(payload, f"line items for order {order.id}", url)
    try:
        return [LineItem.model_validate(record) for record in records]
    except ValidationError as e:
        raise UpstreamError(f"Line items for order {order.id} are malformed: {e}", url=url) from e
