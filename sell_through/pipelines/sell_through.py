import logging
from functools import partial
from typing import Optional
from tqdm.contrib.logging import logging_redirect_tqdm

from sell_through import aggregator, fan_out, fetchers, ranker, settings
from sell_through.date_window import describe_window
from sell_through.fetchers import JsonClient
from sell_through.pipeline import DataPipeline, Sink
from sell_through.schemas import DateWindow, LineItem, Order, RankedRow
from sell_through.utils import ProgressBar

logger = logging.getLogger(__name__)


class SellThroughPipeline(DataPipeline):
    """
    Orders in a window -> line items per order -> quantity per SKU -> ranked rows.

    Pagination finishes before any line items are requested, line items are
    fetched concurrently, and aggregation runs afterwards on this thread alone.
    """

    def __init__(
        self,
        client: JsonClient,
        window: DateWindow,
        brand_filter: Optional[str] = None,
        sink: Optional[Sink] = None,
        max_workers: Optional[int] = settings.MAX_WORKERS,
        page_size: int = settings.PAGE_SIZE,
        conflict_policy: str = settings.CONFLICT_POLICY,
        progress: Optional[aggregator.ProgressObserver] = None,
        dry_run: bool = False,
    ):
        if max_workers is not None and max_workers < 0:
            raise ValueError(f"max_workers must be 0 (one per order) or positive, got {max_workers}")
        super().__init__("sell through", sink=sink, dry_run=dry_run)
        self.client = client
        self.window = window
        self.brand_filter = brand_filter or None
        self.max_workers = max_workers
        self.page_size = page_size
        self.conflict_policy = conflict_policy
        self.progress = progress if progress is not None else ProgressBar()

    def extract(self) -> list[tuple[Order, list[LineItem]]]:
        logger.info(f"--- Fetching orders for {describe_window(self.window)} ---")
        orders = fetchers.fetch_orders(self.client, self.window, page_size=self.page_size)
        if not orders:
            return []

        logger.info(f"--- Fetching line items for {len(orders)} orders ---")
        return fan_out.resolve_all(
            orders,
            partial(fetchers.fetch_line_items, self.client),
            max_workers=self.max_workers,
            describe=lambda order: f"order {order.id}",
        )

    def transform(self, pairs: list[tuple[Order, list[LineItem]]]) -> list[RankedRow]:
        if self.brand_filter:
            logger.info(f"--- Aggregating by SKU (brand: {self.brand_filter}) ---")
        else:
            logger.info("--- Aggregating by SKU (all brands) ---")

        # Conflict warnings are printed above the bar instead of through it
        with logging_redirect_tqdm(loggers=[logging.getLogger("sell_through")]):
            aggregate_map = aggregator.aggregate(
                pairs,
                brand_filter=self.brand_filter,
                on_progress=self.progress,
                conflict_policy=self.conflict_policy,
            )
        rows = ranker.rank(aggregate_map)
        if rows:
            top = rows[0]
            logger.info(f"Top seller: {top.sku} ({top.title}) with {top.quantity} units.")
        return rows
