import logging
from typing import Callable, Sequence
import pandas as pd

from . import settings
from .errors import AggregationConflict
from .schemas import AggregateEntry, LineItem, Order

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[int, int], None]
CONFLICT_POLICIES = ("warn", "error")
ITEM_COLUMNS = ["sku", "brand", "title", "quantity"]


def _flatten(
    pairs: Sequence[tuple[Order, Sequence[LineItem]]],
    brand_filter: str | None,
    on_progress: ProgressObserver | None,
) -> pd.DataFrame:
    """One row per kept line item, in (order, item) input order. Reports progress per order."""
    rows = []
    total = len(pairs)
    for done, (order, items) in enumerate(pairs, start=1):
        for item in items:
            # Case-sensitive exact match, same as the storefront's brand names
            if brand_filter and item.brand != brand_filter:
                continue
            rows.append(
                {
                    "sku": item.sku,
                    "brand": item.brand,
                    "title": item.title,
                    "quantity": item.quantity,
                }
            )
        if on_progress is not None:
            on_progress(done, total)
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def _check_identity_conflicts(df: pd.DataFrame, policy: str):
    """
    Finds SKUs whose brand or title differs from the first row seen for them.
    "warn" logs each one and lets the first identity stand; "error" raises on the first.
    """
    first = df.groupby("sku", sort=False)[["brand", "title"]].transform("first")
    differs = (df["brand"] != first["brand"]) | (df["title"] != first["title"])
    if not differs.any():
        return

    conflicts = df[differs].drop_duplicates(subset=["sku"])
    for idx, row in conflicts.iterrows():
        kept = (first.at[idx, "brand"], first.at[idx, "title"])
        seen = (row["brand"], row["title"])
        if policy == "error":
            raise AggregationConflict(row["sku"], kept, seen)
        logger.warning(
            f"⚠️  SKU '{row['sku']}' also appears as brand={seen[0]!r} title={seen[1]!r}; "
            f"keeping brand={kept[0]!r} title={kept[1]!r}."
        )


def aggregate(
    pairs: Sequence[tuple[Order, Sequence[LineItem]]],
    brand_filter: str | None = None,
    on_progress: ProgressObserver | None = None,
    conflict_policy: str = settings.CONFLICT_POLICY,
) -> dict[str, AggregateEntry]:
    """
    Folds every (order, line items) pair into one entry per SKU.

    Runs as a single sequential pass in input order, so the first line item seen
    for a SKU fixes its brand and title and later ones only add quantity. A blank
    `brand_filter` means no filtering.
    """
    if conflict_policy not in CONFLICT_POLICIES:
        raise ValueError(f"conflict_policy must be one of {CONFLICT_POLICIES}, got {conflict_policy!r}")

    df = _flatten(pairs, brand_filter, on_progress)
    if df.empty:
        logger.info("No line items matched; the aggregate is empty.")
        return {}

    _check_identity_conflicts(df, conflict_policy)

    # sort=False keeps first-seen SKU order; "first" picks the first row's identity
    summary = df.groupby("sku", sort=False).agg(
        brand=("brand", "first"),
        title=("title", "first"),
        total_quantity=("quantity", "sum"),
    )

    aggregate_map = {
        str(sku): AggregateEntry(
            sku=str(sku),
            brand=row["brand"],
            title=row["title"],
            total_quantity=int(row["total_quantity"]),
        )
        for sku, row in summary.iterrows()
    }
    logger.info(f"Aggregated {len(df)} line items into {len(aggregate_map)} SKUs.")
    return aggregate_map
