import pandas as pd

from .schemas import AggregateEntry, RankedRow


def rank(aggregate_map: dict[str, AggregateEntry]) -> list[RankedRow]:
    """
    Orders the aggregate by quantity, highest first. Ties go to the lower SKU
    (plain string order), so identical input always ranks identically.
    """
    if not aggregate_map:
        return []

    df = pd.DataFrame([entry.model_dump() for entry in aggregate_map.values()])
    df = df.sort_values(
        ["total_quantity", "sku"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)

    return [
        RankedRow(
            rank=position,
            brand=row["brand"],
            sku=row["sku"],
            title=row["title"],
            quantity=int(row["total_quantity"]),
        )
        for position, row in enumerate(df.to_dict("records"), start=1)
    ]
