class SellThroughError(Exception):
    """Base class for every failure the report pipeline signals."""


class InputError(SellThroughError, ValueError):
    """The requested date range is malformed or unknown. Raised before any network call."""


class UpstreamError(SellThroughError):
    """
    An order page or line-item request failed (transport, HTTP status or payload shape).
    The whole report is aborted; nothing is built from partial data.
    """

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class AggregationConflict(SellThroughError):
    """The same SKU showed up with a different brand or title than first recorded."""

    def __init__(self, sku: str, first: tuple[str, str], conflicting: tuple[str, str]):
        super().__init__(
            f"SKU '{sku}' first seen as brand={first[0]!r} title={first[1]!r}, "
            f"later as brand={conflicting[0]!r} title={conflicting[1]!r}"
        )
        self.sku = sku
        self.first = first
        self.conflicting = conflicting
