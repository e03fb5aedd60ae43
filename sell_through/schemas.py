from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field, field_validator, model_validator


class DateWindow(BaseModel):
    """The inclusive `[start, end]` range orders are filtered by. Both ends are UTC-aware."""

    start: datetime
    end: datetime

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_bounds(self) -> "DateWindow":
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("window bounds must be timezone-aware")
        if self.start > self.end:
            raise ValueError(
                f"window start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )
        return self


class ResourceRef(BaseModel):
    """A sub-resource link as embedded in a V2 order (e.g. `order.products`)."""

    url: str
    resource: str | None = None


class Order(BaseModel):
    """
    One record from the orders listing. Only the id and the products link matter
    to the report; everything else upstream sends is kept but never read.
    """

    id: int
    products: ResourceRef

    class Config:
        extra = "allow"

    @property
    def items_ref(self) -> str:
        return self.products.url


class LineItem(BaseModel):
    sku: str
    brand: str = ""
    title: str = Field(..., alias="name")
    quantity: int = Field(..., ge=0)

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("sku", mode="before")
    @classmethod
    def coerce_sku(cls, value: Any) -> Any:
        # Some stores have purely numeric SKUs that come back as JSON numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("brand", mode="before")
    @classmethod
    def blank_brand(cls, value: Any) -> Any:
        return "" if value is None else value


class AggregateEntry(BaseModel):
    """Running total for one SKU. Brand and title are whatever the SKU was first seen with."""

    brand: str
    sku: str
    title: str
    total_quantity: int = Field(default=0, ge=0)


class RankedRow(BaseModel):
    """
    Defines the data contract for a single row of the final report.
    Aliases are the column headers the sink writes.
    """

    rank: int = Field(..., ge=1, alias="Rank")
    brand: str = Field(..., alias="Brand")
    sku: str = Field(..., alias="SKU")
    title: str = Field(..., alias="Title")
    quantity: int = Field(..., ge=0, alias="Quantity")

    class Config:
        # Lets the ranker build rows by field name while exports use the headers.
        populate_by_name = True
        frozen = True
