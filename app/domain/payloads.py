from __future__ import annotations
import datetime as dt
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from app.domain.models import DailySummary, ProductRollup, ProductSaleRecord


# -----------------------------------------------------------------------------
# 1) Base: camelCase on the wire, snake_case in Python
# -----------------------------------------------------------------------------

class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# -----------------------------------------------------------------------------
# 2) Ledger input (raw form values; validated by app.domain.records)
# -----------------------------------------------------------------------------

FormValue = Union[int, float, str, None]


class RecordIn(CamelModel):
    product_name: Optional[str] = None
    initial_qty: FormValue = None
    qty_sold: FormValue = None
    price_per_unit: FormValue = None


# -----------------------------------------------------------------------------
# 3) Export payloads (already-aggregated data sent by the caller)
# -----------------------------------------------------------------------------

class ProductSaleRecordIn(CamelModel):
    id: str
    product_name: str = Field(min_length=1)
    initial_qty: int = Field(ge=0)
    qty_sold: int = Field(ge=0)
    price_per_unit: float = Field(ge=0, allow_inf_nan=False)
    # derived values are accepted for compatibility and recomputed
    total_sales: Optional[float] = None
    remaining_qty: Optional[int] = None

    @model_validator(mode="after")
    def _sold_within_initial(self) -> ProductSaleRecordIn:
        if self.qty_sold > self.initial_qty:
            raise ValueError("Quantity sold cannot exceed initial quantity")
        return self

    def to_record(self) -> ProductSaleRecord:
        return ProductSaleRecord(
            id=self.id,
            product_name=self.product_name,
            initial_qty=self.initial_qty,
            qty_sold=self.qty_sold,
            price_per_unit=self.price_per_unit,
        )


class DailySummaryIn(CamelModel):
    date: dt.date
    total_revenue: float = Field(allow_inf_nan=False)
    total_products: int = Field(ge=0)
    total_units_sold: int = Field(ge=0)
    top_product: str = ""
    top_product_revenue: float = Field(default=0.0, allow_inf_nan=False)

    def to_summary(self) -> DailySummary:
        return DailySummary(
            date=self.date.isoformat(),
            total_revenue=self.total_revenue,
            total_products=self.total_products,
            total_units_sold=self.total_units_sold,
            top_product=self.top_product,
            top_product_revenue=self.top_product_revenue,
        )


class ProductRollupIn(CamelModel):
    product_name: str
    total_revenue: float = Field(allow_inf_nan=False)
    total_units_sold: int = Field(ge=0)
    average_price: Optional[float] = Field(default=None, allow_inf_nan=False)
    appearances: int = Field(default=1, ge=0)
    last_sold: str = ""

    def to_rollup(self) -> ProductRollup:
        return ProductRollup(
            product_name=self.product_name,
            total_revenue=self.total_revenue,
            total_units_sold=self.total_units_sold,
            appearances=self.appearances,
            last_sold=self.last_sold,
            average_price=self.average_price,
        )


class DailyReportIn(CamelModel):
    current_date: dt.date
    products: List[ProductSaleRecordIn] = Field(default_factory=list)

    def records(self) -> List[ProductSaleRecord]:
        return [p.to_record() for p in self.products]


class AnalyticsReportIn(CamelModel):
    selected_period: str = Field(default="all", max_length=64)
    summaries: List[DailySummaryIn] = Field(default_factory=list)
    top_products: List[ProductRollupIn] = Field(default_factory=list)

    def daily_summaries(self) -> List[DailySummary]:
        return [s.to_summary() for s in self.summaries]

    def rollups(self) -> List[ProductRollup]:
        return [p.to_rollup() for p in self.top_products]
