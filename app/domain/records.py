"""Validation of user-entered sale records."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Optional

from app.core.errors import RecordValidationError
from app.domain.models import ProductSaleRecord


def _parse_int(value: Any, field: str, label: str) -> int:
    if isinstance(value, bool):
        raise RecordValidationError(field, f"{label} must be a valid positive number")
    try:
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError
            parsed = int(value)
        else:
            parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise RecordValidationError(field, f"{label} must be a valid positive number") from None
    if parsed < 0:
        raise RecordValidationError(field, f"{label} must be a valid positive number")
    return parsed


def _parse_price(value: Any) -> float:
    if isinstance(value, bool):
        raise RecordValidationError("pricePerUnit", "Price per unit must be a valid positive number")
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError):
        raise RecordValidationError(
            "pricePerUnit", "Price per unit must be a valid positive number"
        ) from None
    # float() accepts "nan" and "inf"
    if parsed != parsed or parsed in (float("inf"), float("-inf")) or parsed < 0:
        raise RecordValidationError("pricePerUnit", "Price per unit must be a valid positive number")
    return parsed


def parse_day(value: str) -> str:
    """Normalizes a ledger key to an ISO calendar date (YYYY-MM-DD)."""
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except (AttributeError, ValueError):
        raise RecordValidationError("date", f"Invalid date: {value}") from None


def new_record(
    product_name: Optional[str],
    initial_qty: Any,
    qty_sold: Any,
    price_per_unit: Any,
    *,
    record_id: Optional[str] = None,
) -> ProductSaleRecord:
    """
    Builds a ProductSaleRecord from raw form values.

    Raises RecordValidationError on the first invalid field, in form order:
    name, initial quantity, quantity sold, price, then sold > initial.
    """
    name = (product_name or "").strip()
    if not name:
        raise RecordValidationError("productName", "Product name is required")

    initial = _parse_int(initial_qty, "initialQty", "Initial quantity")
    sold = _parse_int(qty_sold, "qtySold", "Quantity sold")
    price = _parse_price(price_per_unit)

    if sold > initial:
        raise RecordValidationError("qtySold", "Quantity sold cannot exceed initial quantity")

    return ProductSaleRecord(
        id=record_id or uuid.uuid4().hex,
        product_name=name,
        initial_qty=initial,
        qty_sold=sold,
        price_per_unit=price,
    )
