from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel

_NUMERIC_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)
_CENTS = Decimal("0.01")


class Totals(BaseModel):
    total: float = 0.0
    count: int = 0


class InvoiceTotals(BaseModel):
    total_invoices: int = 0
    total_amount: float = 0.0
    total_paid: float = 0.0
    total_outstanding: float = 0.0


def parse_float(text: str) -> float:
    match = _NUMERIC_PREFIX.match(text.lstrip())
    if not match:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def coerce_amount(raw: Any) -> float:
    if isinstance(raw, Mapping):
        raw = raw.get("$numberDecimal")
    if not raw or isinstance(raw, bool):
        return 0.0
    try:
        if isinstance(raw, (int, float, Decimal)):
            value = float(raw)
        else:
            value = parse_float(str(raw))
    except (ValueError, OverflowError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return value


def read_field(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def aggregate(records: Iterable[Any], field: str = "amount") -> Totals:
    total = 0.0
    count = 0
    for record in records:
        total += coerce_amount(read_field(record, field))
        count += 1
    return Totals(total=total, count=count)


def profit(sales_total: float, expense_total: float) -> float:
    return sales_total - expense_total


def outstanding(total_amount: Any, amount_paid: Any) -> float:
    return coerce_amount(total_amount) - coerce_amount(amount_paid)


def summarize_invoices(
    invoices: Iterable[Any],
    total_field: str = "total_amount",
    paid_field: str = "amount_paid",
) -> InvoiceTotals:
    # outstanding is sum(total) - sum(paid), not a sum of per-invoice balances
    invoices = list(invoices)
    billed = aggregate(invoices, total_field)
    paid = aggregate(invoices, paid_field)
    return InvoiceTotals(
        total_invoices=billed.count,
        total_amount=billed.total,
        total_paid=paid.total,
        total_outstanding=billed.total - paid.total,
    )


def to_fixed(value: float, digits: int = 2) -> str:
    # ties round away from zero on the exact binary value, as Number.prototype.toFixed does
    if math.isnan(value):
        return "NaN"
    sign = "-" if value < 0 else ""
    if math.isinf(value):
        return sign + "Infinity"
    quantum = _CENTS if digits == 2 else Decimal(1).scaleb(-digits)
    rounded = Decimal(abs(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{sign}{rounded:.{digits}f}"


def format_currency(value: float) -> str:
    return "$" + to_fixed(value)
