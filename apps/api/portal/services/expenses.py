"""Expense aggregation for invoice charts and summary cards.

Every function here is pure: it takes an iterable of invoice-like objects
exposing ``amount``, ``category`` and ``invoice_date`` and returns plain data.
Amounts are coerced to ``float`` and summed in floating point, which is fine
for display but not for ledger-grade accounting.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Protocol

UNCATEGORIZED = "Uncategorized"
TOP_CATEGORY_LIMIT = 3


class InvoiceLike(Protocol):
    amount: Any
    category: str | None
    invoice_date: Any


@dataclass(slots=True)
class MonthTotal:
    month: str
    total: float


@dataclass(slots=True)
class CategoryTotal:
    category: str
    total: float


@dataclass(slots=True)
class CategoryShare:
    category: str
    total: float
    percent: float


@dataclass(slots=True)
class MonthComparison:
    """One month of the top-category comparison chart."""

    month: str
    values: dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class ExpenseSummary:
    invoice_count: int
    grand_total: float
    monthly: list[MonthTotal]
    categories: list[CategoryTotal]
    shares: list[CategoryShare]
    top_categories: list[str]
    comparison: list[MonthComparison]


def to_amount(value: Any) -> float:
    """Coerce a numeric, Decimal or string amount to float."""

    if value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    return float(str(value).strip())


def category_of(invoice: InvoiceLike) -> str:
    return invoice.category or UNCATEGORIZED


def month_key(value: Any) -> str:
    """Return the ``YYYY-MM`` bucket for an invoice date."""

    if isinstance(value, str):
        text = value.strip()
        parsed: date = datetime.fromisoformat(text) if "T" in text or " " in text else date.fromisoformat(text[:10])
    elif isinstance(value, (date, datetime)):
        parsed = value
    else:
        raise TypeError(f"Unsupported invoice_date value: {value!r}")
    return f"{parsed.year:04d}-{parsed.month:02d}"


def grand_total(invoices: Iterable[InvoiceLike]) -> float:
    return sum((to_amount(invoice.amount) for invoice in invoices), 0.0)


def monthly_totals(invoices: Iterable[InvoiceLike]) -> list[MonthTotal]:
    """Sum amounts per month, ascending by month key."""

    buckets: dict[str, float] = {}
    for invoice in invoices:
        key = month_key(invoice.invoice_date)
        buckets[key] = buckets.get(key, 0.0) + to_amount(invoice.amount)
    return [MonthTotal(month=key, total=buckets[key]) for key in sorted(buckets)]


def category_totals(invoices: Iterable[InvoiceLike]) -> list[CategoryTotal]:
    """Sum amounts per category, largest total first."""

    buckets: dict[str, float] = {}
    for invoice in invoices:
        key = category_of(invoice)
        buckets[key] = buckets.get(key, 0.0) + to_amount(invoice.amount)
    # sorted() is stable, so ties keep first-seen order.
    ordered = sorted(buckets.items(), key=lambda item: item[1], reverse=True)
    return [CategoryTotal(category=name, total=total) for name, total in ordered]


def category_shares(invoices: Iterable[InvoiceLike]) -> list[CategoryShare]:
    """Category totals with their percentage of the grand total."""

    totals = category_totals(invoices)
    overall = sum(item.total for item in totals)
    return [
        CategoryShare(
            category=item.category,
            total=item.total,
            percent=(item.total / overall * 100.0) if overall else 0.0,
        )
        for item in totals
    ]


def top_category_comparison(
    invoices: Iterable[InvoiceLike],
    limit: int = TOP_CATEGORY_LIMIT,
) -> tuple[list[str], list[MonthComparison]]:
    """Compare the ``limit`` largest categories month by month.

    Every month present in the data gets a row; categories outside the top
    ``limit`` are left out entirely and missing values default to 0.
    """

    items: Sequence[InvoiceLike] = list(invoices)
    top = [item.category for item in category_totals(items)[:limit]]

    rows: dict[str, MonthComparison] = {}
    for invoice in items:
        key = month_key(invoice.invoice_date)
        row = rows.get(key)
        if row is None:
            row = rows[key] = MonthComparison(month=key, values={name: 0.0 for name in top})
        category = category_of(invoice)
        if category in row.values:
            row.values[category] += to_amount(invoice.amount)

    return top, [rows[key] for key in sorted(rows)]


def summarize(invoices: Iterable[InvoiceLike]) -> ExpenseSummary:
    """Build every dashboard aggregate from one invoice snapshot."""

    items = list(invoices)
    top, comparison = top_category_comparison(items)
    return ExpenseSummary(
        invoice_count=len(items),
        grand_total=grand_total(items),
        monthly=monthly_totals(items),
        categories=category_totals(items),
        shares=category_shares(items),
        top_categories=top,
        comparison=comparison,
    )
