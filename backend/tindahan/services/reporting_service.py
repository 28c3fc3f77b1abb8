# Overview: Service-layer operations for reporting; dashboard aggregates over sales and expense receipts.

from __future__ import annotations

from datetime import date, datetime, timedelta

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import ExpenseReceipt, SaleLine, SaleTransaction
from tindahan.time_utils import local_midnight_utc, to_local_date, utcnow

# Number of buckets shown per period, newest bucket being the current one
PERIOD_BUCKETS = {"day": 7, "month": 12, "year": 5}


class ReportError(Exception):
    """Raised when report parameters are invalid."""
    pass


def best_sellers(limit: int = 5) -> list[dict]:
    """
    Top items by quantity sold across all non-voided sales.

    Lines are grouped by item_id, or by item_name for untracked service
    lines. Ties on quantity are broken by revenue, then name.
    """
    if limit is None or limit <= 0:
        raise ReportError("limit must be > 0")

    key = func.coalesce(SaleLine.item_id, SaleLine.item_name)
    quantity = func.sum(SaleLine.quantity)
    revenue = func.sum(SaleLine.line_total_cents)

    rows = (
        db.session.query(
            key.label("key"),
            func.min(SaleLine.item_name).label("item_name"),
            quantity.label("quantity_sold"),
            revenue.label("total_revenue_cents"),
        )
        .join(SaleTransaction, SaleLine.sale_id == SaleTransaction.id)
        .filter(SaleTransaction.status != "voided")
        .group_by(key)
        .order_by(quantity.desc(), revenue.desc(), key.asc())
        .limit(limit)
        .all()
    )

    return [
        {
            "item_id": r.key,
            "item_name": r.item_name,
            "quantity_sold": int(r.quantity_sold or 0),
            "total_revenue_cents": int(r.total_revenue_cents or 0),
        }
        for r in rows
    ]


def _bucket_starts(period: str, today: date) -> list[date]:
    """First local day of each bucket, oldest first."""
    count = PERIOD_BUCKETS[period]
    if period == "day":
        return [today - timedelta(days=i) for i in reversed(range(count))]
    if period == "month":
        starts = []
        year, month = today.year, today.month
        for _ in range(count):
            starts.append(date(year, month, 1))
            year, month = (year, month - 1) if month > 1 else (year - 1, 12)
        return list(reversed(starts))
    return [date(today.year - i, 1, 1) for i in reversed(range(count))]


def _bucket_key(period: str, day: date) -> str:
    if period == "day":
        return day.isoformat()
    if period == "month":
        return day.strftime("%Y-%m")
    return day.strftime("%Y")


def _bucket_label(period: str, day: date) -> str:
    if period == "day":
        return f"{day:%b} {day.day}"
    if period == "month":
        return day.strftime("%b")
    return day.strftime("%Y")


def _hourly_totals(model, amount_col, since: datetime, *filters) -> list[tuple[datetime, int]]:
    """
    Sum amount_col per UTC hour from `since`.

    Hours rather than days so that rows can be placed into store-local
    buckets afterwards.
    """
    hour = func.strftime("%Y-%m-%d %H:00:00", model.created_at)
    rows = (
        db.session.query(hour.label("hour"), func.coalesce(func.sum(amount_col), 0))
        .filter(model.created_at >= since, *filters)
        .group_by(hour)
        .all()
    )
    return [(datetime.strptime(h, "%Y-%m-%d %H:%M:%S"), int(total or 0)) for h, total in rows]


def performance(period: str = "day", now: datetime | None = None) -> dict:
    """
    Sales vs expenses per day (last 7), month (last 12) or year (last 5).

    Sales are non-voided sale totals; expenses are expense receipt totals.
    Buckets follow the store's calendar (STORE_TIMEZONE), oldest first.
    """
    if period not in PERIOD_BUCKETS:
        raise ReportError(f"period must be one of: {', '.join(PERIOD_BUCKETS)}")

    tz_name = current_app.config.get("STORE_TIMEZONE", "UTC")
    today = to_local_date(now or utcnow(), tz_name)
    starts = _bucket_starts(period, today)
    since = local_midnight_utc(starts[0], tz_name)

    buckets = {
        _bucket_key(period, d): {
            "period": _bucket_key(period, d),
            "label": _bucket_label(period, d),
            "sales_cents": 0,
            "expenses_cents": 0,
        }
        for d in starts
    }

    sales = _hourly_totals(
        SaleTransaction, SaleTransaction.total_cents, since, SaleTransaction.status != "voided"
    )
    expenses = _hourly_totals(ExpenseReceipt, ExpenseReceipt.total_cents, since)

    for field, totals in (("sales_cents", sales), ("expenses_cents", expenses)):
        for hour, total in totals:
            bucket = buckets.get(_bucket_key(period, to_local_date(hour, tz_name)))
            if bucket is not None:
                bucket[field] += total

    items = list(buckets.values())
    return {
        "period": period,
        "items": items,
        "total_sales_cents": sum(b["sales_cents"] for b in items),
        "total_expenses_cents": sum(b["expenses_cents"] for b in items),
    }
