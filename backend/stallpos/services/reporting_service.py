# Overview: Profit/loss, sales summary and dashboard reports over sale and cost snapshots.

"""
Report invariants (authoritative)

- Every report is a pure function of the snapshots it is handed; nothing
  here writes, and re-running a report over the same snapshots gives the
  same result.
- Date ranges are inclusive business days in the stall's timezone.
- total_profit_cents == total_revenue_cents - total_cost_assigned_cents.
- A cost entry is counted in at most one row: combined entries in their
  group row, individual entries in their item's row, general entries in
  their own row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from flask import current_app

from ..snapshots import ItemSnapshot, SaleSnapshot, CostEntrySnapshot
from ..time_utils import business_date, utcnow


@dataclass(frozen=True)
class ProfitLossRow:
    id: str
    name: str
    qty_sold: int
    revenue_cents: int
    assigned_cost_cents: int
    is_grouped: bool = False
    is_general: bool = False
    item_names: tuple[str, ...] = field(default_factory=tuple)

    @property
    def profit_cents(self) -> int:
        return self.revenue_cents - self.assigned_cost_cents

    @property
    def margin_pct(self) -> float | None:
        if self.is_general:
            return None
        if self.revenue_cents > 0:
            return self.profit_cents / self.revenue_cents * 100.0
        return -100.0 if self.assigned_cost_cents > 0 else 0.0

    def to_dict(self) -> dict:
        margin = self.margin_pct
        return {
            "id": self.id,
            "name": self.name,
            "qty_sold": self.qty_sold,
            "revenue_cents": self.revenue_cents,
            "assigned_cost_cents": self.assigned_cost_cents,
            "profit_cents": self.profit_cents,
            "margin_pct": round(margin, 2) if margin is not None else None,
            "is_grouped": self.is_grouped,
            "is_general": self.is_general,
            "item_names": list(self.item_names),
        }


@dataclass(frozen=True)
class ProfitLossReport:
    rows: tuple[ProfitLossRow, ...]
    total_revenue_cents: int
    total_cost_assigned_cents: int
    date_from: date | None = None
    date_to: date | None = None

    @property
    def total_profit_cents(self) -> int:
        return self.total_revenue_cents - self.total_cost_assigned_cents

    def to_dict(self) -> dict:
        return {
            "date_from": self.date_from.isoformat() if self.date_from else None,
            "date_to": self.date_to.isoformat() if self.date_to else None,
            "rows": [row.to_dict() for row in self.rows],
            "total_revenue_cents": self.total_revenue_cents,
            "total_cost_assigned_cents": self.total_cost_assigned_cents,
            "total_profit_cents": self.total_profit_cents,
        }


def filter_sales_by_date(
    sales: Sequence[SaleSnapshot],
    date_from: date | None,
    date_to: date | None,
    tz: str = "UTC",
) -> list[SaleSnapshot]:
    """Sales whose business day falls within [date_from, date_to]; open ends allowed."""
    result = []
    for sale in sales:
        day = business_date(sale.occurred_at, tz)
        if date_from and day < date_from:
            continue
        if date_to and day > date_to:
            continue
        result.append(sale)
    return result


def profit_loss_report(
    items: Sequence[ItemSnapshot],
    sales: Sequence[SaleSnapshot],
    cost_entries: Sequence[CostEntrySnapshot],
    date_from: date | None = None,
    date_to: date | None = None,
    tz: str = "UTC",
) -> ProfitLossReport:
    """
    Attribute costs to sales and rank the result by profit.

    1. qty/revenue per catalog item from the filtered sales' lines
    2. one group row per combined common_name (members consumed, their
       individual costs included)
    3. one row per remaining item that sold or carries individual costs
    4. one non-attributable row per general entry
    """
    filtered = filter_sales_by_date(sales, date_from, date_to, tz)
    names = {item.id: item.name for item in items}

    qty_by_item = {item.id: 0 for item in items}
    revenue_by_item = {item.id: 0 for item in items}
    for sale in filtered:
        for line in sale.items:
            if line.item_id in qty_by_item:
                qty_by_item[line.item_id] += line.qty
                revenue_by_item[line.item_id] += line.price_cents * line.qty

    individual_cost: dict[int, int] = {}
    for entry in cost_entries:
        if entry.cost_type == "individual":
            for item_id in entry.item_ids:
                individual_cost[item_id] = individual_cost.get(item_id, 0) + entry.total_cost_cents

    # Combined entries, merged by common_name. A member item's individual
    # costs move into the first group that claims it.
    groups: dict[str, dict] = {}
    consumed: set[int] = set()
    for entry in cost_entries:
        if entry.cost_type != "combined":
            continue
        name = entry.common_name or "Combined Cost"
        group = groups.get(name)
        if group is None:
            group = groups[name] = {"id": f"group-{entry.id}", "item_ids": [], "cost": 0}
        group["cost"] += entry.total_cost_cents
        for item_id in entry.item_ids:
            if item_id not in group["item_ids"]:
                group["item_ids"].append(item_id)
            if item_id not in consumed:
                group["cost"] += individual_cost.get(item_id, 0)
                consumed.add(item_id)

    rows: list[ProfitLossRow] = []
    for name, group in groups.items():
        rows.append(
            ProfitLossRow(
                id=group["id"],
                name=name,
                qty_sold=sum(qty_by_item.get(i, 0) for i in group["item_ids"]),
                revenue_cents=sum(revenue_by_item.get(i, 0) for i in group["item_ids"]),
                assigned_cost_cents=group["cost"],
                is_grouped=True,
                item_names=tuple(names.get(i, "Unknown") for i in group["item_ids"]),
            )
        )

    for item in items:
        if item.id in consumed:
            continue
        cost = individual_cost.get(item.id, 0)
        if qty_by_item[item.id] > 0 or cost > 0:
            rows.append(
                ProfitLossRow(
                    id=str(item.id),
                    name=item.name,
                    qty_sold=qty_by_item[item.id],
                    revenue_cents=revenue_by_item[item.id],
                    assigned_cost_cents=cost,
                )
            )

    for entry in cost_entries:
        if entry.cost_type == "general":
            rows.append(
                ProfitLossRow(
                    id=f"general-{entry.id}",
                    name=entry.common_name or "General Cost",
                    qty_sold=0,
                    revenue_cents=0,
                    assigned_cost_cents=entry.total_cost_cents,
                    is_general=True,
                )
            )

    rows.sort(key=lambda row: row.profit_cents, reverse=True)

    return ProfitLossReport(
        rows=tuple(rows),
        total_revenue_cents=sum(sale.total_amount_cents for sale in filtered),
        total_cost_assigned_cents=sum(row.assigned_cost_cents for row in rows),
        date_from=date_from,
        date_to=date_to,
    )


def sales_summary(sales: Sequence[SaleSnapshot]) -> dict:
    """Order count, revenue, payment breakdown, outstanding credit and items sold."""
    breakdown = {"cash": 0, "upi": 0, "credit": 0}
    credit: dict[str, dict] = {}
    sold: dict[int, dict] = {}

    for sale in sales:
        breakdown[sale.payment_method] = breakdown.get(sale.payment_method, 0) + sale.total_amount_cents

        if sale.payment_method == "credit":
            name = sale.credit_customer_name or "Unknown"
            bucket = credit.setdefault(name, {"customer_name": name, "amount_cents": 0, "sale_ids": []})
            bucket["amount_cents"] += sale.total_amount_cents
            bucket["sale_ids"].append(sale.id)

        for line in sale.items:
            entry = sold.setdefault(
                line.item_id,
                {"item_id": line.item_id, "name": line.item_name, "qty": 0, "revenue_cents": 0},
            )
            entry["qty"] += line.qty
            entry["revenue_cents"] += line.price_cents * line.qty

    return {
        "order_count": len(sales),
        "revenue_cents": sum(sale.total_amount_cents for sale in sales),
        "payment_breakdown_cents": breakdown,
        "credit_by_customer": sorted(credit.values(), key=lambda c: c["amount_cents"], reverse=True),
        "items_sold": sorted(sold.values(), key=lambda s: s["qty"], reverse=True),
    }


def dashboard_summary(
    items: Sequence[ItemSnapshot],
    sales: Sequence[SaleSnapshot],
    today: date,
    tz: str = "UTC",
    low_stock_threshold: int = 10,
) -> dict:
    todays = filter_sales_by_date(sales, today, today, tz)
    low_stock = [
        {"id": item.id, "name": item.name, "stock_qty": item.stock_qty}
        for item in items
        if item.stock_type == "fixed" and item.stock_qty < low_stock_threshold
    ]
    return {
        "date": today.isoformat(),
        "total_items": len(items),
        "today_order_count": len(todays),
        "today_revenue_cents": sum(sale.total_amount_cents for sale in todays),
        "today_profit_cents": sum(sale.total_amount_cents - sale.total_cost_cents for sale in todays),
        "pending_orders": sum(
            1 for sale in sales if any(line.status == "pending" for line in sale.items)
        ),
        "completed_today": sum(
            1 for sale in todays if all(line.status == "done" for line in sale.items)
        ),
        "low_stock_items": low_stock,
    }


# =============================================================================
# Database-backed entry points
# =============================================================================

def _stall_timezone() -> str:
    return current_app.config.get("STALL_TIMEZONE", "UTC")


def _load_snapshots() -> tuple[list[ItemSnapshot], list[SaleSnapshot], list[CostEntrySnapshot]]:
    from . import catalog_service, cost_service, sales_service

    items = [item.to_snapshot() for item in catalog_service.list_items()]
    sales = [sale.to_snapshot() for sale in sales_service.get_sales()]
    entries = [entry.to_snapshot() for entry in cost_service.list_cost_entries()]
    return items, sales, entries


def generate_profit_loss(date_from: date | None = None, date_to: date | None = None) -> ProfitLossReport:
    items, sales, entries = _load_snapshots()
    return profit_loss_report(items, sales, entries, date_from, date_to, _stall_timezone())


def generate_sales_summary(date_from: date | None = None, date_to: date | None = None) -> dict:
    from . import sales_service

    sales = [sale.to_snapshot() for sale in sales_service.get_sales(date_from, date_to)]
    summary = sales_summary(sales)
    summary["date_from"] = date_from.isoformat() if date_from else None
    summary["date_to"] = date_to.isoformat() if date_to else None
    return summary


def generate_dashboard(today: date | None = None) -> dict:
    items, sales, _ = _load_snapshots()
    tz = _stall_timezone()
    return dashboard_summary(
        items,
        sales,
        today or business_date(utcnow(), tz),
        tz,
        current_app.config.get("LOW_STOCK_THRESHOLD", 10),
    )
