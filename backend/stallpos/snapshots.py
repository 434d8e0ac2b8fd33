# Overview: Immutable snapshots handed to the pure report and queue functions.

"""
Snapshots decouple the derived views (profit/loss, queues, dashboards) from
the ORM session: callers load rows, convert them with `to_snapshot()` and pass
plain frozen dataclasses in. The pure functions never touch the database and
can be re-run over any snapshot, however stale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ItemSnapshot:
    id: int
    name: str
    price_cents: int
    stock_type: str = "unlimited"
    stock_qty: int = 0
    assigned_employee_id: int | None = None
    cost_per_unit_cents: int = 0


@dataclass(frozen=True)
class OrderItemSnapshot:
    item_id: int
    item_name: str
    qty: int
    price_cents: int
    cost_cents: int = 0
    employee_id: int | None = None
    status: str = "pending"

    @property
    def line_total_cents(self) -> int:
        return self.price_cents * self.qty


@dataclass(frozen=True)
class SaleSnapshot:
    id: int
    occurred_at: datetime
    token_number: int
    items: tuple[OrderItemSnapshot, ...] = ()
    total_amount_cents: int = 0
    total_cost_cents: int = 0
    payment_method: str = "cash"
    credit_customer_name: str | None = None


@dataclass(frozen=True)
class CostEntrySnapshot:
    id: int
    cost_type: str
    total_cost_cents: int
    item_ids: tuple[int, ...] = field(default_factory=tuple)
    common_name: str | None = None
    description: str | None = None
    occurred_at: datetime | None = None
