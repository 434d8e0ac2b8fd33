# Overview: Order queue projections for kitchen staff and servers.

"""
Both views are projections of one canonical "order" (a sale plus the
aggregate status of the lines in scope). Nothing is stored; callers rebuild
the view from a fresh sales snapshot whenever they need one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from ..snapshots import SaleSnapshot
from ..time_utils import to_utc_z


@dataclass(frozen=True)
class QueueItem:
    item_id: int
    item_name: str
    qty: int
    status: str

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "qty": self.qty,
            "status": self.status,
        }


@dataclass(frozen=True)
class Order:
    sale_id: int
    token_number: int
    order_time: datetime
    status: str
    items: tuple[QueueItem, ...]

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "token_number": self.token_number,
            "order_time": to_utc_z(self.order_time),
            "status": self.status,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class QueueView:
    pending: tuple[Order, ...]
    completed: tuple[Order, ...]
    completed_total: int

    def to_dict(self) -> dict:
        return {
            "pending": [order.to_dict() for order in self.pending],
            "completed": [order.to_dict() for order in self.completed],
            "pending_count": len(self.pending),
            "completed_total": self.completed_total,
        }


def build_orders(sales: Sequence[SaleSnapshot], employee_id: int | None = None) -> list[Order]:
    """
    One Order per sale, restricted to `employee_id`'s lines when given.

    An order is pending while any line in scope is pending. Sales with no
    line in scope are skipped for the employee projection.
    """
    orders = []
    for sale in sales:
        lines = [
            line for line in sale.items
            if employee_id is None or line.employee_id == employee_id
        ]
        if employee_id is not None and not lines:
            continue

        items = tuple(
            QueueItem(item_id=line.item_id, item_name=line.item_name, qty=line.qty, status=line.status)
            for line in lines
        )
        status = "pending" if any(item.status == "pending" for item in items) else "done"
        orders.append(
            Order(
                sale_id=sale.id,
                token_number=sale.token_number,
                order_time=sale.occurred_at,
                status=status,
                items=items,
            )
        )
    return orders


def _order_key(order: Order) -> tuple:
    return (order.order_time, order.sale_id)


def employee_queue(
    sales: Sequence[SaleSnapshot],
    employee_id: int,
    completed_limit: int = 10,
) -> QueueView:
    """Pending oldest first (FIFO); the most recent completed orders newest first."""
    orders = build_orders(sales, employee_id)
    pending = sorted((o for o in orders if o.status == "pending"), key=_order_key)
    completed = sorted((o for o in orders if o.status == "done"), key=_order_key, reverse=True)
    return QueueView(
        pending=tuple(pending),
        completed=tuple(completed[:completed_limit]),
        completed_total=len(completed),
    )


def server_queue(sales: Sequence[SaleSnapshot]) -> QueueView:
    """Every order newest first, bucketed into pending and completed."""
    orders = sorted(build_orders(sales), key=_order_key, reverse=True)
    completed = tuple(o for o in orders if o.status == "done")
    return QueueView(
        pending=tuple(o for o in orders if o.status == "pending"),
        completed=completed,
        completed_total=len(completed),
    )
