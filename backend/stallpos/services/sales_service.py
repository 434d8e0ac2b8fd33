"""
Sale ledger - checkout, order line status and payment settlement.

Checkout is one transaction: token allocation, sale + order lines and the
stock decrement of fixed items commit together or not at all. The stock
audit log is written afterwards on a best-effort basis; a failure there
never undoes a sale that has already been handed a token.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Sale, OrderItem, Item, PAYMENT_METHODS
from ..time_utils import utcnow, business_date
from . import catalog_service, stock_service, token_service
from .concurrency import begin_serialized_write, lock_for_update, run_with_retry


def _stall_timezone() -> str:
    return current_app.config.get("STALL_TIMEZONE", "UTC")


def _normalize_cart(cart_lines: Iterable) -> list[tuple[int, int]]:
    """
    Accept (item_id, qty) pairs or {"item_id", "qty"} mappings.

    Repeated item ids are merged, keeping first-seen order.
    """
    merged: dict[int, int] = {}
    for raw in cart_lines or []:
        if isinstance(raw, dict):
            item_id, qty = raw.get("item_id"), raw.get("qty")
        else:
            try:
                item_id, qty = raw
            except (TypeError, ValueError):
                raise ValidationError("Cart lines must be (item_id, qty) pairs")

        if not isinstance(item_id, int) or isinstance(item_id, bool):
            raise ValidationError("item_id must be an integer", details={"item_id": item_id})
        if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
            raise ValidationError("qty must be a positive integer", details={"item_id": item_id, "qty": qty})

        merged[item_id] = merged.get(item_id, 0) + qty

    if not merged:
        raise ValidationError("Cart is empty")
    return list(merged.items())


def _validate_payment(method: str, credit_customer_name: str | None) -> tuple[str, str | None]:
    if method not in PAYMENT_METHODS:
        raise ValidationError(
            f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}",
            details={"payment_method": method},
        )
    if method != "credit":
        return method, None

    name = (credit_customer_name or "").strip()
    if not name:
        raise ValidationError("Customer name is required for credit sales")
    return method, name


def record_sale(
    cart_lines: Iterable,
    payment_method: str,
    credit_customer_name: str | None = None,
    *,
    occurred_at: datetime | None = None,
) -> Sale:
    """
    Check out a cart.

    - Prices and costs are snapshotted from the current items.
    - Each line is routed to the item's assigned employee; lines for an
      employee in "auto" confirmation mode start out done.
    - Fixed-stock items are decremented (floored at 0).
    - token_number is the next number for the sale's business day.
    """
    lines = _normalize_cart(cart_lines)
    method, customer = _validate_payment(payment_method, credit_customer_name)
    occurred_at = occurred_at or utcnow()
    day = business_date(occurred_at, _stall_timezone())

    def _op():
        begin_serialized_write()

        item_ids = [item_id for item_id, _ in lines]
        items = {
            item.id: item
            for item in lock_for_update(db.session.query(Item).filter(Item.id.in_(item_ids))).all()
        }
        missing = [item_id for item_id in item_ids if item_id not in items]
        if missing:
            raise NotFoundError("Item not found", details={"item_ids": missing})

        modes = catalog_service.confirmation_modes()
        token = token_service.next_token_number(day)

        sale = Sale(
            occurred_at=occurred_at,
            business_date=day,
            token_number=token,
            payment_method=method,
            credit_customer_name=customer,
            total_amount_cents=0,
            total_cost_cents=0,
        )

        stock_changes: list[tuple[int, int]] = []
        for line_number, (item_id, qty) in enumerate(lines, start=1):
            item = items[item_id]
            done = modes.get(item.assigned_employee_id) == "auto"
            sale.order_items.append(
                OrderItem(
                    line_number=line_number,
                    item_id=item.id,
                    item_name=item.name,
                    qty=qty,
                    price_cents=item.price_cents,
                    cost_cents=item.cost_per_unit_cents,
                    employee_id=item.assigned_employee_id,
                    status="done" if done else "pending",
                    completed_at=occurred_at if done else None,
                )
            )
            sale.total_amount_cents += item.price_cents * qty
            sale.total_cost_cents += item.cost_per_unit_cents * qty

            if item.stock_type == "fixed":
                item.stock_qty = max(0, item.stock_qty - qty)
                stock_changes.append((item.id, -qty))

        db.session.add(sale)
        db.session.commit()
        return sale, stock_changes

    sale, stock_changes = run_with_retry(_op)
    current_app.logger.info(
        "Recorded sale id=%s token=%s business_date=%s total_cents=%s",
        sale.id, sale.token_number, day.isoformat(), sale.total_amount_cents,
    )
    _log_sale_stock(sale.id, stock_changes, occurred_at)
    return sale


def _log_sale_stock(sale_id: int, stock_changes: list[tuple[int, int]], occurred_at: datetime) -> None:
    """Best-effort stock audit for a committed sale."""
    if not stock_changes:
        return
    try:
        for item_id, change in stock_changes:
            stock_service.append_stock_log(
                item_id=item_id,
                change=change,
                reason="sale",
                occurred_at=occurred_at,
            )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning(
            "Stock log write failed for sale id=%s; sale stands", sale_id, exc_info=True,
        )


def get_sale(sale_id: int) -> Sale:
    sale = (
        db.session.query(Sale)
        .options(selectinload(Sale.order_items))
        .filter(Sale.id == sale_id)
        .first()
    )
    if sale is None:
        raise NotFoundError("Sale not found", details={"sale_id": sale_id})
    return sale


def get_sales(date_from: date | None = None, date_to: date | None = None) -> list[Sale]:
    """Sales newest first, optionally limited to an inclusive business-day range."""
    query = db.session.query(Sale).options(selectinload(Sale.order_items))
    if date_from:
        query = query.filter(Sale.business_date >= date_from)
    if date_to:
        query = query.filter(Sale.business_date <= date_to)
    return query.order_by(Sale.occurred_at.desc(), Sale.id.desc()).all()


def mark_item_done(sale_id: int, item_id: int) -> OrderItem:
    """
    Move an order line from pending to done.

    Idempotent: a line that is already done is left untouched. There is no
    transition back to pending.
    """
    def _op():
        sale = db.session.get(Sale, sale_id)
        if sale is None:
            raise NotFoundError("Sale not found", details={"sale_id": sale_id})

        line = lock_for_update(
            db.session.query(OrderItem).filter_by(sale_id=sale_id, item_id=item_id)
        ).first()
        if line is None:
            raise NotFoundError(
                "Order item not found",
                details={"sale_id": sale_id, "item_id": item_id},
            )

        if line.status != "done":
            line.status = "done"
            line.completed_at = utcnow()
            db.session.commit()
        return line

    return run_with_retry(_op)


def set_payment_method(sale_id: int, method: str, credit_customer_name: str | None = None) -> Sale:
    """
    Change how a sale was paid.

    Moving away from credit (settlement) clears the customer name; moving
    to credit requires one. Totals and lines are never touched.
    """
    method, customer = _validate_payment(method, credit_customer_name)

    def _op():
        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if sale is None:
            raise NotFoundError("Sale not found", details={"sale_id": sale_id})

        if method == sale.payment_method and method != "credit":
            return sale

        sale.payment_method = method
        sale.credit_customer_name = customer
        db.session.commit()
        return sale

    return run_with_retry(_op)


def settle_credit_sales(
    customer_name: str,
    method: str,
    *,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[Sale]:
    """Mark every outstanding credit sale of one customer as paid by cash/upi."""
    name = (customer_name or "").strip()
    if not name:
        raise ValidationError("customer_name is required")
    if method not in ("cash", "upi"):
        raise ValidationError("Credit can only be settled with cash or upi", details={"payment_method": method})

    def _op():
        query = db.session.query(Sale).filter(
            Sale.payment_method == "credit",
            Sale.credit_customer_name == name,
        )
        if date_from:
            query = query.filter(Sale.business_date >= date_from)
        if date_to:
            query = query.filter(Sale.business_date <= date_to)

        sales = lock_for_update(query.order_by(Sale.occurred_at.asc(), Sale.id.asc())).all()
        for sale in sales:
            sale.payment_method = method
            sale.credit_customer_name = None
        db.session.commit()
        return sales

    return run_with_retry(_op)
