from __future__ import annotations

from ..extensions import db
from ..snapshots import OrderItemSnapshot, SaleSnapshot
from ..time_utils import to_utc_z

PAYMENT_METHODS = ("cash", "upi", "credit")
ORDER_ITEM_STATUSES = ("pending", "done")


class Sale(db.Model):
    """
    Completed checkout (append-only, never deleted).

    TOKENS: token_number is unique per business_date and allocated from
    TokenSequence in the same transaction as the insert, so tokens for a
    day are always 1..n with no gaps.

    MUTABLE FIELDS: only payment_method / credit_customer_name (credit
    settlement) and the status of individual order lines.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.UniqueConstraint("business_date", "token_number", name="uq_sales_day_token"),
        db.Index("ix_sales_occurred_at", "occurred_at"),
        db.Index("ix_sales_payment_customer", "payment_method", "credit_customer_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False)
    # Stall-local calendar day the token belongs to
    business_date = db.Column(db.Date, nullable=False, index=True)
    token_number = db.Column(db.Integer, nullable=False)

    total_amount_cents = db.Column(db.Integer, nullable=False)
    total_cost_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    credit_customer_name = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order_items = db.relationship(
        "OrderItem",
        backref="sale",
        lazy=True,
        order_by="OrderItem.line_number",
    )

    @property
    def status(self) -> str:
        return "pending" if any(line.status == "pending" for line in self.order_items) else "done"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "occurred_at": to_utc_z(self.occurred_at),
            "business_date": self.business_date.isoformat(),
            "token_number": self.token_number,
            "items": [line.to_dict() for line in self.order_items],
            "total_amount_cents": self.total_amount_cents,
            "total_cost_cents": self.total_cost_cents,
            "payment_method": self.payment_method,
            "credit_customer_name": self.credit_customer_name,
            "status": self.status,
        }

    def to_snapshot(self) -> SaleSnapshot:
        return SaleSnapshot(
            id=self.id,
            occurred_at=self.occurred_at,
            token_number=self.token_number,
            items=tuple(line.to_snapshot() for line in self.order_items),
            total_amount_cents=self.total_amount_cents,
            total_cost_cents=self.total_cost_cents,
            payment_method=self.payment_method,
            credit_customer_name=self.credit_customer_name,
        )


class OrderItem(db.Model):
    """
    Line on a sale.

    item_name / price_cents / cost_cents / employee_id are snapshots taken at
    checkout. item_id is a soft reference: the item may be deleted later.
    status moves pending -> done only.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        db.UniqueConstraint("sale_id", "item_id", name="uq_order_items_sale_item"),
        db.Index("ix_order_items_employee_status", "employee_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    line_number = db.Column(db.Integer, nullable=False)

    item_id = db.Column(db.Integer, nullable=False, index=True)
    item_name = db.Column(db.String(255), nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    cost_cents = db.Column(db.Integer, nullable=False)

    employee_id = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="pending")
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "qty": self.qty,
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "employee_id": self.employee_id,
            "status": self.status,
            "completed_at": to_utc_z(self.completed_at) if self.completed_at else None,
        }

    def to_snapshot(self) -> OrderItemSnapshot:
        return OrderItemSnapshot(
            item_id=self.item_id,
            item_name=self.item_name,
            qty=self.qty,
            price_cents=self.price_cents,
            cost_cents=self.cost_cents,
            employee_id=self.employee_id,
            status=self.status,
        )


class TokenSequence(db.Model):
    """
    Atomic per-day token counter.

    The counter row is incremented inside the checkout transaction, so
    concurrent checkouts on the same day never share a token.
    """
    __tablename__ = "token_sequences"
    __table_args__ = (
        db.UniqueConstraint("business_date", name="uq_token_sequences_day"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_date = db.Column(db.Date, nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_date": self.business_date.isoformat(),
            "next_number": self.next_number,
            "updated_at": to_utc_z(self.updated_at),
        }
