from __future__ import annotations

from ..extensions import db
from ..snapshots import ItemSnapshot
from ..time_utils import to_utc_z

STOCK_TYPES = ("fixed", "unlimited")
CONFIRMATION_MODES = ("manual", "auto")
STOCK_LOG_REASONS = ("initial", "sale", "admin_update")


class Employee(db.Model):
    """
    Kitchen/counter worker that order lines are routed to.

    confirmation_mode="auto" means lines assigned to this employee are
    recorded as already done at checkout (nothing to prepare).
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.UniqueConstraint("username", name="uq_employees_username"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False)
    employee_code = db.Column(db.String(32), nullable=False, default="")
    confirmation_mode = db.Column(db.String(16), nullable=False, default="manual")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Employee id={self.id} username={self.username!r} mode={self.confirmation_mode}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "employee_code": self.employee_code,
            "confirmation_mode": self.confirmation_mode,
            "created_at": to_utc_z(self.created_at),
        }


class Item(db.Model):
    """
    Menu item.

    STOCK: stock_qty is only meaningful for stock_type="fixed"; unlimited
    items carry the configured sentinel quantity and are never decremented.
    Price and cost are copied onto order lines at checkout, so later edits
    here never rewrite history.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.Index("ix_items_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False, default=0)
    cost_per_unit_cents = db.Column(db.Integer, nullable=False, default=0)

    stock_type = db.Column(db.String(16), nullable=False, default="fixed")
    stock_qty = db.Column(db.Integer, nullable=False, default=0)

    # Soft reference: routing target for order lines
    assigned_employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True, index=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    assigned_employee = db.relationship("Employee", backref=db.backref("items", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r} stock_type={self.stock_type}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price_cents": self.price_cents,
            "cost_per_unit_cents": self.cost_per_unit_cents,
            "stock_type": self.stock_type,
            "stock_qty": self.stock_qty,
            "assigned_employee_id": self.assigned_employee_id,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_snapshot(self) -> ItemSnapshot:
        return ItemSnapshot(
            id=self.id,
            name=self.name,
            price_cents=self.price_cents,
            stock_type=self.stock_type,
            stock_qty=self.stock_qty,
            assigned_employee_id=self.assigned_employee_id,
            cost_per_unit_cents=self.cost_per_unit_cents,
        )


class StockLog(db.Model):
    """
    Append-only audit trail of stock quantity changes.

    REASONS:
    - initial: item created (change = starting quantity)
    - sale: fixed-stock item sold (change = -qty)
    - admin_update: quantity edited by an admin (change = new - old)

    IMMUTABLE: Records are never updated or deleted. item_id is a soft
    reference so logs outlive deleted items.
    """
    __tablename__ = "stock_logs"
    __table_args__ = (
        db.Index("ix_stock_logs_item_occurred", "item_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, nullable=False, index=True)
    change = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(16), nullable=False, index=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "change": self.change,
            "reason": self.reason,
            "occurred_at": to_utc_z(self.occurred_at),
        }
