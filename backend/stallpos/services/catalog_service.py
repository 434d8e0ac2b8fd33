# Overview: Menu items and employees; admin CRUD with stock audit side effects.

from __future__ import annotations

from flask import current_app

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Employee, Item
from . import stock_service
from .concurrency import run_with_retry


def _unlimited_qty() -> int:
    return current_app.config.get("UNLIMITED_STOCK_QTY", 9999)


def _require_employee(employee_id: int | None) -> None:
    if employee_id is None:
        return
    if db.session.get(Employee, employee_id) is None:
        raise NotFoundError("Employee not found", details={"employee_id": employee_id})


# =============================================================================
# Items
# =============================================================================

def list_items() -> list[Item]:
    return db.session.query(Item).order_by(Item.created_at.asc(), Item.id.asc()).all()


def get_item(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if item is None:
        raise NotFoundError("Item not found", details={"item_id": item_id})
    return item


def apply_item_patch(item: Item, patch: dict) -> None:
    for key, value in patch.items():
        setattr(item, key, value)
    if item.stock_type == "unlimited":
        item.stock_qty = _unlimited_qty()


def create_item(patch: dict) -> Item:
    """
    Create a menu item and log its starting stock (reason=initial).

    Expects a patch already run through validate_payload/enforce_rules_item.
    """
    def _op():
        _require_employee(patch.get("assigned_employee_id"))

        item = Item()
        item.stock_type = patch.get("stock_type", "fixed")
        item.stock_qty = 0
        apply_item_patch(item, patch)

        db.session.add(item)
        db.session.flush()

        stock_service.append_stock_log(item_id=item.id, change=item.stock_qty, reason="initial")

        db.session.commit()
        return item

    return run_with_retry(_op)


def update_item(item_id: int, patch: dict) -> Item:
    """
    Update a menu item; a stock quantity change is logged as admin_update.

    Existing sales keep their price/cost snapshots.
    """
    def _op():
        item = get_item(item_id)
        if "assigned_employee_id" in patch:
            _require_employee(patch["assigned_employee_id"])

        if item.stock_type == "unlimited" and patch.get("stock_type") == "fixed" and patch.get("stock_qty") is None:
            raise ValidationError(
                "stock_qty is required when switching an item to fixed stock",
                details={"item_id": item.id},
            )

        old_qty = item.stock_qty
        apply_item_patch(item, patch)

        if item.stock_qty != old_qty:
            stock_service.append_stock_log(
                item_id=item.id,
                change=item.stock_qty - old_qty,
                reason="admin_update",
            )

        db.session.commit()
        return item

    return run_with_retry(_op)


def delete_item(item_id: int) -> None:
    """
    Hard-delete an item.

    Sales keep their snapshots and cost entries keep their item references,
    which simply stop matching a catalog row.
    """
    def _op():
        item = get_item(item_id)
        db.session.delete(item)
        db.session.commit()

    run_with_retry(_op)


# =============================================================================
# Employees
# =============================================================================

def get_employees() -> list[Employee]:
    return db.session.query(Employee).order_by(Employee.created_at.asc(), Employee.id.asc()).all()


def get_employee(employee_id: int) -> Employee:
    employee = db.session.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found", details={"employee_id": employee_id})
    return employee


def confirmation_modes() -> dict[int, str]:
    """employee_id -> confirmation_mode, used to seed order line status."""
    rows = db.session.query(Employee.id, Employee.confirmation_mode).all()
    return {row.id: row.confirmation_mode for row in rows}


def _ensure_username_free(username: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Employee).filter(Employee.username == username)
    if exclude_id is not None:
        query = query.filter(Employee.id != exclude_id)
    if query.first() is not None:
        raise ValidationError("Username already exists", details={"username": username})


def create_employee(patch: dict) -> Employee:
    def _op():
        _ensure_username_free(patch["username"])
        employee = Employee(**patch)
        if not employee.employee_code:
            employee.employee_code = employee.username
        if not employee.confirmation_mode:
            employee.confirmation_mode = "manual"
        db.session.add(employee)
        db.session.commit()
        return employee

    return run_with_retry(_op)


def update_employee(employee_id: int, patch: dict) -> Employee:
    def _op():
        employee = get_employee(employee_id)
        if "username" in patch and patch["username"] != employee.username:
            _ensure_username_free(patch["username"], exclude_id=employee.id)
        for key, value in patch.items():
            setattr(employee, key, value)
        db.session.commit()
        return employee

    return run_with_retry(_op)


def delete_employee(employee_id: int) -> None:
    """
    Delete an employee and unassign their items.

    Past order lines keep the employee_id snapshot.
    """
    def _op():
        employee = get_employee(employee_id)
        for item in db.session.query(Item).filter(Item.assigned_employee_id == employee.id).all():
            item.assigned_employee_id = None
        db.session.delete(employee)
        db.session.commit()

    run_with_retry(_op)
