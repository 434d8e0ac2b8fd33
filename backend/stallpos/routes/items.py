# backend/stallpos/routes/items.py
"""
Menu item, employee and stock log routes.

Item and employee writes go through validate_payload with a per-model
policy before reaching the catalog service.
"""
from flask import Blueprint, request, current_app

from ..errors import StallError, ValidationError
from ..models import Item, Employee
from ..services import catalog_service, stock_service
from . import error_response
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_item,
    enforce_rules_employee,
)

ITEM_POLICY = ModelValidationPolicy(
    writable_fields={
        "name",
        "price_cents",
        "cost_per_unit_cents",
        "stock_type",
        "stock_qty",
        "assigned_employee_id",
    },
    required_on_create={"name", "price_cents", "stock_type"},
)

EMPLOYEE_POLICY = ModelValidationPolicy(
    writable_fields={"username", "employee_code", "confirmation_mode"},
    required_on_create={"username"},
)

items_bp = Blueprint("items", __name__, url_prefix="/api/items")
employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")
stock_logs_bp = Blueprint("stock_logs", __name__, url_prefix="/api/stock-logs")


@items_bp.get("")
def list_items():
    return {"items": [item.to_dict() for item in catalog_service.list_items()]}


@items_bp.get("/low-stock")
def low_stock():
    threshold = request.args.get(
        "threshold", current_app.config.get("LOW_STOCK_THRESHOLD", 10), type=int
    )
    items = stock_service.low_stock_items(threshold)
    return {"threshold": threshold, "items": [item.to_dict() for item in items]}


@items_bp.get("/<int:item_id>")
def get_item(item_id: int):
    return {"item": catalog_service.get_item(item_id).to_dict()}


@items_bp.post("")
def create_item_route():
    """Create a menu item; logs its starting stock."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=False)
        enforce_rules_item(patch)
        if patch["stock_type"] == "fixed" and "stock_qty" not in patch:
            raise ValidationError("stock_qty is required for fixed stock items")
        item = catalog_service.create_item(patch)
    except StallError as e:
        return error_response(e)

    return {"item": item.to_dict()}, 201


@items_bp.put("/<int:item_id>")
def update_item_route(item_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=True)
        enforce_rules_item(patch)
        item = catalog_service.update_item(item_id, patch)
    except StallError as e:
        return error_response(e)

    return {"item": item.to_dict()}, 200


@items_bp.delete("/<int:item_id>")
def delete_item_route(item_id: int):
    catalog_service.delete_item(item_id)
    return {"ok": True}, 200


@employees_bp.get("")
def list_employees():
    return {"employees": [e.to_dict() for e in catalog_service.get_employees()]}


@employees_bp.post("")
def create_employee_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=False)
        enforce_rules_employee(patch)
        employee = catalog_service.create_employee(patch)
    except StallError as e:
        return error_response(e)

    return {"employee": employee.to_dict()}, 201


@employees_bp.put("/<int:employee_id>")
def update_employee_route(employee_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=True)
        enforce_rules_employee(patch)
        employee = catalog_service.update_employee(employee_id, patch)
    except StallError as e:
        return error_response(e)

    return {"employee": employee.to_dict()}, 200


@employees_bp.delete("/<int:employee_id>")
def delete_employee_route(employee_id: int):
    catalog_service.delete_employee(employee_id)
    return {"ok": True}, 200


@stock_logs_bp.get("")
def list_stock_logs():
    item_id = request.args.get("item_id", type=int)
    limit = request.args.get("limit", type=int)
    logs = stock_service.get_stock_logs(item_id=item_id, limit=limit)
    return {"stock_logs": [log.to_dict() for log in logs]}
