from flask import Blueprint, jsonify, request, current_app

from ..errors import StallError
from ..services import cost_service, sales_service
from ..services.cost_service import CostEntryDraft, CostMerged
from . import error_response


costs_bp = Blueprint("costs", __name__, url_prefix="/api/costs")


@costs_bp.get("")
def list_costs():
    entries = cost_service.list_cost_entries()
    return jsonify({"cost_entries": [entry.to_dict() for entry in entries]}), 200


@costs_bp.get("/overview")
def cost_overview():
    entries = [entry.to_snapshot() for entry in cost_service.list_cost_entries()]
    sales = [sale.to_snapshot() for sale in sales_service.get_sales()]
    return jsonify(cost_service.cost_overview(entries, sales)), 200


@costs_bp.post("")
def add_cost():
    """
    Record a cost.

    201 {"result": "created"} for a new entry, 200 {"result": "merged"} when
    an individual cost was folded into an existing combined entry.
    """
    try:
        draft = CostEntryDraft.from_payload(request.get_json(silent=True))
        outcome = cost_service.attribute_cost(draft)
    except StallError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to add cost entry")
        return jsonify({"error": "Internal server error"}), 500

    body = {"result": outcome.result, "cost_entry": outcome.entry.to_dict()}
    if isinstance(outcome, CostMerged):
        body["added_cents"] = outcome.added_cents
        return jsonify(body), 200
    return jsonify(body), 201


@costs_bp.put("/<int:entry_id>")
def update_cost(entry_id: int):
    try:
        draft = CostEntryDraft.from_payload(request.get_json(silent=True))
        entry = cost_service.update_cost_entry(entry_id, draft)
    except StallError as exc:
        return error_response(exc)
    return jsonify({"cost_entry": entry.to_dict()}), 200


@costs_bp.delete("/<int:entry_id>")
def delete_cost(entry_id: int):
    try:
        cost_service.delete_cost_entry(entry_id)
    except StallError as exc:
        return error_response(exc)
    return jsonify({"ok": True}), 200
