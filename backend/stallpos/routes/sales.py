# backend/stallpos/routes/sales.py
"""Sales API routes: checkout, order line status and payment settlement."""

from flask import Blueprint, request, jsonify, current_app

from ..errors import StallError
from ..services import sales_service
from . import date_range_args, error_response


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
def list_sales_route():
    date_from, date_to = date_range_args()
    sales = sales_service.get_sales(date_from, date_to)
    return jsonify({"sales": [sale.to_dict() for sale in sales]}), 200


@sales_bp.post("")
def checkout_route():
    """
    Check out a cart.

    Body: {"items": [{"item_id": 1, "qty": 2}], "payment_method": "cash",
           "credit_customer_name": null}
    """
    try:
        data = request.get_json(silent=True) or {}
        sale = sales_service.record_sale(
            data.get("items") or [],
            data.get("payment_method", "cash"),
            data.get("credit_customer_name"),
        )
        return jsonify({"sale": sale.to_dict()}), 201

    except StallError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    sale = sales_service.get_sale(sale_id)
    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.post("/<int:sale_id>/items/<int:item_id>/done")
def mark_item_done_route(sale_id: int, item_id: int):
    """Mark one order line as prepared (idempotent)."""
    try:
        sales_service.mark_item_done(sale_id, item_id)
        sale = sales_service.get_sale(sale_id)
        return jsonify({"sale": sale.to_dict()}), 200

    except StallError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to mark order item done")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.put("/<int:sale_id>/payment-method")
def set_payment_method_route(sale_id: int):
    try:
        data = request.get_json(silent=True) or {}
        method = data.get("payment_method")
        if not method:
            return jsonify({"error": "payment_method required"}), 400

        sale = sales_service.set_payment_method(sale_id, method, data.get("credit_customer_name"))
        return jsonify({"sale": sale.to_dict()}), 200

    except StallError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to change payment method")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/credit/settle")
def settle_credit_route():
    """Settle every credit sale of one customer (optionally within a date range)."""
    try:
        data = request.get_json(silent=True) or {}
        date_from, date_to = date_range_args()
        sales = sales_service.settle_credit_sales(
            data.get("customer_name"),
            data.get("payment_method", "cash"),
            date_from=date_from,
            date_to=date_to,
        )
        return jsonify({
            "settled": len(sales),
            "sale_ids": [sale.id for sale in sales],
        }), 200

    except StallError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to settle credit sales")
        return jsonify({"error": "Internal server error"}), 500
