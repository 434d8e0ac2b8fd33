from flask import Blueprint, jsonify, current_app

from ..services import catalog_service, queue_service, sales_service


queues_bp = Blueprint("queues", __name__, url_prefix="/api/queues")


def _sales_snapshot():
    return [sale.to_snapshot() for sale in sales_service.get_sales()]


@queues_bp.get("/employees/<int:employee_id>")
def employee_queue(employee_id: int):
    catalog_service.get_employee(employee_id)
    view = queue_service.employee_queue(
        _sales_snapshot(),
        employee_id,
        completed_limit=current_app.config.get("COMPLETED_ORDERS_LIMIT", 10),
    )
    return jsonify({"employee_id": employee_id, **view.to_dict()}), 200


@queues_bp.get("/server")
def server_queue():
    view = queue_service.server_queue(_sales_snapshot())
    return jsonify(view.to_dict()), 200
