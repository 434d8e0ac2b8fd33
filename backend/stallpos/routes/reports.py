from flask import Blueprint, jsonify, request

from ..errors import ValidationError
from ..services import reporting_service
from ..time_utils import parse_iso_date
from . import date_range_args


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/profit-loss")
def profit_loss():
    date_from, date_to = date_range_args()
    report = reporting_service.generate_profit_loss(date_from, date_to)
    return jsonify(report.to_dict()), 200


@reports_bp.get("/sales-summary")
def sales_summary():
    date_from, date_to = date_range_args()
    return jsonify(reporting_service.generate_sales_summary(date_from, date_to)), 200


@reports_bp.get("/dashboard")
def dashboard():
    try:
        today = parse_iso_date(request.args.get("date"))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")
    return jsonify(reporting_service.generate_dashboard(today)), 200
