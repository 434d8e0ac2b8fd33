from __future__ import annotations

from datetime import date

from flask import current_app, jsonify, request

from ..errors import StallError, ValidationError
from ..time_utils import parse_iso_date


def date_range_args() -> tuple[date | None, date | None]:
    """Read ?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD (both optional, inclusive)."""
    try:
        date_from = parse_iso_date(request.args.get("date_from"))
        date_to = parse_iso_date(request.args.get("date_to"))
    except ValueError:
        raise ValidationError("date_from/date_to must be YYYY-MM-DD")
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")
    return date_from, date_to


def error_response(error: StallError):
    """Log a service error and turn it into its JSON response."""
    if error.status_code >= 500:
        current_app.logger.error("%s %s failed: %s", request.method, request.path, error)
    else:
        current_app.logger.info(
            "%s %s rejected (%s): %s", request.method, request.path, error.status_code, error,
        )
    return jsonify(error.to_dict()), error.status_code
