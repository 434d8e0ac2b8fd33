# Overview: Stock audit trail; append-only StockLog writes and reads.

from __future__ import annotations

from datetime import datetime

from ..errors import ValidationError
from ..extensions import db
from ..models import StockLog, Item, STOCK_LOG_REASONS
from ..time_utils import utcnow


def append_stock_log(
    *,
    item_id: int,
    change: int,
    reason: str,
    occurred_at: datetime | None = None,
) -> StockLog:
    """
    Stage an append-only stock log row in the current session.

    The caller decides when to commit.
    """
    if reason not in STOCK_LOG_REASONS:
        raise ValidationError(f"reason must be one of: {', '.join(STOCK_LOG_REASONS)}")

    log = StockLog(
        item_id=item_id,
        change=change,
        reason=reason,
        occurred_at=occurred_at or utcnow(),
    )
    db.session.add(log)
    return log


def get_stock_logs(item_id: int | None = None, limit: int | None = None) -> list[StockLog]:
    query = db.session.query(StockLog).order_by(StockLog.occurred_at.desc(), StockLog.id.desc())
    if item_id is not None:
        query = query.filter(StockLog.item_id == item_id)
    if limit:
        query = query.limit(limit)
    return query.all()


def low_stock_items(threshold: int) -> list[Item]:
    """Fixed-stock items with fewer than `threshold` units left."""
    return (
        db.session.query(Item)
        .filter(Item.stock_type == "fixed", Item.stock_qty < threshold)
        .order_by(Item.stock_qty.asc(), Item.name.asc())
        .all()
    )
