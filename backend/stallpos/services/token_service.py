# Overview: Per-day token number allocation for checkouts.

from __future__ import annotations

from datetime import date

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import TokenSequence


def _increment(business_date: date) -> int | None:
    stmt = (
        update(TokenSequence)
        .where(TokenSequence.business_date == business_date)
        .values(next_number=TokenSequence.next_number + 1)
    )
    result = db.session.execute(stmt)
    if not result.rowcount:
        return None
    db.session.flush()
    current = (
        db.session.query(TokenSequence.next_number)
        .filter_by(business_date=business_date)
        .scalar()
    )
    return current - 1


def next_token_number(business_date: date) -> int:
    """
    Allocate the next token for `business_date` inside the caller's transaction.

    The caller must commit the sale in the same transaction: a rollback
    returns the number to the pool, which keeps a day's tokens gapless.
    The first checkout of a day creates the counter row; a concurrent
    creator losing the unique-constraint race falls back to incrementing.
    """
    token = _increment(business_date)
    if token is not None:
        return token

    if db.engine.dialect.name == "sqlite":
        # Writers are already serialized by BEGIN IMMEDIATE; no race to lose.
        db.session.add(TokenSequence(business_date=business_date, next_number=2))
        db.session.flush()
        return 1

    try:
        with db.session.begin_nested():
            db.session.add(TokenSequence(business_date=business_date, next_number=2))
        return 1
    except IntegrityError:
        token = _increment(business_date)
        if token is None:
            raise
        return token


def peek_next_token_number(business_date: date) -> int:
    """Token the next checkout of `business_date` would receive (read-only)."""
    current = (
        db.session.query(TokenSequence.next_number)
        .filter_by(business_date=business_date)
        .scalar()
    )
    return current or 1
