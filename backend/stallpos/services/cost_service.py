"""
Cost ledger - individual, combined and general cost entries.

Validation is a pure function over a draft and the existing entries. The
one rule that is not a plain rejection lives in attribute_cost: an
individual cost for an item that already sits inside a combined entry is
folded into that combined entry instead of creating a new row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from flask import current_app

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import CostEntry, CostEntryItem, Item, COST_TYPES
from ..snapshots import CostEntrySnapshot
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry


@dataclass(frozen=True)
class CostEntryDraft:
    cost_type: str
    total_cost_cents: int
    item_ids: tuple[int, ...] = field(default_factory=tuple)
    common_name: str | None = None
    description: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "CostEntryDraft":
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")

        total = payload.get("total_cost_cents")
        if not isinstance(total, int) or isinstance(total, bool):
            raise ValidationError("total_cost_cents must be an integer")

        raw_ids = payload.get("item_ids") or []
        if not isinstance(raw_ids, list) or any(
            not isinstance(i, int) or isinstance(i, bool) for i in raw_ids
        ):
            raise ValidationError("item_ids must be a list of integers")

        for key in ("cost_type", "common_name", "description"):
            if payload.get(key) is not None and not isinstance(payload[key], str):
                raise ValidationError(f"{key} must be a string", details={key: payload[key]})

        return cls(
            cost_type=payload.get("cost_type") or "individual",
            total_cost_cents=total,
            item_ids=tuple(raw_ids),
            common_name=payload.get("common_name"),
            description=payload.get("description"),
        )

    def normalized(self) -> "CostEntryDraft":
        """Trim names, de-duplicate items, drop fields a cost type does not carry."""
        common_name = (self.common_name or "").strip() or None
        description = (self.description or "").strip() or None
        item_ids = tuple(dict.fromkeys(self.item_ids))

        if self.cost_type == "general":
            item_ids = ()
        if self.cost_type == "individual":
            common_name = None

        return CostEntryDraft(
            cost_type=self.cost_type,
            total_cost_cents=self.total_cost_cents,
            item_ids=item_ids,
            common_name=common_name,
            description=description,
        )


@dataclass(frozen=True)
class CostCreated:
    entry: CostEntry
    result: str = "created"


@dataclass(frozen=True)
class CostMerged:
    entry: CostEntry
    added_cents: int
    result: str = "merged"


def _items_of_type(entries: Iterable[CostEntrySnapshot], cost_type: str, exclude_id: int | None) -> set[int]:
    ids: set[int] = set()
    for entry in entries:
        if entry.cost_type == cost_type and entry.id != exclude_id:
            ids.update(entry.item_ids)
    return ids


def find_combined_entry(item_id: int, entries: Iterable[CostEntrySnapshot]) -> CostEntrySnapshot | None:
    """First combined entry whose item set contains `item_id`."""
    for entry in entries:
        if entry.cost_type == "combined" and item_id in entry.item_ids:
            return entry
    return None


def validate_cost_entry(
    draft: CostEntryDraft,
    existing: Sequence[CostEntrySnapshot],
    editing_id: int | None = None,
) -> ValidationError | None:
    """
    Check a draft against the ledger. Returns the error instead of raising.

    An individual draft for an item inside a combined entry is valid here:
    attribute_cost redirects it.
    """
    draft = draft.normalized()
    editing = editing_id is not None

    if draft.cost_type not in COST_TYPES:
        return ValidationError(f"cost_type must be one of: {', '.join(COST_TYPES)}")

    if draft.total_cost_cents < 0:
        return ValidationError("total_cost_cents must be >= 0")

    if draft.cost_type == "general":
        if not draft.common_name:
            return ValidationError("Please enter a name for this general cost.")
        return None

    if len(draft.item_ids) < 1:
        return ValidationError("Please select at least one item.")

    if draft.cost_type == "combined":
        if len(draft.item_ids) < 2:
            return ValidationError("Please select at least 2 items for a combined cost.")
        if not draft.common_name:
            return ValidationError("Please enter a common name for combined costs.")

        if not editing:
            with_individual = _items_of_type(existing, "individual", None)
            conflicts = [item_id for item_id in draft.item_ids if item_id in with_individual]
            if conflicts:
                return ValidationError(
                    "Cannot combine items that already have individual costs. "
                    "Delete those cost entries first.",
                    details={"item_ids": conflicts},
                )

            in_combined = _items_of_type(existing, "combined", None)
            already = [item_id for item_id in draft.item_ids if item_id in in_combined]
            if already:
                return ValidationError(
                    "Items already belong to a combined cost.",
                    details={"item_ids": already},
                )

    if draft.cost_type == "individual" and len(draft.item_ids) != 1:
        return ValidationError(
            'Individual costs can only be for one item. Select "combined" for multiple items.'
        )

    return None


# =============================================================================
# Persistence
# =============================================================================

def list_cost_entries() -> list[CostEntry]:
    return (
        db.session.query(CostEntry)
        .order_by(CostEntry.occurred_at.desc(), CostEntry.id.desc())
        .all()
    )


def get_cost_entry(entry_id: int) -> CostEntry:
    entry = db.session.get(CostEntry, entry_id)
    if entry is None:
        raise NotFoundError("Cost entry not found", details={"cost_entry_id": entry_id})
    return entry


def _snapshots() -> list[CostEntrySnapshot]:
    return [entry.to_snapshot() for entry in list_cost_entries()]


def _require_items(item_ids: Sequence[int]) -> None:
    if not item_ids:
        return
    found = {row.id for row in db.session.query(Item.id).filter(Item.id.in_(item_ids)).all()}
    missing = [item_id for item_id in item_ids if item_id not in found]
    if missing:
        raise NotFoundError("Item not found", details={"item_ids": missing})


def _raise_if_invalid(draft: CostEntryDraft, existing: Sequence[CostEntrySnapshot], editing_id: int | None) -> None:
    error = validate_cost_entry(draft, existing, editing_id)
    if error is not None:
        raise error


def _set_items(entry: CostEntry, item_ids: Sequence[int]) -> None:
    # Keep surviving rows so the (entry, item) unique constraint never sees a re-insert.
    wanted = set(item_ids)
    entry.item_links = [link for link in entry.item_links if link.item_id in wanted]
    present = {link.item_id for link in entry.item_links}
    for item_id in item_ids:
        if item_id not in present:
            entry.item_links.append(CostEntryItem(item_id=item_id))


def attribute_cost(draft: CostEntryDraft) -> CostCreated | CostMerged:
    """
    Record a new cost.

    Returns CostMerged when an individual cost targets an item that already
    belongs to a combined entry: the amount is added to that entry's total
    and the description appended. Otherwise a new entry is created.
    """
    draft = draft.normalized()

    def _op():
        existing = _snapshots()
        _raise_if_invalid(draft, existing, None)
        _require_items(draft.item_ids)

        if draft.cost_type == "individual":
            target = find_combined_entry(draft.item_ids[0], existing)
            if target is not None:
                entry = lock_for_update(db.session.query(CostEntry).filter_by(id=target.id)).first()
                entry.total_cost_cents += draft.total_cost_cents
                if entry.description:
                    entry.description = f"{entry.description}, {draft.description or 'Added cost'}"
                else:
                    entry.description = draft.description
                db.session.commit()
                current_app.logger.info(
                    "Merged %s cents for item %s into combined cost id=%s (%s)",
                    draft.total_cost_cents, draft.item_ids[0], entry.id, entry.common_name,
                )
                return CostMerged(entry=entry, added_cents=draft.total_cost_cents)

        entry = CostEntry(
            cost_type=draft.cost_type,
            total_cost_cents=draft.total_cost_cents,
            description=draft.description,
            common_name=draft.common_name,
            occurred_at=utcnow(),
        )
        _set_items(entry, draft.item_ids)
        db.session.add(entry)
        db.session.commit()
        return CostCreated(entry=entry)

    return run_with_retry(_op)


def add_cost_entry(draft: CostEntryDraft) -> CostEntry:
    return attribute_cost(draft).entry


def update_cost_entry(entry_id: int, draft: CostEntryDraft) -> CostEntry:
    """Replace an entry's fields and item set (cross-type checks are skipped when editing)."""
    draft = draft.normalized()

    def _op():
        entry = get_cost_entry(entry_id)
        _raise_if_invalid(draft, _snapshots(), entry.id)
        _require_items(draft.item_ids)

        entry.cost_type = draft.cost_type
        entry.total_cost_cents = draft.total_cost_cents
        entry.description = draft.description
        entry.common_name = draft.common_name
        _set_items(entry, draft.item_ids)
        db.session.commit()
        return entry

    return run_with_retry(_op)


def delete_cost_entry(entry_id: int) -> None:
    """Remove an entry; items and sales are untouched."""
    def _op():
        entry = get_cost_entry(entry_id)
        db.session.delete(entry)
        db.session.commit()

    run_with_retry(_op)


def cost_overview(entries: Sequence[CostEntrySnapshot], sales: Sequence) -> dict:
    """Ledger-wide totals: every recorded cost against every recorded sale."""
    total_cost = sum(entry.total_cost_cents for entry in entries)
    total_revenue = sum(sale.total_amount_cents for sale in sales)
    profit = total_revenue - total_cost
    margin = (profit / total_revenue * 100.0) if total_revenue > 0 else 0.0
    return {
        "total_cost_cents": total_cost,
        "total_revenue_cents": total_revenue,
        "profit_cents": profit,
        "margin_pct": round(margin, 1),
        "entry_count": len(entries),
    }
