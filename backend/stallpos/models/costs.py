from __future__ import annotations

from ..extensions import db
from ..snapshots import CostEntrySnapshot
from ..time_utils import to_utc_z

COST_TYPES = ("individual", "combined", "general")


class CostEntry(db.Model):
    """
    Ingredient / operational cost.

    COST TYPES:
    - individual: exactly one item; several entries per item simply add up
    - combined: two or more items sharing one cost pool, shown under common_name
    - general: no items (rent, gas, ...), shown under common_name, never
      attributed to an item's sales
    """
    __tablename__ = "cost_entries"
    __table_args__ = (
        db.Index("ix_cost_entries_type", "cost_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cost_type = db.Column(db.String(16), nullable=False)
    total_cost_cents = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text, nullable=True)
    common_name = db.Column(db.String(255), nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    item_links = db.relationship(
        "CostEntryItem",
        backref="cost_entry",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="CostEntryItem.id",
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def item_ids(self) -> list[int]:
        return [link.item_id for link in self.item_links]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cost_type": self.cost_type,
            "item_ids": self.item_ids,
            "total_cost_cents": self.total_cost_cents,
            "description": self.description,
            "common_name": self.common_name,
            "occurred_at": to_utc_z(self.occurred_at),
            "version_id": self.version_id,
        }

    def to_snapshot(self) -> CostEntrySnapshot:
        return CostEntrySnapshot(
            id=self.id,
            cost_type=self.cost_type,
            total_cost_cents=self.total_cost_cents,
            item_ids=tuple(self.item_ids),
            common_name=self.common_name,
            description=self.description,
            occurred_at=self.occurred_at,
        )


class CostEntryItem(db.Model):
    """Item membership of a cost entry (item_id is a soft reference)."""
    __tablename__ = "cost_entry_items"
    __table_args__ = (
        db.UniqueConstraint("cost_entry_id", "item_id", name="uq_cost_entry_items_entry_item"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cost_entry_id = db.Column(db.Integer, db.ForeignKey("cost_entries.id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, nullable=False, index=True)
