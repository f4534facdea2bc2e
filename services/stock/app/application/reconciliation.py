"""
Inventory-delta reconciliation engine.

``expand`` turns a set of line items into signed per-part deltas, expanding
products through their bill-of-materials. ``summarize`` lays those deltas
over a stock snapshot and yields one before/change/after record for every
part in the snapshot. Both are pure functions: no I/O, no logging, and the
catalog and snapshot passed in are never modified.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from app.domain.catalog import Catalog
from app.domain.errors import ResolutionError, SnapshotMismatchError
from app.domain.line_items import Direction, LineItem


@dataclass(frozen=True)
class PartReconciliationRecord:
    part_id: str
    name: str
    quantity_before: int
    quantity_change: int

    @property
    def quantity_after(self) -> int:
        return self.quantity_before + self.quantity_change

    @property
    def is_negative(self) -> bool:
        return self.quantity_after < 0

    def to_dict(self) -> dict:
        return {
            "part_id": self.part_id,
            "name": self.name,
            "quantity_before": self.quantity_before,
            "quantity_change": self.quantity_change,
            "quantity_after": self.quantity_after,
        }


@dataclass(frozen=True)
class ReconciliationSummary:
    records: Tuple[PartReconciliationRecord, ...]

    def __iter__(self):
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def any_negative(self) -> bool:
        """True when at least one record would leave its part below zero"""
        return any(record.is_negative for record in self.records)

    def negative_parts(self) -> Tuple[PartReconciliationRecord, ...]:
        return tuple(record for record in self.records if record.is_negative)

    def touched_parts(self) -> Tuple[PartReconciliationRecord, ...]:
        return tuple(record for record in self.records if record.quantity_change != 0)

    def to_dict(self) -> dict:
        return {
            "records": [record.to_dict() for record in self.records],
            "any_negative": self.any_negative,
        }


def expand(line_items: Iterable[LineItem], catalog: Catalog, direction: Direction) -> Dict[str, int]:
    """
    Aggregate the signed per-part deltas implied by ``line_items``.

    Part lines contribute ``direction * quantity``; product lines contribute
    ``direction * quantity * required_quantity`` for every line of the
    product's bill-of-materials. Contributions to the same part are summed,
    so the result does not depend on the order of the items.

    Raises:
        ResolutionError: an item references an unknown id for its kind or
            has a quantity below one. No partial result is returned.
    """
    direction = Direction(direction)
    deltas: Dict[str, int] = {}
    for index, item in enumerate(line_items):
        try:
            contributions = list(item.contributions(catalog, direction))
        except ResolutionError as exc:
            raise ResolutionError(item, exc.reason, index=index) from None
        for part_id, signed_quantity in contributions:
            deltas[part_id] = deltas.get(part_id, 0) + signed_quantity
    return deltas


def summarize(
    stock_snapshot: Mapping[str, int],
    part_deltas: Mapping[str, int],
    part_names: Optional[Mapping[str, str]] = None,
) -> ReconciliationSummary:
    """
    Build the before/change/after view of every part in ``stock_snapshot``.

    Records follow the snapshot's own ordering. Parts the deltas do not
    touch appear with a change of zero.

    Raises:
        SnapshotMismatchError: a delta names a part the snapshot lacks.
    """
    unknown = [part_id for part_id in part_deltas if part_id not in stock_snapshot]
    if unknown:
        raise SnapshotMismatchError(unknown)

    names = part_names or {}
    return ReconciliationSummary(
        records=tuple(
            PartReconciliationRecord(
                part_id=part_id,
                name=names.get(part_id, part_id),
                quantity_before=quantity_before,
                quantity_change=part_deltas.get(part_id, 0),
            )
            for part_id, quantity_before in stock_snapshot.items()
        )
    )


def reconcile(line_items: Iterable[LineItem], catalog: Catalog, direction: Direction) -> ReconciliationSummary:
    """Expand ``line_items`` and summarize them against the catalog's own stock"""
    deltas = expand(line_items, catalog, direction)
    return summarize(catalog.stock_snapshot(), deltas, catalog.part_names())
