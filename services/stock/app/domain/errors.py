"""Domain errors raised while reconciling a pending stock transaction."""

from typing import Any, Iterable, Optional


class StockError(Exception):
    """Base class for every stock-service domain error"""


class CatalogIntegrityError(StockError, ValueError):
    """A catalog violates its own invariants (dangling BOM part, duplicate id, bad quantity)"""


class ResolutionError(StockError):
    """
    A line item could not be resolved against the catalog.

    Raised for an unknown reference id (for the item's declared kind) or a
    quantity below one. The whole calculation is aborted; no partial summary
    is ever produced.
    """

    def __init__(self, line_item: Any, reason: str, index: Optional[int] = None):
        self.line_item = line_item
        self.reason = reason
        self.index = index
        where = f"line item {index}" if index is not None else "line item"
        super().__init__(f"{where} ({line_item.kind} {line_item.reference_id!r}): {reason}")

    def to_dict(self) -> dict:
        return {
            "message": str(self),
            "index": self.index,
            "kind": self.line_item.kind,
            "reference_id": self.line_item.reference_id,
            "quantity": self.line_item.quantity,
            "reason": self.reason,
        }


class SnapshotMismatchError(StockError):
    """Deltas reference parts the stock snapshot does not know about"""

    def __init__(self, part_ids: Iterable[str]):
        self.part_ids = tuple(part_ids)
        super().__init__(f"Deltas reference parts missing from the snapshot: {', '.join(self.part_ids)}")


class SubmissionBlockedError(StockError):
    """A transaction cannot be submitted in its current state"""

    def __init__(self, message: str, summary: Any = None):
        self.summary = summary
        super().__init__(message)


class SubmissionError(StockError):
    """The transaction submitter failed to record the transaction"""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class StaleSnapshotConflict(SubmissionError):
    """Live stock no longer matches the quantities the summary was computed from"""
