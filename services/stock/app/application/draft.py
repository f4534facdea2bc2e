"""
Observable line-item set for one pending transaction.

Every mutation reruns the full reconciliation against the catalog the draft
was opened with, then notifies subscribers. Nothing is patched in place, so
a removed or edited item can never leave a stale contribution behind.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from app.domain.catalog import Catalog
from app.domain.errors import ResolutionError, SubmissionBlockedError
from app.domain.line_items import LineItem, TransactionKind
from .reconciliation import ReconciliationSummary, reconcile


@dataclass(frozen=True)
class DraftState:
    line_items: Tuple[LineItem, ...]
    summary: Optional[ReconciliationSummary]
    error: Optional[ResolutionError] = None


@dataclass(frozen=True)
class TransactionSubmission:
    """What gets handed to the transaction submitter"""
    kind: TransactionKind
    line_items: Tuple[LineItem, ...]
    summary: ReconciliationSummary

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "direction": int(self.kind.direction),
            "line_items": [item.to_dict() for item in self.line_items],
            "reconciliation_summary": self.summary.to_dict(),
        }


Subscriber = Callable[[DraftState], None]


class TransactionDraft:
    def __init__(self, catalog: Catalog, kind: TransactionKind, line_items=()):
        self.catalog = catalog
        self.kind = TransactionKind(kind)
        self._items: List[LineItem] = list(line_items)
        self._subscribers: List[Subscriber] = []
        self._state = self._recalculate()

    @property
    def line_items(self) -> Tuple[LineItem, ...]:
        return tuple(self._items)

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def summary(self) -> Optional[ReconciliationSummary]:
        return self._state.summary

    @property
    def error(self) -> Optional[ResolutionError]:
        return self._state.error

    @property
    def can_submit(self) -> bool:
        summary = self._state.summary
        return bool(self._items) and summary is not None and not summary.any_negative

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for every recalculation; returns an unsubscribe function"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def add(self, item: LineItem) -> int:
        self._items.append(item)
        self._changed()
        return len(self._items) - 1

    def replace(self, index: int, item: LineItem) -> None:
        self._items[index] = item
        self._changed()

    def remove(self, index: int) -> LineItem:
        item = self._items.pop(index)
        self._changed()
        return item

    def clear(self) -> None:
        self._items.clear()
        self._changed()

    def finalize(self) -> TransactionSubmission:
        """Return the validated submission, or raise if the draft may not be submitted"""
        state = self._state
        if state.error is not None:
            raise SubmissionBlockedError(str(state.error))
        if not self._items:
            raise SubmissionBlockedError("Add at least one item")
        if state.summary.any_negative:
            names = ", ".join(record.name for record in state.summary.negative_parts())
            raise SubmissionBlockedError(f"Stock would go negative for: {names}", summary=state.summary)
        return TransactionSubmission(kind=self.kind, line_items=state.line_items, summary=state.summary)

    def _recalculate(self) -> DraftState:
        items = tuple(self._items)
        try:
            summary = reconcile(items, self.catalog, self.kind.direction)
        except ResolutionError as exc:
            return DraftState(line_items=items, summary=None, error=exc)
        return DraftState(line_items=items, summary=summary)

    def _changed(self) -> None:
        self._state = self._recalculate()
        for callback in list(self._subscribers):
            callback(self._state)
