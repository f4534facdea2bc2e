from typing import Iterable, Optional
from app.domain.catalog import Catalog
from app.domain.errors import SubmissionBlockedError
from app.domain.line_items import LineItem, TransactionKind
from app.infrastructure.catalog_repository import CatalogProvider
from app.infrastructure.submitter import TransactionSubmitter
from shared.core import get_logger
from .draft import TransactionDraft
from .reconciliation import ReconciliationSummary

logger = get_logger(__name__)

class ReconciliationService:
    def __init__(self, catalog_provider: CatalogProvider, submitter: Optional[TransactionSubmitter] = None):
        self.catalog_provider = catalog_provider
        self.submitter = submitter

    def catalog(self) -> Catalog:
        return self.catalog_provider.load_catalog()

    def _open_draft(self, kind: TransactionKind, items: Iterable[LineItem]) -> TransactionDraft:
        """Open a draft over a freshly loaded catalog; raises the draft's ResolutionError if any"""
        draft = TransactionDraft(self.catalog(), kind, items)
        if draft.error is not None:
            logger.warning(
                f"Unresolvable {kind.value} line item: {draft.error}",
                extra={'extra_fields': draft.error.to_dict()}
            )
            raise draft.error
        return draft

    def preview(self, kind: TransactionKind, items: Iterable[LineItem]) -> ReconciliationSummary:
        draft = self._open_draft(kind, items)
        summary = draft.summary
        logger.info(
            f"Computed {kind.value} preview",
            extra={
                'extra_fields': {
                    'line_items': len(draft.line_items),
                    'parts_touched': len(summary.touched_parts()),
                    'any_negative': summary.any_negative,
                }
            }
        )
        return summary

    def submit(self, kind: TransactionKind, items: Iterable[LineItem]) -> dict:
        """
        Recompute the summary against current stock and hand the transaction to the submitter.

        Raises:
            ResolutionError: a line item does not resolve against the catalog
            SubmissionBlockedError: no items, or some part would go negative
            SubmissionError: the submitter could not record the transaction
        """
        if self.submitter is None:
            raise RuntimeError("No transaction submitter configured")
        draft = self._open_draft(kind, items)
        try:
            submission = draft.finalize()
        except SubmissionBlockedError as e:
            logger.warning(
                f"Blocked {kind.value} submission: {e}",
                extra={'extra_fields': {'line_items': len(draft.line_items)}}
            )
            raise
        receipt = self.submitter.submit(submission)
        logger.info(
            f"Submitted {kind.value}",
            extra={'extra_fields': {'line_items': len(submission.line_items)}}
        )
        return {**submission.to_dict(), "receipt": receipt}
