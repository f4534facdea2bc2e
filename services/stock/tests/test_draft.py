import pytest

from app.application.draft import TransactionDraft
from app.domain.errors import SubmissionBlockedError
from app.domain.line_items import PartLine, ProductLine, TransactionKind


def _change(summary, part_id):
    return next(r.quantity_change for r in summary if r.part_id == part_id)


def test_new_draft_shows_untouched_inventory(catalog):
    draft = TransactionDraft(catalog, TransactionKind.PURCHASE)
    assert [r.quantity_change for r in draft.summary] == [0, 0, 0]
    assert draft.can_submit is False


def test_every_mutation_notifies_with_fresh_state(catalog):
    draft = TransactionDraft(catalog, TransactionKind.SALE)
    states = []
    draft.subscribe(states.append)

    draft.add(ProductLine("prod-p", 1))
    draft.add(ProductLine("prod-q", 1))
    draft.replace(0, ProductLine("prod-p", 2))
    draft.remove(1)

    assert len(states) == 4
    assert _change(states[0].summary, "part-b") == -1
    assert _change(states[1].summary, "part-b") == -4
    assert _change(states[2].summary, "part-a") == -4
    assert states[3].line_items == (ProductLine("prod-p", 2),)


def test_removed_item_leaves_no_residue(catalog):
    draft = TransactionDraft(catalog, TransactionKind.PURCHASE)
    draft.add(PartLine("part-c", 5))
    draft.add(ProductLine("prod-q", 2))
    draft.remove(1)
    assert _change(draft.summary, "part-b") == 0
    assert _change(draft.summary, "part-c") == 5


def test_quantity_before_always_comes_from_original_snapshot(catalog):
    draft = TransactionDraft(catalog, TransactionKind.SALE)
    draft.add(ProductLine("prod-p", 1))
    draft.add(ProductLine("prod-p", 1))
    assert [r.quantity_before for r in draft.summary] == [10, 5, 0]


def test_switching_kind_of_an_item(catalog):
    draft = TransactionDraft(catalog, TransactionKind.PURCHASE, [PartLine("part-a", 2)])
    draft.replace(0, ProductLine("prod-p", 2))
    assert _change(draft.summary, "part-a") == 4
    assert _change(draft.summary, "part-b") == 2


def test_unresolvable_item_clears_summary_until_fixed(catalog):
    draft = TransactionDraft(catalog, TransactionKind.SALE, [ProductLine("prod-p", 1)])
    draft.add(ProductLine("ghost", 1))
    assert draft.summary is None
    assert draft.error.index == 1
    assert draft.can_submit is False

    draft.remove(1)
    assert draft.error is None
    assert draft.summary is not None


def test_guard_blocks_submission(catalog):
    draft = TransactionDraft(catalog, TransactionKind.SALE, [ProductLine("prod-p", 10)])
    assert draft.summary.any_negative is True
    assert draft.can_submit is False
    with pytest.raises(SubmissionBlockedError) as exc_info:
        draft.finalize()
    assert exc_info.value.summary is draft.summary
    assert "Part A" in str(exc_info.value)


def test_finalize_requires_an_item(catalog):
    draft = TransactionDraft(catalog, TransactionKind.PURCHASE)
    with pytest.raises(SubmissionBlockedError):
        draft.finalize()


def test_finalize_hands_over_items_and_summary(catalog):
    draft = TransactionDraft(catalog, TransactionKind.PURCHASE, [PartLine("part-a", 3)])
    submission = draft.finalize()
    assert submission.line_items == (PartLine("part-a", 3),)
    assert submission.summary is draft.summary
    payload = submission.to_dict()
    assert payload["kind"] == "purchase"
    assert payload["direction"] == 1
    assert payload["line_items"] == [{"kind": "part", "reference_id": "part-a", "quantity": 3}]
    assert payload["reconciliation_summary"]["records"][0]["quantity_after"] == 13


def test_unsubscribe_stops_notifications(catalog):
    draft = TransactionDraft(catalog, TransactionKind.PURCHASE)
    states = []
    unsubscribe = draft.subscribe(states.append)
    draft.add(PartLine("part-a", 1))
    unsubscribe()
    draft.clear()
    assert len(states) == 1
    assert draft.line_items == ()
