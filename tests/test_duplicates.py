"""
Tests for probable-duplicate flagging.
"""

from decimal import Decimal

import pytest

from bento.models.transaction import LedgerEntry, TransactionDraft
from bento.services.duplicates import (
    DUPLICATE_MARKER,
    flag_duplicates,
    is_probable_duplicate,
    mark_duplicate,
)


def make_draft(**overrides):
    fields = dict(
        amount=Decimal("85.00"),
        category="อาหาร",
        date="18/10/2569",
        note="ร้านกาแฟ ดอยช้าง",
    )
    fields.update(overrides)
    return TransactionDraft(**fields)


class TestReferenceMatch:

    def test_same_reference_is_duplicate_despite_amount(self):
        draft = make_draft(reference_id="015291143212ABC01234", amount=Decimal("85.00"))
        existing = make_draft(reference_id="015291143212ABC01234", amount=Decimal("65.00"))

        assert is_probable_duplicate(draft, existing)
        assert is_probable_duplicate(existing, draft)

    def test_different_references_are_distinct(self):
        draft = make_draft(reference_id="AAAAAAAAAA01")
        existing = make_draft(reference_id="BBBBBBBBBB02")

        assert not is_probable_duplicate(draft, existing)

    def test_blank_reference_falls_back_to_fields(self):
        draft = make_draft(reference_id="   ")
        existing = LedgerEntry(amount=Decimal("85"), date="18/10/2569", category="อาหาร")

        assert is_probable_duplicate(draft, existing)


class TestFieldMatch:

    def test_same_amount_date_category(self):
        assert is_probable_duplicate(make_draft(), make_draft(note="อื่น"))

    @pytest.mark.parametrize("field,value", [
        ("amount", Decimal("85.01")),
        ("date", "19/10/2569"),
        ("category", "บันเทิง"),
    ])
    def test_any_difference_clears_flag(self, field, value):
        assert not is_probable_duplicate(make_draft(), make_draft(**{field: value}))

    def test_one_side_with_reference_uses_fields(self):
        draft = make_draft(reference_id="015291143212ABC01234")
        assert is_probable_duplicate(draft, make_draft())


class TestFlagging:

    def test_flagged_not_dropped(self):
        drafts = [make_draft(), make_draft(amount=Decimal("10.00"))]
        ledger = [LedgerEntry(amount=Decimal("85.00"), date="18/10/2569", category="อาหาร")]

        result = flag_duplicates(drafts, ledger)

        assert len(result) == 2
        assert result[0].is_duplicate
        assert result[0].note == DUPLICATE_MARKER + "ร้านกาแฟ ดอยช้าง"
        assert result[0].amount == Decimal("85.00")
        assert not result[1].is_duplicate
        assert result[1].note == "ร้านกาแฟ ดอยช้าง"

    def test_mark_is_idempotent(self):
        marked = mark_duplicate(mark_duplicate(make_draft()))
        assert marked.note.count(DUPLICATE_MARKER) == 1

    def test_empty_ledger(self):
        assert flag_duplicates([make_draft()], []) == [make_draft()]
