"""
Probable-duplicate detection for scanned drafts.

Duplicates are flagged, never dropped: the draft keeps all its data, gets
is_duplicate=True and a marker in front of its note so the user can decide.
"""

import logging
from typing import Iterable, Optional, Protocol

from bento.models.transaction import TransactionDraft

logger = logging.getLogger(__name__)

DUPLICATE_MARKER = '⚠️ อาจซ้ำ: '


class LedgerRow(Protocol):
    """Fields of an existing transaction that duplicate checks read."""
    amount: object
    date: str
    category: str
    reference_id: Optional[str]


def is_probable_duplicate(draft: TransactionDraft, existing: LedgerRow) -> bool:
    """
    Compare one draft with one existing transaction.

    Same non-empty reference → duplicate, even if OCR misread the amount.
    Different non-empty references → distinct transactions.
    Otherwise amount, date and category must all match.
    """
    ours = (draft.reference_id or '').strip()
    theirs = (getattr(existing, 'reference_id', None) or '').strip()

    if ours and theirs:
        return ours == theirs

    return (
        draft.amount == existing.amount
        and draft.date == existing.date
        and draft.category == existing.category
    )


def find_duplicate(draft: TransactionDraft, ledger: Iterable[LedgerRow]) -> Optional[LedgerRow]:
    """First ledger row the draft duplicates, or None."""
    for existing in ledger:
        if is_probable_duplicate(draft, existing):
            return existing
    return None


def mark_duplicate(draft: TransactionDraft) -> TransactionDraft:
    """Flag a draft as a probable duplicate (idempotent)."""
    note = draft.note
    if not note.startswith(DUPLICATE_MARKER):
        note = DUPLICATE_MARKER + note
    return draft.model_copy(update={'is_duplicate': True, 'note': note})


def flag_duplicates(
    drafts: Iterable[TransactionDraft],
    ledger: Iterable[LedgerRow]
) -> list[TransactionDraft]:
    """
    Flag every draft that duplicates a ledger row.

    Args:
        drafts: Drafts from one slip or statement
        ledger: Existing transactions (and earlier drafts of the same batch)

    Returns:
        Drafts in the same order, flagged where needed
    """
    ledger = list(ledger)
    result = []
    for draft in drafts:
        match = find_duplicate(draft, ledger)
        if match is not None:
            logger.info("Probable duplicate draft", extra={
                "amount": str(draft.amount),
                "date": draft.date,
                "category": draft.category,
                "reference_id": draft.reference_id
            })
            draft = mark_duplicate(draft)
        result.append(draft)
    return result
