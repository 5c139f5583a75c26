"""
Pydantic models for transaction drafts and confirmed ledger transactions.
"""

import re
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

INCOME_CATEGORY = "income"
OTHER_CATEGORY = "other"

# Canonical date format: DD/MM/YYYY, Buddhist era
_DATE_RE = re.compile(r'^\d{2}/\d{2}/\d{4}$')


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionBase(BaseModel):
    """Fields shared by drafts and confirmed transactions."""
    amount: Decimal = Field(ge=0)
    kind: TransactionKind = TransactionKind.EXPENSE
    category: str = Field(min_length=1)
    date: str
    note: str = Field(min_length=1)
    reference_id: Optional[str] = None
    counterparty_name: Optional[str] = None

    @field_validator('date')
    @classmethod
    def _check_date(cls, value: str) -> str:
        if not _DATE_RE.match(value):
            raise ValueError(f"date must be DD/MM/YYYY, got {value!r}")
        return value

    @model_validator(mode='before')
    @classmethod
    def _income_category(cls, data):
        # Income always carries the fixed income label
        if isinstance(data, dict) and data.get('kind') == TransactionKind.INCOME:
            data = {**data, 'category': INCOME_CATEGORY}
        return data


class TransactionDraft(TransactionBase):
    """
    Unconfirmed transaction produced by the chat parser or the slip pipeline.

    Drafts are never written to the ledger by this package; the caller
    confirms them with Transaction.from_draft().
    """
    is_duplicate: bool = False
    error: Optional[str] = None
    source_index: Optional[int] = None  # 1-based image position in a batch


class Transaction(TransactionBase):
    """Immutable ledger transaction."""
    model_config = ConfigDict(frozen=True)

    id: str

    @classmethod
    def from_draft(cls, draft: TransactionDraft, id: Optional[str] = None) -> "Transaction":
        """Confirm a draft into a ledger record."""
        return cls(
            id=id or str(uuid.uuid4()),
            amount=draft.amount,
            kind=draft.kind,
            category=draft.category,
            date=draft.date,
            note=draft.note,
            reference_id=draft.reference_id,
            counterparty_name=draft.counterparty_name,
        )


class LedgerEntry(BaseModel):
    """
    Minimal view of an existing ledger row used for duplicate checks.

    Clients may send only these fields with a scan request.
    """
    amount: Decimal
    date: str
    category: str
    reference_id: Optional[str] = None
