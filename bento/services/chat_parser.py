"""
Natural-language parser for typed chat entries such as "กินข้าว 60 บาท"
or "เงินเดือนเข้า 20000".
"""

import re
import logging
from datetime import date
from typing import List, Optional, Tuple

from bento.models.transaction import TransactionDraft, TransactionKind
from bento.services.catalog import CATEGORY_HINTS, HINT_MARKER_PATTERN
from bento.services.classifier import CategoryClassifier
from bento.utils.money import CURRENCY_UNIT_PATTERN, parse_money
from bento.utils.thai_dates import today_be

logger = logging.getLogger(__name__)


class ChatParser:
    """Turn one line of user text into a transaction draft."""

    INCOME_KEYWORDS = [
        'เงินเดือน', 'ได้เงิน', 'เข้า', 'รายรับ', 'โอนเข้า', 'ถอนเงิน',
        'salary', 'income', 'bonus',
    ]

    DEFAULT_NOTES = {
        TransactionKind.INCOME: 'รายรับเพิ่มขึ้น',
        TransactionKind.EXPENSE: 'รายจ่ายใหม่',
    }

    # First run of digits/commas with at most one decimal point
    AMOUNT_PATTERN = re.compile(r'\d[\d,]*(?:\.\d+)?')

    def __init__(
        self,
        classifier: Optional[CategoryClassifier] = None,
        hints: Optional[List[Tuple[str, str]]] = None
    ):
        self.classifier = classifier or CategoryClassifier()
        self.hints = hints if hints is not None else CATEGORY_HINTS
        self.hint_pattern = re.compile(HINT_MARKER_PATTERN, re.IGNORECASE)

    def _detect_kind(self, text: str) -> TransactionKind:
        lowered = text.lower()
        if any(keyword in lowered for keyword in self.INCOME_KEYWORDS):
            return TransactionKind.INCOME
        return TransactionKind.EXPENSE

    def _category_hint(self, text: str) -> Tuple[Optional[str], Optional[Tuple[int, int]]]:
        """
        Category forced by a hint marker ("หมวดบันเทิง", "#food"), if any.

        Returns:
            (category, span of the marker) or (None, None)
        """
        match = self.hint_pattern.search(text)
        if not match:
            return None, None
        word = match.group(1).lower()
        for prefix, category in self.hints:
            if word.startswith(prefix.lower()):
                return category, match.span()
        return None, None

    def _build_note(self, text: str, spans: List[Tuple[int, int]]) -> str:
        """Raw text minus the amount, an applied hint marker and currency units."""
        pieces = []
        cursor = 0
        for start, end in sorted(spans):
            if start > cursor:
                pieces.append(text[cursor:start])
            cursor = max(cursor, end)
        pieces.append(text[cursor:])

        note = ' '.join(pieces)
        note = re.sub(CURRENCY_UNIT_PATTERN, ' ', note, flags=re.IGNORECASE)
        return ' '.join(note.split())

    def parse(self, text: str, today: Optional[date] = None) -> Optional[TransactionDraft]:
        """
        Parse a chat message.

        Args:
            text: Raw user text
            today: Date to stamp on the draft (defaults to the current date)

        Returns:
            TransactionDraft, or None when no usable amount is found
        """
        if not text or not text.strip():
            return None

        match = self.AMOUNT_PATTERN.search(text)
        if not match:
            return None

        # Typed amounts have no OCR sanity cap
        amount = parse_money(match.group(0), allow_zero=False, max_amount=None)
        if amount is None:
            logger.debug("Chat text has no usable amount", extra={"text": text})
            return None

        kind = self._detect_kind(text)

        category, hint_span = None, None
        if kind == TransactionKind.EXPENSE:
            # Hint markers win over keyword scoring
            category, hint_span = self._category_hint(text)

        spans = [match.span()]
        if hint_span:
            spans.append(hint_span)
        note = self._build_note(text, spans)

        if category is None:
            category = self.classifier.classify(note, kind)

        draft = TransactionDraft(
            amount=amount,
            kind=kind,
            category=category,
            date=today_be(today),
            note=note or self.DEFAULT_NOTES[kind],
        )

        logger.debug("Parsed chat entry", extra={
            "kind": kind.value,
            "amount": str(amount),
            "category": category
        })
        return draft
