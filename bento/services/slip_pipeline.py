"""
Slip extraction pipeline: OCR text blob → transaction draft(s).

A structural check first classifies the blob as either a multi-row
statement or a single payment slip; each mode has its own extraction path.
Batches of images are processed strictly one at a time, in input order.
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import AsyncIterator, Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from bento.models.transaction import OTHER_CATEGORY, TransactionDraft, TransactionKind
from bento.services.catalog import simplify_brand
from bento.services.classifier import CategoryClassifier
from bento.services.duplicates import LedgerRow, flag_duplicates
from bento.services.extractors import (
    AmountExtractor,
    BankDetector,
    DateExtractor,
    PatternSpec,
    ReceiverExtractor,
    ReferenceExtractor,
    keyword_regex,
)
from bento.utils.money import CURRENCY_UNIT_PATTERN, parse_money
from bento.utils.names import clean_counterparty_name
from bento.utils.thai_dates import today_be

logger = logging.getLogger(__name__)

AMOUNT_NOT_FOUND_MARKER = ' (ไม่พบยอดเงิน)'
LOTTERY_NOTE = 'ซื้อสลากกินแบ่ง'
TRANSFER_NOTE = 'โอนเงิน'


class ExtractionMode(str, Enum):
    STATEMENT = "statement"
    SINGLE_SLIP = "single_slip"


@dataclass
class StatementRow:
    """One "description  amount" line of a statement."""
    description: str
    amount: Decimal
    line: str


@dataclass
class BatchProgress:
    """Result of one image in a batch scan."""
    index: int  # 1-based
    total: int
    drafts: List[TransactionDraft] = field(default_factory=list)
    error: Optional[str] = None


class RecognitionEngine(Protocol):
    """External OCR engine boundary."""

    async def recognize(self, image_data: bytes) -> str:
        ...


class SlipExtractionPipeline:
    """Service for turning OCR text into transaction drafts."""

    LOTTERY_PHRASES = ['สลากกินแบ่ง', 'สลาก', 'ลอตเตอรี่', 'หวย', 'lottery', 'glo']
    TRANSFER_PHRASES = ['โอนเงินสำเร็จ', 'โอนเงิน', 'พร้อมเพย์', 'transfer', 'promptpay']

    # Lines mentioning these are totals, balances or fees, not statement rows
    SUMMARY_WORDS = AmountExtractor.BASE_KEYWORDS + AmountExtractor.BLACKLIST_CONTEXTS + [
        'รวม', 'ภาษี', 'subtotal', 'vat',
    ]

    MIN_STATEMENT_ROWS = 2

    def __init__(
        self,
        classifier: Optional[CategoryClassifier] = None,
        amount_extractor: Optional[AmountExtractor] = None,
        date_extractor: Optional[DateExtractor] = None,
        receiver_extractor: Optional[ReceiverExtractor] = None,
        reference_extractor: Optional[ReferenceExtractor] = None,
        bank_detector: Optional[BankDetector] = None
    ):
        self.classifier = classifier or CategoryClassifier()
        self.bank_detector = bank_detector or BankDetector()
        self.amount_extractor = amount_extractor or AmountExtractor()
        self.date_extractor = date_extractor or DateExtractor()
        self.receiver_extractor = receiver_extractor or ReceiverExtractor(self.bank_detector)
        self.reference_extractor = reference_extractor or ReferenceExtractor()

        self.row_spec = PatternSpec(
            name='statement_row',
            pattern=(
                r'^[ \t]*(?P<desc>[^\n]*?[^\W\d_][^\n]*?)[ \t\-–—:|]+'
                r'(?P<amount>(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})'
                rf'[ \t]*(?:{CURRENCY_UNIT_PATTERN})?[ \t]*$'
            ),
            example='ปตท. สาขา 01234  1,200.00 บาท',
            notes='Description followed by a decimal amount and optional unit',
            flags=re.IGNORECASE | re.MULTILINE,
        )
        self.summary_re = keyword_regex(self.SUMMARY_WORDS)

    # Mode selection

    def scan_rows(self, text: str) -> List[StatementRow]:
        """Find all statement-style rows in the text."""
        rows = []
        for match in self.row_spec.compiled.finditer(text or ''):
            description = clean_counterparty_name(match.group('desc'))
            if len(description) < 2:
                continue
            if self.summary_re.search(description):
                continue
            amount = parse_money(match.group('amount'), allow_zero=False)
            if amount is None:
                continue
            rows.append(StatementRow(description=description, amount=amount, line=match.group(0).strip()))
        return rows

    def detect_mode(self, text: str) -> Tuple[ExtractionMode, List[StatementRow]]:
        """
        Classify the blob before extraction.

        Returns:
            (mode, rows) where rows is empty in single-slip mode
        """
        rows = self.scan_rows(text)
        if len(rows) >= self.MIN_STATEMENT_ROWS:
            return ExtractionMode.STATEMENT, rows
        return ExtractionMode.SINGLE_SLIP, []

    # Extraction

    def extract(
        self,
        ocr_text: str,
        existing_ledger: Iterable[LedgerRow] = (),
        slip_number: int = 1,
        today: Optional[date] = None
    ) -> List[TransactionDraft]:
        """
        Extract draft(s) from one OCR text blob.

        Args:
            ocr_text: Text returned by the OCR engine
            existing_ledger: Transactions to check duplicates against
            slip_number: 1-based position of the image, used in placeholder notes
            today: Fallback date (defaults to the current date)

        Returns:
            Drafts for user confirmation; nothing is committed
        """
        text = ocr_text or ''
        mode, rows = self.detect_mode(text)

        if mode == ExtractionMode.STATEMENT:
            drafts = self._extract_statement(text, rows, today)
        else:
            drafts = [self._extract_single(text, slip_number, today)]

        logger.info("Extracted slip drafts", extra={
            "mode": mode.value,
            "drafts": len(drafts),
            "slip_number": slip_number
        })
        return flag_duplicates(drafts, existing_ledger)

    def _extract_statement(
        self,
        text: str,
        rows: List[StatementRow],
        today: Optional[date]
    ) -> List[TransactionDraft]:
        shared_date = self.date_extractor.extract(text) or today_be(today)
        drafts = []
        for row in rows:
            category = self.classifier.classify(
                row.description, TransactionKind.EXPENSE, counterparty=row.description
            )
            drafts.append(TransactionDraft(
                amount=row.amount,
                kind=TransactionKind.EXPENSE,
                category=category,
                date=shared_date,
                note=simplify_brand(row.description),
                counterparty_name=row.description,
            ))
        return drafts

    def _extract_single(self, text: str, slip_number: int, today: Optional[date]) -> TransactionDraft:
        debug = {'patterns_matched': {}}

        bank = self.bank_detector.detect(text)
        amount = self.amount_extractor.extract(text, bank=bank, _debug=debug)
        slip_date = self.date_extractor.extract(text)
        receiver = self.receiver_extractor.extract(text, _debug=debug)
        reference = self.reference_extractor.extract(text)

        category = self.classifier.classify(text, TransactionKind.EXPENSE, counterparty=receiver)
        note = self.synthesize_note(text, receiver, slip_number, amount_found=amount is not None)

        logger.debug("Single slip fields", extra={
            "bank": bank.code if bank else None,
            "amount": str(amount) if amount is not None else None,
            "date": slip_date,
            "receiver": receiver,
            "reference_id": reference,
            "debug": debug
        })

        return TransactionDraft(
            amount=amount if amount is not None else Decimal('0'),
            kind=TransactionKind.EXPENSE,
            category=category,
            date=slip_date or today_be(today),
            note=note,
            reference_id=reference,
            counterparty_name=receiver,
        )

    def synthesize_note(
        self,
        text: str,
        receiver: Optional[str],
        slip_number: int,
        amount_found: bool = True
    ) -> str:
        """
        Build the note shown for a scanned slip.

        Receiver name first, then lottery/transfer labels, then a numbered
        placeholder. A missing amount is called out at the end.
        """
        lowered = text.lower()
        if receiver:
            note = receiver
        elif any(phrase in lowered for phrase in self.LOTTERY_PHRASES):
            note = LOTTERY_NOTE
        elif any(phrase in lowered for phrase in self.TRANSFER_PHRASES):
            note = TRANSFER_NOTE
        else:
            note = f'สแกนจากสลิป #{slip_number}'

        if not amount_found:
            note += AMOUNT_NOT_FOUND_MARKER
        return note

    def error_draft(self, slip_number: int, error: str, today: Optional[date] = None) -> TransactionDraft:
        """Zero-amount placeholder for an image that could not be read."""
        return TransactionDraft(
            amount=Decimal('0'),
            kind=TransactionKind.EXPENSE,
            category=OTHER_CATEGORY,
            date=today_be(today),
            note=f'❌ สแกนสลิป #{slip_number} ไม่สำเร็จ',
            error=error or 'unknown error',
        )

    # Batches

    async def iter_batch(
        self,
        images: Sequence[bytes],
        engine: RecognitionEngine,
        existing_ledger: Iterable[LedgerRow] = (),
        today: Optional[date] = None
    ) -> AsyncIterator[BatchProgress]:
        """
        Scan images one at a time, yielding each image's drafts.

        A failure on one image becomes an error draft for that image and the
        loop moves on. Stop iterating to abandon the remaining images; drafts
        already yielded stay valid.
        """
        known: List[LedgerRow] = list(existing_ledger)
        total = len(images)

        for index, image_data in enumerate(images, start=1):
            error = None
            try:
                text = await engine.recognize(image_data)
                drafts = self.extract(text, known, slip_number=index, today=today)
            except Exception as e:
                logger.exception("Slip scan failed", extra={
                    "index": index,
                    "total": total
                })
                error = str(e) or type(e).__name__
                drafts = [self.error_draft(index, error, today)]

            drafts = [draft.model_copy(update={'source_index': index}) for draft in drafts]
            # Later images are checked against earlier ones too
            known.extend(draft for draft in drafts if draft.error is None)

            yield BatchProgress(index=index, total=total, drafts=drafts, error=error)

    async def scan_batch(
        self,
        images: Sequence[bytes],
        engine: RecognitionEngine,
        existing_ledger: Iterable[LedgerRow] = (),
        progress: Optional[Callable[[BatchProgress], None]] = None,
        today: Optional[date] = None
    ) -> List[TransactionDraft]:
        """
        Scan a batch of images and collect all drafts in input order.

        Args:
            images: Raw image bytes, in the order the user picked them
            engine: OCR engine
            existing_ledger: Transactions to check duplicates against
            progress: Optional callback invoked after each image
            today: Fallback date

        Returns:
            All drafts, including error placeholders
        """
        results: List[TransactionDraft] = []
        async for step in self.iter_batch(images, engine, existing_ledger, today=today):
            results.extend(step.drafts)
            if progress is not None:
                progress(step)
        return results
