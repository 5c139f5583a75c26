"""
Field extractors for OCR text from payment slips and bank statements.

Each extractor is a pure function of the text blob and returns a value or
None when the field cannot be found. Missing fields are normal: callers
substitute per-field defaults instead of failing the whole draft.
"""

import re
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from bento.services.catalog import BANKS, BankProfile
from bento.utils.candidates import AmountCandidate, AmountTier, create_amount_candidate
from bento.utils.money import CURRENCY_UNIT_PATTERN, parse_money
from bento.utils.names import clean_counterparty_name
from bento.utils.scoring import select_best_amount, select_top_amounts
from bento.utils.thai_dates import (
    ENGLISH_MONTHS_ABBR,
    THAI_MONTH_LOOKUP,
    THAI_MONTH_PATTERN,
    format_be_date,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    notes: Optional[str] = None
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))


# A number token: 1,250.50 / 1250.50 / 60
NUMBER_PATTERN = r'(?<![\d.,])(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,2})?(?!\d)'

# Masked account numbers as printed on Thai slips
MASKED_ACCOUNT = re.compile(
    r'(?:[xX*]{3}-?[xX*\d]-?[xX*\d]{5}-?[xX*\d]'   # xxx-x-x1234-x
    r'|[xX*]{3}-?[xX*]{3}-?\d{4}'                  # xxx-xxx-1234
    r'|[xX*]{4,}\d{3,4})'                          # xxxxxx1234
)


def keyword_regex(words: Sequence[str]) -> re.Pattern:
    """
    Case-insensitive alternation of keywords.

    ASCII words get word boundaries ("fee" must not match "coffee"); Thai
    has no spaces between words, so Thai keywords match as substrings.
    """
    parts = []
    for word in sorted(set(words), key=len, reverse=True):
        escaped = re.escape(word)
        parts.append(rf'\b{escaped}\b' if word.isascii() else escaped)
    return re.compile('|'.join(parts), re.IGNORECASE)


class BankDetector:
    """Detect which bank issued a slip from its brand tokens."""

    def __init__(self, banks: Optional[Sequence[BankProfile]] = None):
        self.banks = list(banks) if banks is not None else BANKS

    def detect(self, text: str) -> Optional[BankProfile]:
        """
        Return the bank whose token appears earliest in the text.

        Args:
            text: OCR text

        Returns:
            BankProfile or None
        """
        lowered = (text or '').lower()
        best: Optional[Tuple[int, BankProfile]] = None
        for bank in self.banks:
            for token in bank.tokens:
                pos = lowered.find(token.lower())
                if pos != -1 and (best is None or pos < best[0]):
                    best = (pos, bank)
        return best[1] if best else None

    def is_bank_line(self, line: str) -> bool:
        """True for a short line that only names a bank ("ธ.กสิกรไทย")."""
        stripped = line.strip()
        if not stripped or len(stripped) > 40:
            return False
        if stripped.startswith(('ธ.', 'ธนาคาร')):
            return True
        lowered = stripped.lower()
        return any(token.lower() in lowered for bank in self.banks for token in bank.tokens)


class AmountExtractor:
    """
    Pick the transaction amount from a slip using three scoring strategies.

    Strategies are evaluated independently and their candidates merged and
    ranked once (see bento.utils.scoring):
    - keyword: number after a total/amount phrase (score 100)
    - unit: number immediately followed by a currency unit (score 80)
    - generic: every other number token, scored by heuristics
    """

    BASE_KEYWORDS = [
        'ยอดรวมทั้งสิ้น', 'รวมทั้งสิ้น', 'ยอดรวม', 'ยอดชำระ', 'ยอดเงิน', 'ยอดโอน',
        'จำนวนเงิน', 'จำนวน',
        'grand total', 'total amount', 'total', 'amount',
    ]

    # Amounts in these contexts are never the transaction amount
    BLACKLIST_CONTEXTS = ['คงเหลือ', 'ค่าธรรมเนียม', 'balance', 'fee', 'available']

    def __init__(self, keywords: Optional[List[str]] = None):
        self.keywords = list(keywords) if keywords is not None else list(self.BASE_KEYWORDS)
        self.blacklist_re = keyword_regex(self.BLACKLIST_CONTEXTS)
        self.unit_spec = PatternSpec(
            name='unit_anchored',
            pattern=rf'({NUMBER_PATTERN})[ \t]*{CURRENCY_UNIT_PATTERN}',
            example='1,250.50 บาท',
            notes='Number directly followed by a currency unit',
        )
        self.generic_spec = PatternSpec(
            name='generic_number',
            pattern=NUMBER_PATTERN,
            example='1250.50',
            notes='Any remaining number token',
        )

    def _keyword_spec(self, bank: Optional[BankProfile]) -> PatternSpec:
        keywords = self.keywords + (list(bank.amount_keywords) if bank else [])
        # Longest first so "ยอดรวมทั้งสิ้น" wins over "ยอดรวม"
        ordered = sorted(set(keywords), key=len, reverse=True)
        alternation = '|'.join(re.escape(k) for k in ordered)
        return PatternSpec(
            name='keyword_anchored',
            pattern=rf'(?:{alternation})[^\d\n]{{0,20}}\n?[^\d\n]{{0,10}}?({NUMBER_PATTERN})',
            example='ยอดรวม 1,250.50',
            notes='Total/amount phrase, number on the same or next line',
        )

    def _in_blacklist_context(self, text: str, start: int) -> bool:
        line_start = text.rfind('\n', 0, start) + 1
        prefix = text[max(line_start, start - 30):start]
        return self.blacklist_re.search(prefix) is not None

    def _label_is_blacklisted(self, text: str, start: int, number_start: int) -> bool:
        """Blacklisted word between an anchor phrase and its number ("ยอดเงินคงเหลือ 5,000.00")."""
        return self.blacklist_re.search(text[start:number_start]) is not None

    @staticmethod
    def _looks_like_identifier(text: str, start: int, end: int) -> bool:
        """Number glued to date, time or account punctuation."""
        before = text[start - 1] if start > 0 else ''
        after = text[end] if end < len(text) else ''
        if (before and before in '/:-xX*') or (after and after in '/:-'):
            return True
        integer_part = text[start:end].split('.')[0].replace(',', '')
        return len(integer_part) > 7

    def candidates(self, text: str, bank: Optional[BankProfile] = None) -> List[AmountCandidate]:
        """Generate candidates from all three strategies."""
        candidates: List[AmountCandidate] = []
        seen_spans = set()
        unit_in_text = re.search(CURRENCY_UNIT_PATTERN, text, re.IGNORECASE) is not None

        # Strategies 1 and 2: keyword-anchored, unit-anchored
        for spec, tier in ((self._keyword_spec(bank), AmountTier.KEYWORD),
                           (self.unit_spec, AmountTier.UNIT)):
            for match in spec.compiled.finditer(text):
                span = match.span(1)
                if self._in_blacklist_context(text, match.start()):
                    continue
                if self._label_is_blacklisted(text, match.start(), span[0]):
                    continue
                value = parse_money(match.group(1), allow_zero=False)
                if value is None:
                    continue
                seen_spans.add(span)
                candidates.append(create_amount_candidate(
                    value=value,
                    pattern_name=spec.name,
                    match_span=span,
                    raw_text=match.group(1),
                    tier=tier,
                ))

        # Strategy 3: every remaining number
        for match in self.generic_spec.compiled.finditer(text):
            span = match.span()
            if span in seen_spans:
                continue
            if self._looks_like_identifier(text, *span):
                continue
            if self._in_blacklist_context(text, match.start()):
                continue
            value = parse_money(match.group(0), allow_zero=False)
            if value is None:
                continue
            candidates.append(create_amount_candidate(
                value=value,
                pattern_name=self.generic_spec.name,
                match_span=span,
                raw_text=match.group(0),
                tier=AmountTier.GENERIC,
                unit_in_text=unit_in_text,
            ))

        return candidates

    def extract(self, text: str, bank: Optional[BankProfile] = None, _debug=None) -> Optional[Decimal]:
        """
        Extract the transaction amount.

        Args:
            text: OCR text
            bank: Detected bank, adds its amount labels to the keyword list

        Returns:
            Amount as Decimal or None
        """
        try:
            candidates = self.candidates(text, bank)
            best = select_best_amount(candidates)

            if _debug is not None:
                _debug['amount_candidates'] = [
                    {'value': str(c.value), 'score': c.score, 'pattern': c.pattern_name}
                    for c in select_top_amounts(candidates, top_n=3)
                ]

            return best.value if best else None

        except (re.error, AttributeError):
            logger.warning("Error extracting amount", exc_info=True)
            return None


class DateExtractor:
    """
    Find the transaction date and normalize it to DD/MM/YYYY (Buddhist era).

    Patterns are tried in order; the first valid date wins.
    """

    def __init__(self):
        self.date_patterns = [
            PatternSpec(
                name='slash_dmy',
                pattern=r'(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?!\d)',
                example='12/01/2567',
            ),
            PatternSpec(
                name='thai_month_name',
                pattern=rf'(?<!\d)(\d{{1,2}})\s*({THAI_MONTH_PATTERN})\s*(\d{{4}}|\d{{2}})(?!\d)',
                example='12 ม.ค. 67',
                notes='Abbreviated or full Thai month names',
            ),
            PatternSpec(
                name='english_month_abbr',
                pattern=r'(?<!\d)(\d{1,2})[\s-]*(' + '|'.join(ENGLISH_MONTHS_ABBR) + r')[a-z]*\.?[\s,-]*(\d{4}|\d{2})(?!\d)',
                example='12 Jan 2024',
            ),
        ]

    def _month_number(self, spec_name: str, token: str) -> Optional[int]:
        if spec_name == 'slash_dmy':
            return int(token)
        if spec_name == 'thai_month_name':
            key = token.replace('.', '').replace(' ', '')
            return THAI_MONTH_LOOKUP.get(key)
        return ENGLISH_MONTHS_ABBR.index(token[:3].lower()) + 1

    def extract(self, text: str) -> Optional[str]:
        """
        Extract and normalize the slip date.

        Args:
            text: OCR text

        Returns:
            Date as DD/MM/YYYY (BE) or None
        """
        try:
            for spec in self.date_patterns:
                for match in spec.compiled.finditer(text):
                    day = int(match.group(1))
                    month = self._month_number(spec.name, match.group(2))
                    year = int(match.group(3))
                    if not month:
                        continue
                    normalized = format_be_date(day, month, year)
                    if normalized:
                        return normalized
            return None

        except (re.error, ValueError, AttributeError):
            logger.warning("Error extracting date", exc_info=True)
            return None


class ReceiverExtractor:
    """
    Find the receiver/merchant name on a transfer or payment slip.

    Strategies in priority order:
    1. Explicit "to / transfer to / pay to" phrases
    2. Two masked accounts: the name above the second one (the first is the sender)
    3. A name line directly above a masked account, not the first line
    4. The name above a biller ID on bill-payment slips
    """

    GENERIC_ACCOUNT_WORDS = [
        'บัญชี', 'ออมทรัพย์', 'กระแสรายวัน', 'เงินฝาก', 'พร้อมเพย์', 'วอลเล็ท',
        'savings', 'saving', 'current', 'account', 'promptpay', 'e-wallet', 'wallet',
    ]

    def __init__(self, bank_detector: Optional[BankDetector] = None):
        self.bank_detector = bank_detector or BankDetector()
        self.phrase_patterns = [
            PatternSpec(
                name='thai_to_phrase',
                pattern=r'(?:โอนเงินไปยัง|โอนไปยัง|ไปยัง|ไปที่|โอนให้|จ่ายให้|ชำระเงินให้|ชำระให้|ผู้รับเงิน|ผู้รับ)[ \t]*[:：]?[ \t]*([^\n]*)',
                example='โอนไปยัง ร้านกาแฟ ดอยช้าง',
            ),
            PatternSpec(
                name='english_to_phrase',
                pattern=r'(?:transfer(?:red)?\s+to|pay(?:ment)?\s+to|paid\s+to|(?:^|\n)[ \t]*to[ \t]*[:：])[ \t]*([^\n]*)',
                example='Transfer to: Coffee House',
            ),
        ]
        self.biller_spec = PatternSpec(
            name='biller_id',
            pattern=r'(?:biller\s*id|รหัสผู้ให้บริการ|รหัสผู้รับชำระ|รหัสบริษัท|comp(?:any)?\s*code)',
            example='Biller ID: 010555012345601',
        )

    def _is_usable_name(self, name: str) -> bool:
        if len(name) <= 2:
            return False
        lowered = name.lower()
        if any(lowered.startswith(word) for word in self.GENERIC_ACCOUNT_WORDS):
            return False
        if MASKED_ACCOUNT.search(name):
            return False
        if re.search(CURRENCY_UNIT_PATTERN, name, re.IGNORECASE):
            return False
        digits = sum(ch.isdigit() for ch in name)
        return digits * 2 < len(name)

    def _clean(self, raw: str) -> Optional[str]:
        name = clean_counterparty_name(raw)
        return name if self._is_usable_name(name) else None

    def _name_above(self, lines: List[str], index: int, floor: int = -1) -> Optional[Tuple[int, str]]:
        """First name line above lines[index], skipping blank and bank-name lines."""
        for j in range(index - 1, floor, -1):
            line = lines[j].strip()
            if not line or self.bank_detector.is_bank_line(line):
                continue
            name = self._clean(line)
            return (j, name) if name else None
        return None

    def _from_phrases(self, text: str) -> Optional[str]:
        for spec in self.phrase_patterns:
            for match in spec.compiled.finditer(text):
                raw = match.group(1).strip()
                if not raw:
                    # Name printed on the following line
                    rest = text[match.end():].lstrip('\n').split('\n', 1)
                    raw = rest[0].strip() if rest else ''
                name = self._clean(raw)
                if name:
                    return name
        return None

    def extract(self, text: str, _debug=None) -> Optional[str]:
        """
        Extract the receiver name.

        Args:
            text: OCR text (or a transaction note)

        Returns:
            Cleaned receiver name or None
        """
        if not text:
            return None
        try:
            lines = text.split('\n')
            account_lines = [i for i, line in enumerate(lines) if MASKED_ACCOUNT.search(line)]

            strategies = [
                ('phrase', lambda: self._from_phrases(text)),
                ('second_account', lambda: self._from_second_account(lines, account_lines)),
                ('above_account', lambda: self._from_any_account(lines, account_lines)),
                ('biller_id', lambda: self._from_biller(lines)),
            ]
            for name, strategy in strategies:
                result = strategy()
                if result:
                    if _debug is not None:
                        _debug['patterns_matched']['receiver'] = name
                    return result
            return None

        except (re.error, AttributeError, IndexError):
            logger.warning("Error extracting receiver", exc_info=True)
            return None

    def _from_second_account(self, lines: List[str], account_lines: List[int]) -> Optional[str]:
        if len(account_lines) < 2:
            return None
        found = self._name_above(lines, account_lines[1], floor=account_lines[0])
        return found[1] if found else None

    def _from_any_account(self, lines: List[str], account_lines: List[int]) -> Optional[str]:
        for index in account_lines:
            found = self._name_above(lines, index)
            # The very first line is the slip header, not a receiver
            if found and found[0] > 0:
                return found[1]
        return None

    def _from_biller(self, lines: List[str]) -> Optional[str]:
        for index, line in enumerate(lines):
            if self.biller_spec.compiled.search(line):
                found = self._name_above(lines, index)
                if found:
                    return found[1]
        return None


class ReferenceExtractor:
    """Find the slip's reference / transaction number."""

    MIN_LENGTH = 10

    def __init__(self):
        self.keyword_spec = PatternSpec(
            name='reference_keyword',
            pattern=(
                r'(?:เลขที่รายการ|รหัสอ้างอิง|เลขที่อ้างอิง|หมายเลขอ้างอิง|เลขอ้างอิง'
                r'|transaction\s*(?:id|no\.?|number)|(?<![a-z])ref(?:erence)?\.?\s*(?:no\.?|number|id|code)?)'
                r'[ \t]*[:：#]?[ \t]*\n?[ \t]*([A-Za-z0-9]{10,})'
            ),
            example='เลขที่รายการ: 015012143512ABC12345',
        )
        self.fallback_spec = PatternSpec(
            name='long_digit_run',
            pattern=r'(?<!\d)\d{10,}(?!\d)',
            example='2024011214351234',
            flags=0,
        )

    def extract(self, text: str) -> Optional[str]:
        """
        Extract the reference number.

        Returns:
            Reference string (at least 10 characters) or None
        """
        if not text:
            return None
        match = self.keyword_spec.compiled.search(text)
        if match:
            return match.group(1)
        match = self.fallback_spec.compiled.search(text)
        if match:
            return match.group(0)
        return None
