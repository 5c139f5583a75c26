"""
Date helpers for the canonical ledger format.

All dates are stored as zero-padded DD/MM/YYYY in the Buddhist era (BE),
which is the Gregorian year plus 543.
"""

import re
from datetime import date
from typing import Dict, List, Optional, Tuple

BUDDHIST_ERA_OFFSET = 543
# Two-digit years on Thai slips are BE short form ("67" → 2567)
SHORT_YEAR_BASE = 2500
# Anything below this is taken to be a Gregorian year
MIN_BUDDHIST_YEAR = 2400

THAI_MONTHS_FULL = [
    'มกราคม', 'กุมภาพันธ์', 'มีนาคม', 'เมษายน', 'พฤษภาคม', 'มิถุนายน',
    'กรกฎาคม', 'สิงหาคม', 'กันยายน', 'ตุลาคม', 'พฤศจิกายน', 'ธันวาคม',
]

THAI_MONTHS_ABBR = [
    'ม.ค.', 'ก.พ.', 'มี.ค.', 'เม.ย.', 'พ.ค.', 'มิ.ย.',
    'ก.ค.', 'ส.ค.', 'ก.ย.', 'ต.ค.', 'พ.ย.', 'ธ.ค.',
]

ENGLISH_MONTHS_ABBR = [
    'jan', 'feb', 'mar', 'apr', 'may', 'jun',
    'jul', 'aug', 'sep', 'oct', 'nov', 'dec',
]


def _thai_month_alternation() -> Tuple[str, Dict[str, int]]:
    """Regex alternation for Thai month names and a lookup by dotless key."""
    lookup: Dict[str, int] = {}
    parts: List[str] = []
    for index, name in enumerate(THAI_MONTHS_FULL, start=1):
        lookup[name] = index
        parts.append(re.escape(name))
    for index, abbr in enumerate(THAI_MONTHS_ABBR, start=1):
        letters = [piece for piece in abbr.split('.') if piece]
        lookup[''.join(letters)] = index
        # OCR often drops the dots: "ม.ค." / "มค" / "ม.ค"
        parts.append(r'\.?\s?'.join(re.escape(piece) for piece in letters) + r'\.?')
    return '|'.join(parts), lookup


THAI_MONTH_PATTERN, THAI_MONTH_LOOKUP = _thai_month_alternation()


def to_buddhist_year(year: int) -> int:
    """
    Normalize a year to the Buddhist era.

    Examples:
        >>> to_buddhist_year(67)
        2567
        >>> to_buddhist_year(2026)
        2569
        >>> to_buddhist_year(2567)
        2567
    """
    if year < 100:
        return year + SHORT_YEAR_BASE
    if year < MIN_BUDDHIST_YEAR:
        return year + BUDDHIST_ERA_OFFSET
    return year


def format_be_date(day: int, month: int, year: int) -> Optional[str]:
    """
    Render day/month/year as DD/MM/YYYY (BE), or None if not a real date.

    The year may be Gregorian, BE, or 2-digit BE short form.
    """
    be_year = to_buddhist_year(year)
    try:
        # Validate against the Gregorian calendar (same month lengths)
        date(be_year - BUDDHIST_ERA_OFFSET, month, day)
    except ValueError:
        return None
    return f"{day:02d}/{month:02d}/{be_year:04d}"


def today_be(today: Optional[date] = None) -> str:
    """Current date in the canonical format."""
    today = today or date.today()
    return f"{today.day:02d}/{today.month:02d}/{today.year + BUDDHIST_ERA_OFFSET:04d}"
