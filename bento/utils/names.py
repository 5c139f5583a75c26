"""
Counterparty name normalization shared by extraction and preference lookup.
"""

import re

from bento.utils.thai_dates import ENGLISH_MONTHS_ABBR, THAI_MONTH_PATTERN

# Embedded branch codes, e.g. "7-Eleven (01234)" or "Lotus's สาขา 0456"
_BRANCH_CODE = re.compile(r'(?:สาขา(?:ที่)?\s*)?\(?(?<![\d-])\d{3,5}(?![\d-])\)?')

# Posting date (and time) printed in front of statement rows:
# "12/01 08:15 GRAB", "15 JAN STARBUCKS", "15 ม.ค. 67 STARBUCKS"
_LEADING_DATE = re.compile(
    r'^\s*(?:'
    r'\d{1,2}[/.]\d{1,2}(?:[/.]\d{2,4})?'
    r'|\d{1,2}\s*(?:' + THAI_MONTH_PATTERN + '|(?:' + '|'.join(ENGLISH_MONTHS_ABBR) + r')\.?(?![a-z]))'
    r'(?:\s*(?:\d{4}|\d{2})(?=\s))?'
    r')\s+(?:\d{1,2}:\d{2}(?::\d{2})?\s+)?',
    re.IGNORECASE
)


def clean_counterparty_name(name: str) -> str:
    """
    Strip a leading posting date, branch codes and extra whitespace.

    Args:
        name: Raw merchant/receiver name or statement description

    Returns:
        Normalized name (may be empty)

    Examples:
        >>> clean_counterparty_name("ร้านกาแฟ  ดอยช้าง (01234)")
        'ร้านกาแฟ ดอยช้าง'
        >>> clean_counterparty_name("15 JAN STARBUCKS")
        'STARBUCKS'
    """
    if not name:
        return ''
    name = _LEADING_DATE.sub('', name)
    name = _BRANCH_CODE.sub(' ', name)
    name = ' '.join(name.split())
    # Trim separator noise left by OCR at either end
    return name.strip(' -:|,')
