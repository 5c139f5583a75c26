"""
Shared money parsing utilities for baht amounts.

Handles the formats seen on Thai slips and in chat input:
- Thousands separators: 1,250.50
- Missing decimals: 1250 → 1250
- OCR noise around the number: "฿1,250.50", "1,250.50บาท"
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re

# Currency-unit tokens that may trail (or, for ฿, lead) an amount
CURRENCY_UNIT_PATTERN = r'(?:บาท|บ\.|THB|baht|฿)'

# Largest amount accepted from a slip or chat message
MAX_AMOUNT = Decimal('100000000')


def parse_money(
    amount_str: str,
    allow_zero: bool = True,
    max_amount: Optional[Decimal] = MAX_AMOUNT
) -> Optional[Decimal]:
    """
    Parse a money string into a Decimal.

    Args:
        amount_str: String containing an amount (e.g., "1,250.50", "฿60")
        allow_zero: Whether a zero amount is a valid result
        max_amount: Upper sanity limit, None to accept any size

    Returns:
        Decimal amount or None if parsing fails

    Examples:
        >>> parse_money("1,250.50")
        Decimal('1250.50')
        >>> parse_money("60 บาท")
        Decimal('60')
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    cleaned = re.sub(CURRENCY_UNIT_PATTERN, '', amount_str, flags=re.IGNORECASE)
    cleaned = cleaned.replace(',', '').replace(' ', '').strip()

    if not cleaned:
        return None

    try:
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None

    if not result.is_finite() or result < 0:
        return None
    if result == 0 and not allow_zero:
        return None

    # Sanity check: reject account/phone numbers misread as amounts
    if max_amount is not None and result > max_amount:
        return None

    return result


def format_baht(amount: Optional[Decimal]) -> str:
    """
    Format an amount the way the chat assistant prints it.

    Whole amounts drop the decimals; fractional amounts keep two places.

    Examples:
        >>> format_baht(Decimal('20000'))
        '20,000'
        >>> format_baht(Decimal('1250.5'))
        '1,250.50'
    """
    if amount is None:
        return 'N/A'

    if amount == amount.to_integral_value():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"
