"""
Candidate dataclasses for amount extraction scoring.

Each candidate represents a potential extracted amount with the metadata
used for ranking and for explaining the choice in debug output.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class AmountTier(Enum):
    """
    Strategy tier that produced a candidate, with its base score.

    KEYWORD: number following a total/amount phrase ("ยอดรวม 1,250.50")
    UNIT: number immediately followed by a currency unit ("1,250.50 บาท")
    GENERIC: any other numeric token, scored by heuristics
    """
    KEYWORD = 100
    UNIT = 80
    GENERIC = 0


@dataclass
class AmountCandidate:
    """
    Candidate for an extracted amount.

    Scoring factors:
    - tier: Base score of the strategy that found it
    - has_decimal: Token carries a decimal point (generic tier bonus)
    - unit_in_text: A currency unit appears anywhere in the text (generic tier bonus)
    - is_small_integer: Short integer likely to be a reference digit (generic tier penalty)
    """
    value: Decimal
    pattern_name: str
    match_span: tuple[int, int]  # (start, end) of the number itself
    tier: AmountTier
    score: int = 0
    raw_text: str = ""
    has_decimal: bool = False
    unit_in_text: bool = False
    is_small_integer: bool = False


# Generic-tier heuristics
DECIMAL_BONUS = 30
UNIT_IN_TEXT_BONUS = 20
SMALL_INTEGER_PENALTY = -50
SMALL_INTEGER_THRESHOLD = Decimal('100')


def create_amount_candidate(
    value: Decimal,
    pattern_name: str,
    match_span: tuple[int, int],
    raw_text: str,
    tier: AmountTier,
    unit_in_text: bool = False
) -> AmountCandidate:
    """
    Create AmountCandidate with its score computed from the tier.

    Keyword and unit tiers use their fixed base score. Generic tokens start
    at zero and collect the heuristic bonuses and penalties.

    Args:
        value: Parsed amount
        pattern_name: Name of pattern that matched
        match_span: Character span of the number
        raw_text: Original matched text
        tier: Strategy tier
        unit_in_text: Whether a currency unit appears anywhere in the text

    Returns:
        AmountCandidate with score and flags set
    """
    has_decimal = '.' in raw_text
    is_small_integer = not has_decimal and value < SMALL_INTEGER_THRESHOLD

    score = tier.value
    if tier == AmountTier.GENERIC:
        if has_decimal:
            score += DECIMAL_BONUS
        if unit_in_text:
            score += UNIT_IN_TEXT_BONUS
        if is_small_integer:
            score += SMALL_INTEGER_PENALTY

    return AmountCandidate(
        value=value,
        pattern_name=pattern_name,
        match_span=match_span,
        tier=tier,
        score=score,
        raw_text=raw_text,
        has_decimal=has_decimal,
        unit_in_text=unit_in_text,
        is_small_integer=is_small_integer,
    )
