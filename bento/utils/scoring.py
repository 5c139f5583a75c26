"""
Ranking of amount candidates.

All tie-break and override rules live in one comparator so the choice
between strategy tiers is visible in one place:

1. Unit-anchored candidates ("1,250.50 บาท") rank above everything else,
   including keyword-anchored ones with a higher score.
2. Higher score first.
3. Larger value first.
"""

from typing import List, Optional, Tuple

from .candidates import AmountCandidate, AmountTier

__all__ = ['amount_rank_key', 'rank_amounts', 'select_best_amount', 'select_top_amounts']


def amount_rank_key(candidate: AmountCandidate) -> Tuple[int, int, object]:
    """Sort key: ascending order puts the best candidate first."""
    unit_override = 0 if candidate.tier == AmountTier.UNIT else 1
    return (unit_override, -candidate.score, -candidate.value)


def rank_amounts(candidates: List[AmountCandidate]) -> List[AmountCandidate]:
    """Return candidates ordered best-first."""
    return sorted(candidates, key=amount_rank_key)


def select_best_amount(candidates: List[AmountCandidate]) -> Optional[AmountCandidate]:
    """
    Select best amount candidate.

    Args:
        candidates: List of AmountCandidate objects

    Returns:
        Best candidate or None if there are none
    """
    if not candidates:
        return None
    return rank_amounts(candidates)[0]


def select_top_amounts(
    candidates: List[AmountCandidate],
    top_n: int = 3
) -> List[AmountCandidate]:
    """Select top N amount candidates for debug output."""
    return rank_amounts(candidates)[:top_n]
