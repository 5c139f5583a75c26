"""
Category classifier shared by the chat parser and the slip pipeline.
"""

import logging
from typing import Dict, Optional

from bento.models.category import CategoryCatalog
from bento.models.transaction import INCOME_CATEGORY, OTHER_CATEGORY, TransactionKind
from bento.services.catalog import DEFAULT_CATALOG
from bento.services.preferences import PreferenceLearner

logger = logging.getLogger(__name__)


class CategoryClassifier:
    """
    Map free text (plus an optional counterparty) to a category label.

    Precedence:
    1. Income → fixed income label, no keyword scan
    2. Learned counterparty preference
    3. Weighted keyword score (matches × weight), first-declared rule wins ties
    4. Catch-all "other"
    """

    def __init__(
        self,
        catalog: Optional[CategoryCatalog] = None,
        preferences: Optional[PreferenceLearner] = None
    ):
        self.catalog = catalog or DEFAULT_CATALOG
        self.preferences = preferences

    def score(self, text: str) -> Dict[str, float]:
        """Keyword score per category, in catalog order."""
        lowered = (text or '').lower()
        scores: Dict[str, float] = {}
        for rule in self.catalog.rules:
            matches = sum(1 for keyword in rule.keywords if keyword.lower() in lowered)
            scores[rule.name] = matches * rule.weight
        return scores

    def classify(
        self,
        text: str,
        kind: TransactionKind = TransactionKind.EXPENSE,
        counterparty: Optional[str] = None
    ) -> str:
        """
        Classify text into a category.

        Args:
            text: Free text (chat message, OCR blob or statement row)
            kind: Income or expense
            counterparty: Optional receiver/merchant name for preference lookup

        Returns:
            Category label
        """
        if kind == TransactionKind.INCOME:
            return INCOME_CATEGORY

        if counterparty and self.preferences is not None:
            learned = self.preferences.lookup(counterparty)
            if learned:
                logger.debug("Using learned category", extra={
                    "counterparty": counterparty,
                    "category": learned
                })
                return learned

        best_name = OTHER_CATEGORY
        best_score = 0.0
        # Strict comparison keeps the first-declared category on ties
        for name, value in self.score(text).items():
            if value > best_score:
                best_name = name
                best_score = value

        return best_name
