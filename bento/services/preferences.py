"""
Learned counterparty → category overrides.

When a user corrects the category of a transaction, the counterparty name is
remembered so the next slip from the same receiver lands in the corrected
category without keyword scoring.
"""

import logging
from typing import Dict, Iterable, Optional, Tuple, TYPE_CHECKING

from bento.models.transaction import TransactionBase, TransactionKind
from bento.utils.names import clean_counterparty_name

if TYPE_CHECKING:
    from bento.services.extractors import ReceiverExtractor

logger = logging.getLogger(__name__)

# Names this short are too ambiguous to learn from
MIN_COUNTERPARTY_LENGTH = 3


def normalize_counterparty(name: Optional[str]) -> str:
    """Preference-map key for a counterparty name."""
    return clean_counterparty_name(name or '')


class PreferenceStore:
    """Storage backend for the preference map."""

    def get(self, counterparty: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, counterparty: str, category: str) -> None:
        raise NotImplementedError

    def items(self) -> Iterable[Tuple[str, str]]:
        raise NotImplementedError


class InMemoryPreferenceStore(PreferenceStore):
    """Dict-backed store, used in tests and when no database is configured."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, counterparty: str) -> Optional[str]:
        return self._data.get(counterparty)

    def set(self, counterparty: str, category: str) -> None:
        self._data[counterparty] = category

    def items(self) -> Iterable[Tuple[str, str]]:
        return list(self._data.items())


class SupabasePreferenceStore(PreferenceStore):
    """
    Supabase-backed store.

    The whole table is loaded once at construction; every set() is upserted
    immediately so preferences survive restarts.

    Table schema: counterparty (text, primary key), category (text)
    """

    def __init__(self, client, table: str = 'category_preferences'):
        self.supabase = client
        self.table = table
        self._cache: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        response = self.supabase.table(self.table).select('counterparty, category').execute()
        self._cache = {row['counterparty']: row['category'] for row in response.data}
        logger.info("Loaded category preferences", extra={
            "table": self.table,
            "count": len(self._cache)
        })

    def get(self, counterparty: str) -> Optional[str]:
        return self._cache.get(counterparty)

    def set(self, counterparty: str, category: str) -> None:
        self.supabase.table(self.table).upsert(
            {'counterparty': counterparty, 'category': category},
            on_conflict='counterparty'
        ).execute()
        self._cache[counterparty] = category

    def items(self) -> Iterable[Tuple[str, str]]:
        return list(self._cache.items())


class PreferenceLearner:
    """Records and looks up user category corrections per counterparty."""

    def __init__(
        self,
        store: Optional[PreferenceStore] = None,
        receiver_extractor: Optional["ReceiverExtractor"] = None
    ):
        self.store = store if store is not None else InMemoryPreferenceStore()
        self.receiver_extractor = receiver_extractor

    def record(self, counterparty: str, category: str) -> bool:
        """
        Map a counterparty to a category, overwriting any earlier mapping.

        Args:
            counterparty: Receiver/merchant name
            category: Category chosen by the user

        Returns:
            True if stored, False if the name is unusable
        """
        key = normalize_counterparty(counterparty)
        if len(key) < MIN_COUNTERPARTY_LENGTH or not category:
            logger.debug("Skipping preference for short counterparty", extra={
                "counterparty": counterparty
            })
            return False

        self.store.set(key, category)
        logger.info("Recorded category preference", extra={
            "counterparty": key,
            "category": category
        })
        return True

    def lookup(self, counterparty: Optional[str]) -> Optional[str]:
        """Learned category for a counterparty, or None."""
        key = normalize_counterparty(counterparty)
        if not key:
            return None
        return self.store.get(key)

    def counterparty_for(self, transaction: TransactionBase) -> Optional[str]:
        """Stored counterparty, or the receiver found in the note."""
        if transaction.counterparty_name:
            return transaction.counterparty_name
        if self.receiver_extractor is not None:
            return self.receiver_extractor.extract(transaction.note)
        return None

    def learn_from_edit(
        self,
        transaction: TransactionBase,
        original_category: str,
        new_category: str
    ) -> bool:
        """
        Feed a user's category correction back into the preference map.

        The counterparty comes from the stored field, or failing that from
        running the receiver extractor over the transaction note.

        Returns:
            True if a preference was recorded
        """
        if new_category == original_category:
            return False
        if transaction.kind == TransactionKind.INCOME:
            return False

        counterparty = self.counterparty_for(transaction)
        if not counterparty:
            logger.debug("No counterparty recoverable from edited transaction", extra={
                "note": transaction.note
            })
            return False

        return self.record(counterparty, new_category)
