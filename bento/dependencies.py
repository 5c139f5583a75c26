"""
Shared service instances for the API routers.

The preference store is process-wide so corrections made through one
request are visible to the classifier in the next.
"""

import logging
from functools import lru_cache

from bento.config import settings
from bento.services.catalog import load_catalog
from bento.services.chat_parser import ChatParser
from bento.services.classifier import CategoryClassifier
from bento.services.extractors import ReceiverExtractor
from bento.services.ocr import OCRService
from bento.services.preferences import (
    InMemoryPreferenceStore,
    PreferenceLearner,
    PreferenceStore,
    SupabasePreferenceStore,
)
from bento.services.slip_pipeline import SlipExtractionPipeline

logger = logging.getLogger(__name__)


@lru_cache
def get_preference_store() -> PreferenceStore:
    if settings.PREFERENCE_BACKEND == 'supabase':
        from bento.utils.supabase import get_supabase_client
        return SupabasePreferenceStore(get_supabase_client(), table=settings.PREFERENCE_TABLE)
    return InMemoryPreferenceStore()


@lru_cache
def get_learner() -> PreferenceLearner:
    return PreferenceLearner(get_preference_store(), receiver_extractor=ReceiverExtractor())


@lru_cache
def get_classifier() -> CategoryClassifier:
    return CategoryClassifier(load_catalog(settings.CATEGORY_CATALOG_PATH), get_learner())


def get_chat_parser() -> ChatParser:
    return ChatParser(get_classifier())


def get_pipeline() -> SlipExtractionPipeline:
    return SlipExtractionPipeline(get_classifier())


def get_ocr_service() -> OCRService:
    return OCRService()
