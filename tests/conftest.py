"""
Shared fixtures for the bento test suite.
"""

from datetime import date

import pytest

from bento.services.chat_parser import ChatParser
from bento.services.classifier import CategoryClassifier
from bento.services.extractors import ReceiverExtractor
from bento.services.preferences import InMemoryPreferenceStore, PreferenceLearner
from bento.services.slip_pipeline import SlipExtractionPipeline

TODAY = date(2026, 10, 19)
TODAY_BE = "19/10/2569"


# Two masked accounts: sender first, receiver second
KBANK_TRANSFER_SLIP = """ธนาคารกสิกรไทย
โอนเงินสำเร็จ
18 ต.ค. 69 14:32 น.
นาย สมชาย ใจดี
xxx-x-x1234-x
ร้านกาแฟ ดอยช้าง
xxx-x-x5678-x
จำนวน: 85.00 บาท
ค่าธรรมเนียม: 0.00 บาท
เลขที่รายการ: 015291143212ABC01234"""

CARD_STATEMENT = """ใบแจ้งยอดบัตรเครดิต
วันที่ 15/03/2567
ปตท. สาขา 01234  1,200.00 บาท
STARBUCKS CENTRAL WORLD  185.00
เมืองไทยประกันชีวิต  3,500.00 บาท
ยอดรวม 4,885.00 บาท"""


@pytest.fixture
def learner():
    return PreferenceLearner(InMemoryPreferenceStore(), receiver_extractor=ReceiverExtractor())


@pytest.fixture
def classifier(learner):
    return CategoryClassifier(preferences=learner)


@pytest.fixture
def chat_parser(classifier):
    return ChatParser(classifier)


@pytest.fixture
def pipeline(classifier):
    return SlipExtractionPipeline(classifier)
