"""
Tests for the OCR field extractors.
"""

from decimal import Decimal

import pytest

from bento.services.extractors import (
    AmountExtractor,
    BankDetector,
    DateExtractor,
    ReceiverExtractor,
    ReferenceExtractor,
    keyword_regex,
)
from bento.utils.candidates import AmountTier, create_amount_candidate
from bento.utils.scoring import rank_amounts, select_best_amount

from conftest import KBANK_TRANSFER_SLIP


class TestAmountExtractor:

    def test_total_beats_masked_account(self):
        text = "ธนาคารกสิกรไทย\nจาก นาย สมชาย\nxxx-x-x1234-x\nยอดรวม 1,250.50 บาท"
        assert AmountExtractor().extract(text) == Decimal("1250.50")

    def test_unit_anchored_overrides_keyword(self):
        text = "ยอดรวม 999\nชำระ 120.00 บาท"
        assert AmountExtractor().extract(text) == Decimal("120.00")

    def test_balance_and_fee_are_ignored(self):
        text = "คงเหลือ 5,000.00 บาท\nโอน 300.00 บาท\nค่าธรรมเนียม 10.00 บาท"
        assert AmountExtractor().extract(text) == Decimal("300.00")

    def test_balance_label_after_anchor_phrase(self):
        text = "โอนเงินสำเร็จ\nจำนวนเงิน 85.00\nยอดเงินคงเหลือ 5,000.00"
        assert AmountExtractor().extract(text) == Decimal("85.00")

    def test_english_balance_label_after_anchor_phrase(self):
        text = "Amount 85.00\nTotal balance 5,000.00"
        assert AmountExtractor().extract(text) == Decimal("85.00")

    def test_fee_inside_word_is_not_blacklisted(self):
        assert AmountExtractor().extract("Starbucks coffee 80.00") == Decimal("80.00")

    def test_bank_specific_keyword(self):
        bank = BankDetector().detect(KBANK_TRANSFER_SLIP)
        assert AmountExtractor().extract(KBANK_TRANSFER_SLIP, bank=bank) == Decimal("85.00")

    def test_no_number(self):
        assert AmountExtractor().extract("โอนเงินสำเร็จ") is None

    def test_debug_lists_top_candidates(self):
        debug = {}
        AmountExtractor().extract("ยอดรวม 1,250.50 บาท\n7 รายการ", _debug=debug)

        top = debug['amount_candidates']
        assert top[0]['value'] == "1250.50"
        assert top[0]['pattern'] == "unit_anchored"
        assert len(top) <= 3


class TestAmountScoring:
    """Generic-tier heuristics and the ranking comparator."""

    def test_generic_bonuses(self):
        candidate = create_amount_candidate(
            value=Decimal("450.00"),
            pattern_name="generic_number",
            match_span=(0, 6),
            raw_text="450.00",
            tier=AmountTier.GENERIC,
            unit_in_text=True
        )
        assert candidate.score == 50

    def test_small_integer_penalty(self):
        candidate = create_amount_candidate(
            value=Decimal("12"),
            pattern_name="generic_number",
            match_span=(0, 2),
            raw_text="12",
            tier=AmountTier.GENERIC
        )
        assert candidate.is_small_integer
        assert candidate.score == -50

    def test_keyword_tier_ignores_heuristics(self):
        candidate = create_amount_candidate(
            value=Decimal("12"),
            pattern_name="keyword_anchored",
            match_span=(0, 2),
            raw_text="12",
            tier=AmountTier.KEYWORD
        )
        assert candidate.score == 100

    def test_unit_tier_ranks_first(self):
        keyword = create_amount_candidate(Decimal("999"), "keyword_anchored", (0, 3), "999", AmountTier.KEYWORD)
        unit = create_amount_candidate(Decimal("120.00"), "unit_anchored", (5, 11), "120.00", AmountTier.UNIT)

        assert select_best_amount([keyword, unit]) is unit

    def test_larger_value_breaks_score_ties(self):
        small = create_amount_candidate(Decimal("150.00"), "generic_number", (0, 6), "150.00", AmountTier.GENERIC)
        large = create_amount_candidate(Decimal("450.00"), "generic_number", (8, 14), "450.00", AmountTier.GENERIC)

        assert rank_amounts([small, large]) == [large, small]

    def test_no_candidates(self):
        assert select_best_amount([]) is None


class TestDateExtractor:

    @pytest.mark.parametrize("text,expected", [
        ("12 ม.ค. 67", "12/01/2567"),
        ("01/01/2026", "01/01/2569"),
        ("วันที่ 5 มกราคม 2567 เวลา 10:15", "05/01/2567"),
        ("3 มค 68", "03/01/2568"),
        ("18 ต.ค. 69 14:32 น.", "18/10/2569"),
        ("12 Jan 2024", "12/01/2567"),
        ("Date: 7-Mar-2024", "07/03/2567"),
        ("15/3/67", "15/03/2567"),
    ])
    def test_formats(self, text, expected):
        assert DateExtractor().extract(text) == expected

    def test_invalid_date_skipped(self):
        assert DateExtractor().extract("31/02/2567") is None

    def test_first_valid_date_wins(self):
        assert DateExtractor().extract("31/02/2567\n28/02/2567") == "28/02/2567"

    def test_no_date(self):
        assert DateExtractor().extract("โอนเงินสำเร็จ 85.00 บาท") is None


class TestReceiverExtractor:

    def test_thai_phrase(self):
        text = "โอนเงินสำเร็จ\nไปยัง ร้านกาแฟ ดอยช้าง\n85.00 บาท"
        assert ReceiverExtractor().extract(text) == "ร้านกาแฟ ดอยช้าง"

    def test_phrase_with_name_on_next_line(self):
        text = "ผู้รับเงิน\nร้านข้าวมันไก่ ประตูน้ำ\n60.00 บาท"
        assert ReceiverExtractor().extract(text) == "ร้านข้าวมันไก่ ประตูน้ำ"

    def test_english_phrase(self):
        assert ReceiverExtractor().extract("Transfer to: Coffee House\nTHB 85.00") == "Coffee House"

    def test_generic_account_words_rejected(self):
        assert ReceiverExtractor().extract("ไปยัง บัญชีออมทรัพย์") is None

    def test_second_masked_account(self):
        debug = {'patterns_matched': {}}
        result = ReceiverExtractor().extract(KBANK_TRANSFER_SLIP, _debug=debug)

        assert result == "ร้านกาแฟ ดอยช้าง"
        assert debug['patterns_matched']['receiver'] == "second_account"

    def test_bank_lines_skipped(self):
        text = (
            "ธ.กสิกรไทย\nนาย สมชาย ใจดี\nxxx-x-x1234-x\n"
            "ร้านข้าวมันไก่ ประตูน้ำ\nธ.ไทยพาณิชย์\nxxx-x-x5678-x"
        )
        assert ReceiverExtractor().extract(text) == "ร้านข้าวมันไก่ ประตูน้ำ"

    def test_name_above_single_account(self):
        text = "รายการสำเร็จ\nร้านกาแฟ ดอยช้าง\nxxx-x-x1234-x"
        assert ReceiverExtractor().extract(text) == "ร้านกาแฟ ดอยช้าง"

    def test_first_line_is_not_a_receiver(self):
        assert ReceiverExtractor().extract("ร้านกาแฟ\nxxx-x-x1234-x") is None

    def test_biller_id(self):
        text = "ชำระบิลสำเร็จ\nการไฟฟ้านครหลวง\nBiller ID: 0994000165501"
        assert ReceiverExtractor().extract(text) == "การไฟฟ้านครหลวง"

    def test_branch_code_stripped(self):
        assert ReceiverExtractor().extract("จ่ายให้ 7-Eleven สาขา 01234") == "7-Eleven"

    def test_empty(self):
        assert ReceiverExtractor().extract("") is None


class TestReferenceExtractor:

    def test_keyword_anchored(self):
        assert ReferenceExtractor().extract(KBANK_TRANSFER_SLIP) == "015291143212ABC01234"

    def test_keyword_with_value_on_next_line(self):
        text = "รหัสอ้างอิง\nAB12345678CD"
        assert ReferenceExtractor().extract(text) == "AB12345678CD"

    def test_bare_digit_fallback(self):
        assert ReferenceExtractor().extract("สำเร็จ\n2024011214351234\n85.00") == "2024011214351234"

    def test_short_reference_ignored(self):
        assert ReferenceExtractor().extract("Ref: 12345") is None


class TestBankDetector:

    @pytest.mark.parametrize("text,code", [
        ("ธนาคารกสิกรไทย", "KBANK"),
        ("SCB Easy", "SCB"),
        ("Krungthai NEXT", "KTB"),
        ("TrueMoney Wallet", "TRUEMONEY"),
    ])
    def test_detect(self, text, code):
        assert BankDetector().detect(text).code == code

    def test_earliest_token_wins(self):
        assert BankDetector().detect("โอนจาก SCB ไปยัง กสิกรไทย").code == "SCB"

    def test_unknown(self):
        assert BankDetector().detect("ร้านกาแฟ") is None

    def test_bank_line(self):
        detector = BankDetector()
        assert detector.is_bank_line("ธ.กรุงศรีอยุธยา")
        assert not detector.is_bank_line("ร้านกาแฟ ดอยช้าง")


class TestKeywordRegex:

    def test_ascii_words_need_boundaries(self):
        pattern = keyword_regex(["fee", "ค่าธรรมเนียม"])
        assert pattern.search("Transfer fee") is not None
        assert pattern.search("coffee") is None
        assert pattern.search("มีค่าธรรมเนียม") is not None
