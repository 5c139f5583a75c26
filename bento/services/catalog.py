"""
Static configuration tables for classification and extraction.

The category catalog is the versioned keyword/weight table consumed by
CategoryClassifier. The remaining tables are small lookups used by the chat
parser (category hints), the statement scanner (brand simplification) and
the amount extractor (bank-specific amount labels).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from bento.models.category import CategoryCatalog, CategoryRule

logger = logging.getLogger(__name__)


DEFAULT_CATALOG = CategoryCatalog(
    version="1",
    rules=[
        CategoryRule(
            name="อาหาร",
            weight=1.0,
            keywords=[
                'ข้าว', 'กิน', 'อาหาร', 'กาแฟ', 'ก๋วยเตี๋ยว', 'ชานม', 'ขนม',
                'ร้านอาหาร', 'ชาบู', 'หมูกระทะ', 'ส้มตำ', 'บุฟเฟ่ต์', 'เครื่องดื่ม',
                'food', 'coffee', 'cafe', 'restaurant', 'starbucks', 'kfc',
                'mcdonald', 'grabfood', 'lineman', 'foodpanda', 'amazon cafe',
            ],
        ),
        CategoryRule(
            name="เดินทาง",
            weight=1.0,
            keywords=[
                'รถ', 'แท็กซี่', 'น้ำมัน', 'ทางด่วน', 'วินมอเตอร์ไซค์', 'ค่าโดยสาร',
                'ปตท', 'บางจาก', 'เชลล์', 'จอดรถ', 'ตั๋ว',
                'taxi', 'bts', 'mrt', 'grab', 'bolt', 'ptt', 'shell', 'bangchak',
                'esso', 'caltex', 'parking', 'fuel', 'airasia',
            ],
        ),
        CategoryRule(
            name="ช้อปปิ้ง",
            weight=0.8,
            keywords=[
                'ซื้อ', 'เสื้อ', 'รองเท้า', 'กระเป๋า', 'ห้าง', 'เซ็นทรัล', 'โลตัส',
                'บิ๊กซี', 'เซเว่น', 'แม็คโคร',
                'shopee', 'lazada', 'central', 'lotus', 'big c', '7-eleven',
                'makro', 'uniqlo', 'shop', 'mall',
            ],
        ),
        CategoryRule(
            name="บันเทิง",
            weight=1.0,
            keywords=[
                'หนัง', 'เกม', 'คอนเสิร์ต', 'เที่ยว', 'คาราโอเกะ', 'ปาร์ตี้',
                'เหล้า', 'เบียร์', 'สลาก', 'สลากกินแบ่ง', 'ลอตเตอรี่',
                'netflix', 'spotify', 'youtube', 'game', 'steam', 'major',
                'sf cinema', 'karaoke', 'lottery', 'concert',
            ],
        ),
        CategoryRule(
            name="บิล",
            weight=1.2,
            keywords=[
                'ค่าไฟ', 'ค่าน้ำ', 'การไฟฟ้า', 'การประปา', 'ค่าเน็ต', 'ค่าโทรศัพท์',
                'ค่าเช่า', 'ค่าส่วนกลาง', 'บิล',
                'internet', 'electricity', 'water bill', 'truemove', 'true online',
                'ais', 'dtac', '3bb', 'bill payment',
            ],
        ),
        CategoryRule(
            name="สุขภาพ",
            weight=1.2,
            keywords=[
                'โรงพยาบาล', 'คลินิก', 'ค่ายา', 'ซื้อยา', 'ร้านขายยา', 'หมอ',
                'ทำฟัน', 'ฟิตเนส',
                'hospital', 'clinic', 'pharmacy', 'dental', 'boots', 'watsons',
                'fitness',
            ],
        ),
        CategoryRule(
            name="ประกัน",
            weight=1.5,
            keywords=[
                'ประกัน', 'เบี้ยประกัน', 'เอไอเอ', 'เมืองไทยประกัน', 'วิริยะ',
                'อลิอันซ์', 'กรุงเทพประกัน',
                'insurance', 'aia', 'allianz', 'tokio marine', 'fwd',
            ],
        ),
        CategoryRule(
            name="การศึกษา",
            weight=1.0,
            keywords=[
                'ค่าเทอม', 'หนังสือ', 'คอร์ส', 'เรียน', 'มหาวิทยาลัย', 'โรงเรียน',
                'course', 'tuition', 'school', 'university', 'udemy',
            ],
        ),
        CategoryRule(
            name="โอนเงิน",
            weight=0.5,
            keywords=[
                'โอน', 'พร้อมเพย์',
                'transfer', 'promptpay',
            ],
        ),
    ],
)


# Chat hint marker → hint word → category.
# "กาแฟ 60 หมวดบันเทิง" forces บันเทิง regardless of keyword scores.
HINT_MARKER_PATTERN = r'(?:หมวดหมู่|หมวด|#|cat:)\s*[:：]?\s*(\S+)'

CATEGORY_HINTS: List[Tuple[str, str]] = [
    ('อาหาร', 'อาหาร'),
    ('กิน', 'อาหาร'),
    ('food', 'อาหาร'),
    ('เดินทาง', 'เดินทาง'),
    ('รถ', 'เดินทาง'),
    ('travel', 'เดินทาง'),
    ('ช้อป', 'ช้อปปิ้ง'),
    ('shopping', 'ช้อปปิ้ง'),
    ('บันเทิง', 'บันเทิง'),
    ('เที่ยว', 'บันเทิง'),
    ('fun', 'บันเทิง'),
    ('บิล', 'บิล'),
    ('bill', 'บิล'),
    ('สุขภาพ', 'สุขภาพ'),
    ('health', 'สุขภาพ'),
    ('ประกัน', 'ประกัน'),
    ('insurance', 'ประกัน'),
    ('เรียน', 'การศึกษา'),
    ('การศึกษา', 'การศึกษา'),
    ('education', 'การศึกษา'),
    ('โอน', 'โอนเงิน'),
    ('transfer', 'โอนเงิน'),
    ('อื่น', 'other'),
    ('other', 'other'),
]


# Statement merchant → canonical label. First match wins.
BRAND_ALIASES: List[Tuple[str, str]] = [
    # Fuel stations
    ('ptt', 'ปตท.'),
    ('ปตท', 'ปตท.'),
    ('shell', 'Shell'),
    ('เชลล์', 'Shell'),
    ('bangchak', 'บางจาก'),
    ('บางจาก', 'บางจาก'),
    ('esso', 'Esso'),
    ('เอสโซ่', 'Esso'),
    ('caltex', 'Caltex'),
    ('คาลเท็กซ์', 'Caltex'),
    # Insurers
    ('muang thai life', 'เมืองไทยประกันชีวิต'),
    ('เมืองไทยประกัน', 'เมืองไทยประกันชีวิต'),
    ('aia', 'AIA'),
    ('เอไอเอ', 'AIA'),
    ('allianz', 'อลิอันซ์ อยุธยา'),
    ('อลิอันซ์', 'อลิอันซ์ อยุธยา'),
    ('viriyah', 'วิริยะประกันภัย'),
    ('วิริยะ', 'วิริยะประกันภัย'),
    ('tokio marine', 'โตเกียวมารีน'),
    # Retail
    ('7-eleven', '7-Eleven'),
    ('7-11', '7-Eleven'),
    ('เซเว่น', '7-Eleven'),
    ('lotus', "Lotus's"),
    ('โลตัส', "Lotus's"),
    ('shopee', 'Shopee'),
    ('lazada', 'Lazada'),
    ('grab', 'Grab'),
    ('lineman', 'LINE MAN'),
]


@dataclass(frozen=True)
class BankProfile:
    """A bank's brand tokens and the amount labels its slips use."""
    code: str
    tokens: Tuple[str, ...]
    amount_keywords: Tuple[str, ...] = field(default_factory=tuple)


BANKS: List[BankProfile] = [
    BankProfile('KBANK', ('กสิกร', 'kbank', 'k plus', 'kasikorn', 'make by kbank'), ('จำนวน:',)),
    BankProfile('SCB', ('ไทยพาณิชย์', 'scb', 'siam commercial'), ('จำนวนเงิน',)),
    BankProfile('KTB', ('กรุงไทย', 'krungthai', 'krung thai'), ('จำนวนเงิน (บาท)', 'จำนวนเงินที่โอน')),
    BankProfile('BBL', ('ธ.กรุงเทพ', 'ธนาคารกรุงเทพ', 'bangkok bank', 'bualuang'), ('จำนวนเงิน', 'amount')),
    BankProfile('BAY', ('กรุงศรี', 'krungsri', 'ayudhya'), ('จำนวนเงินโอน',)),
    BankProfile('TTB', ('ทหารไทยธนชาต', 'ttb', 'tmbthanachart'), ('จำนวนเงิน',)),
    BankProfile('GSB', ('ออมสิน', 'gsb', 'mymo'), ('จำนวนเงิน',)),
    BankProfile('TRUEMONEY', ('truemoney', 'ทรูมันนี่'), ('ยอดชำระ', 'จำนวนเงิน')),
]


def simplify_brand(name: str) -> str:
    """Collapse known brand variants to one canonical label."""
    lowered = name.lower()
    for alias, label in BRAND_ALIASES:
        if alias in lowered:
            return label
    return name


def load_catalog(path: Optional[str] = None) -> CategoryCatalog:
    """
    Load the category catalog.

    Args:
        path: Optional JSON file with {"version": ..., "rules": [...]}

    Returns:
        Built-in catalog when path is None, otherwise the parsed file
    """
    if not path:
        return DEFAULT_CATALOG

    raw = Path(path).read_text(encoding='utf-8')
    catalog = CategoryCatalog.model_validate(json.loads(raw))
    logger.info("Loaded category catalog", extra={
        "path": path,
        "version": catalog.version,
        "categories": len(catalog.rules)
    })
    return catalog
