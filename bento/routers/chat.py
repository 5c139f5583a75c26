"""
Chat API router: typed entries → transaction draft.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional
import logging

from bento.dependencies import get_chat_parser
from bento.models.transaction import TransactionDraft, TransactionKind
from bento.services.chat_parser import ChatParser
from bento.utils.money import format_baht

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)

NOT_UNDERSTOOD_REPLY = 'ขอโทษครับ ผมไม่เข้าใจจำนวนเงิน ลองพิมพ์ใหม่ดูนะครับ เช่น "ก๋วยเตี๋ยว 50 บาท"'


class ChatRequest(BaseModel):
    text: str


class ChatResponse(BaseModel):
    understood: bool
    reply: str
    draft: Optional[TransactionDraft] = None


@router.post("", response_model=ChatResponse)
async def parse_chat(request: ChatRequest, parser: ChatParser = Depends(get_chat_parser)):
    """
    Parse one chat message into a draft.

    Unparseable text is a normal response (understood=False), not an error,
    so the client can ask the user to rephrase.
    """
    draft = parser.parse(request.text)

    if draft is None:
        return ChatResponse(understood=False, reply=NOT_UNDERSTOOD_REPLY)

    label = 'รายรับ' if draft.kind == TransactionKind.INCOME else 'รายจ่าย'
    reply = f'บันทึก{label} {format_baht(draft.amount)} บาท เรียบร้อยแล้วครับ! ✅'
    return ChatResponse(understood=True, reply=reply, draft=draft)
