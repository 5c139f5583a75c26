"""
Scan API router: slip images → transaction drafts for confirmation.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, TypeAdapter, ValidationError
from typing import List, Optional
import logging

from bento.config import settings
from bento.dependencies import get_ocr_service, get_pipeline
from bento.models.transaction import LedgerEntry, TransactionDraft
from bento.services.ocr import OCRService
from bento.services.slip_pipeline import SlipExtractionPipeline

router = APIRouter(prefix="/scan", tags=["scan"])
logger = logging.getLogger(__name__)

ALLOWED_TYPES = ["image/jpeg", "image/jpg", "image/png"]

_ledger_adapter = TypeAdapter(List[LedgerEntry])


class ScanResponse(BaseModel):
    drafts: List[TransactionDraft]
    errors: int


def _parse_ledger(raw: Optional[str]) -> List[LedgerEntry]:
    if not raw:
        return []
    try:
        return _ledger_adapter.validate_json(raw)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid ledger: {e.error_count()} error(s)")


@router.post("", response_model=ScanResponse)
async def scan_slips(
    files: List[UploadFile] = File(...),
    ledger: Optional[str] = Form(None),
    pipeline: SlipExtractionPipeline = Depends(get_pipeline),
    ocr: OCRService = Depends(get_ocr_service)
):
    """
    Scan one or more slip images.

    Images are processed in upload order. An image that fails OCR becomes a
    zero-amount error draft; the rest of the batch still runs.

    Args:
        files: Slip images (JPG, PNG)
        ledger: Optional JSON list of existing transactions for duplicate checks

    Returns:
        Drafts in upload order
    """
    if len(files) > settings.MAX_BATCH_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files: {len(files)}. Maximum: {settings.MAX_BATCH_SIZE}"
        )

    images = []
    for upload in files:
        if upload.content_type not in ALLOWED_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type: {upload.content_type}. Allowed: JPG, PNG"
            )

        data = await upload.read()
        size_mb = len(data) / (1024 * 1024)
        if size_mb > settings.MAX_UPLOAD_MB:
            raise HTTPException(
                status_code=400,
                detail=f"File too large: {size_mb:.2f}MB. Maximum: {settings.MAX_UPLOAD_MB}MB"
            )
        images.append(data)

    existing = _parse_ledger(ledger)

    logger.info("Scanning slip batch", extra={
        "files": len(images),
        "ledger_size": len(existing)
    })

    drafts = await pipeline.scan_batch(images, ocr, existing)
    errors = sum(1 for draft in drafts if draft.error)

    return ScanResponse(drafts=drafts, errors=errors)
