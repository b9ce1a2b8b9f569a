"""
Upload Route

PDF uploads are text-extracted and summarized; other files are
acknowledged and discarded. Nothing is written to disk.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.errors import ValidationError
from app.dependencies import get_generation_service
from orchestration.documents import extract_pdf_text, is_pdf
from orchestration.generation import GenerationService
from schemas.response import UploadResponse


router = APIRouter(tags=["Upload"])
logger = logging.getLogger(__name__)


@router.post("/upload", response_model=UploadResponse, response_model_exclude_none=True)
async def upload(
    file: Optional[UploadFile] = File(default=None),
    service: GenerationService = Depends(get_generation_service),
) -> UploadResponse:
    if file is None or not file.filename:
        raise ValidationError("file")

    data = await file.read(settings.upload_max_bytes + 1)
    await file.close()
    if len(data) > settings.upload_max_bytes:
        raise ValidationError("file", "exceeds the upload size limit")
    logger.info(f"Received upload '{file.filename}' ({len(data)} bytes, {file.content_type})")

    if not is_pdf(file.content_type or "", file.filename):
        return UploadResponse(filename=uuid.uuid4().hex, originalname=file.filename)

    # pypdf parsing is CPU-bound; keep it off the event loop
    text = await run_in_threadpool(extract_pdf_text, data, file.filename)
    summary = await service.summarize_document(text, settings.upload_max_chars)
    return UploadResponse(extracted_text=text, summary=summary)
