"""Review router -- archive upload endpoints.

``POST /analyze``  heuristic quality report (no LLM involved)
``POST /review``   per-file review text from the text-generation service

Both take a multipart body with the archive in the ``zipFile`` field.
The saved upload is deleted when the request finishes, whatever the
outcome; the extraction directory is handled by the pipeline.
"""

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, UploadFile

from zipreview.api.deps import get_settings, get_text_generator
from zipreview.clients.archive import remove_path, save_upload
from zipreview.clients.llm_client import TextGenerator
from zipreview.config import Settings
from zipreview.errors import (
    MissingUploadError,
    PipelineError,
    ReviewError,
    UploadTooLargeError,
)
from zipreview.schemas import QualityReport, ReviewResponse
from zipreview.services.review_pipeline import analyze_archive, review_archive

logger = logging.getLogger(__name__)
router = APIRouter(tags=["review"])


async def _store_upload(archive: UploadFile | None, current_settings: Settings) -> Path:
    """Validate the multipart archive and write it to ``UPLOAD_DIR``."""
    if archive is None or not archive.filename:
        raise MissingUploadError()
    try:
        data = await archive.read()
    finally:
        await archive.close()
    if not data:
        raise MissingUploadError("Uploaded file is empty")
    if len(data) > current_settings.MAX_UPLOAD_BYTES:
        raise UploadTooLargeError(len(data), current_settings.MAX_UPLOAD_BYTES)

    path = await asyncio.to_thread(save_upload, data, current_settings.UPLOAD_DIR)
    logger.info("[Review] Received %s (%d bytes)", archive.filename, len(data))
    return path


@router.post("/analyze", response_model=QualityReport)
async def analyze(
    archive: UploadFile | None = File(None, alias="zipFile"),
    description: str | None = Form(None, max_length=2000),
    current_settings: Settings = Depends(get_settings),
) -> QualityReport:
    """Extract the uploaded archive and return a heuristic quality report."""
    upload_path = await _store_upload(archive, current_settings)
    try:
        return await asyncio.to_thread(
            analyze_archive, upload_path, current_settings, description,
        )
    except ReviewError:
        raise
    except Exception as exc:
        logger.exception("Analysis failed for upload %s", upload_path.name)
        raise PipelineError(
            "Something went wrong during analysis",
            details=f"{type(exc).__name__}: {exc}",
        ) from exc
    finally:
        await asyncio.to_thread(remove_path, upload_path)


@router.post("/review", response_model=ReviewResponse)
async def review(
    archive: UploadFile | None = File(None, alias="zipFile"),
    prompt: str | None = Form(None, max_length=4000),
    current_settings: Settings = Depends(get_settings),
    generator: TextGenerator = Depends(get_text_generator),
) -> ReviewResponse:
    """Extract the uploaded archive and ask the LLM to review each file."""
    upload_path = await _store_upload(archive, current_settings)
    try:
        return await review_archive(upload_path, current_settings, generator, prompt)
    except ReviewError:
        raise
    except Exception as exc:
        logger.exception("Review failed for upload %s", upload_path.name)
        raise PipelineError(
            "Something went wrong during review",
            details=f"{type(exc).__name__}: {exc}",
        ) from exc
    finally:
        await asyncio.to_thread(remove_path, upload_path)
