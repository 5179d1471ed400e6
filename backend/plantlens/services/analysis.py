"""Upload-and-analyze pipeline used by ``POST /analyze``."""

from __future__ import annotations

import base64
import logging

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from plantlens.errors import AnalysisError, ValidationError
from plantlens.models.gemini import GeminiWrapper
from plantlens.schemas.plant import AnalysisResponse
from plantlens.services.uploads import read_file, temp_upload

logger = logging.getLogger(__name__)

UPLOAD_FAILED_MESSAGE = "Could not store the uploaded image."


def to_data_url(mime_type: str, encoded: str) -> str:
    return f"data:{mime_type};base64,{encoded}"


async def analyze_upload(
    image: UploadFile, analyzer: GeminiWrapper, upload_dir: str,
) -> AnalysisResponse:
    """Persist the upload, run it through the analyzer and build the response.

    The temp file is removed on every exit path, including validation
    failures and analyzer errors.
    """
    mime_type = image.content_type or "application/octet-stream"
    try:
        async with temp_upload(image, upload_dir) as path:
            image_bytes = await run_in_threadpool(read_file, path)
            if not image_bytes:
                raise ValidationError("Could not read image file")

            logger.info(
                "Analyzing %s (%s, %d bytes).", image.filename, mime_type, len(image_bytes),
            )
            result = await analyzer.analyze(image_bytes, mime_type)
    except OSError as exc:
        logger.exception("Failed to persist or read upload %s", image.filename)
        raise AnalysisError("Image analysis failed", UPLOAD_FAILED_MESSAGE) from exc

    encoded = base64.b64encode(image_bytes).decode("ascii")
    return AnalysisResponse(result=result, image=to_data_url(mime_type, encoded))
