"""API routes: analysis and report download endpoints."""

from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from starlette.datastructures import UploadFile

from plantlens.api.responses import TempFileResponse
from plantlens.config import Settings, get_settings
from plantlens.errors import ConfigurationError, ValidationError
from plantlens.models.gemini import GeminiWrapper
from plantlens.schemas.plant import AnalysisResponse, ErrorResponse, ReportRequest
from plantlens.services.analysis import analyze_upload
from plantlens.services.report import build_report

logger = logging.getLogger(__name__)
router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

# The upload is read from the raw form so that a text field named "image"
# counts as a missing file rather than a malformed request.
_IMAGE_FORM = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {"image": {"type": "string", "format": "binary"}},
                },
            },
        },
    },
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_analyzer(request: Request) -> GeminiWrapper:
    """The analyzer built during startup and stored on ``app.state``."""
    return request.app.state.analyzer


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

@router.post(
    "/analyze", response_model=AnalysisResponse, responses=_ERRORS, openapi_extra=_IMAGE_FORM,
)
async def analyze(
    request: Request,
    analyzer: GeminiWrapper = Depends(get_analyzer),
    settings: Settings = Depends(get_settings),
) -> AnalysisResponse:
    async with request.form() as form:
        image = form.get("image")
        if not isinstance(image, UploadFile):
            raise ValidationError("No image file uploaded")

        if not analyzer.configured:
            raise ConfigurationError("Google API key is not configured")

        return await analyze_upload(image, analyzer, settings.UPLOAD_DIR)


# ---------------------------------------------------------------------------
# Report download
# ---------------------------------------------------------------------------

@router.post("/download", response_class=TempFileResponse, responses=_ERRORS)
def download_report(
    body: Any = Body(None),
    settings: Settings = Depends(get_settings),
) -> TempFileResponse:
    # Non-object bodies carry no fields and render the fallback report.
    report = ReportRequest.model_validate(body) if isinstance(body, dict) else ReportRequest()
    path = build_report(
        report.result_text(),
        report.image,
        settings.REPORTS_DIR,
        compress=settings.REPORT_PAGE_COMPRESSION,
    )
    logger.info("Sending report %s.", os.path.basename(path))
    return TempFileResponse(
        path,
        media_type="application/pdf",
        filename=os.path.basename(path),
    )
