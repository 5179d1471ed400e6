"""PDF report rendering for ``POST /download``."""

from __future__ import annotations

import base64
import io
import logging
import os
import re
import uuid
from datetime import date, datetime, timezone
from typing import Any
from xml.sax.saxutils import escape

from PIL import Image as PILImage
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer

from plantlens.errors import RenderError
from plantlens.services.uploads import discard

logger = logging.getLogger(__name__)

REPORT_TITLE = "Plant Analysis Report"
NO_ANALYSIS_TEXT = "No analysis available."
IMAGE_BOX = (500, 300)

_DATA_URL_PREFIX = re.compile(r"^data:[^,]*;base64,")


def decode_data_url(data_url: Any) -> bytes:
    """Strip the ``data:<mime>;base64,`` prefix and decode the payload."""
    if not isinstance(data_url, str):
        raise ValueError(f"Expected a data URL string, got {type(data_url).__name__}")
    return base64.b64decode(_DATA_URL_PREFIX.sub("", data_url.strip()))


def fit_within(width: float, height: float, box: tuple[float, float] = IMAGE_BOX) -> tuple[float, float]:
    """Scale (width, height) to the largest size inside *box*, keeping aspect ratio."""
    scale = min(box[0] / width, box[1] / height)
    return width * scale, height * scale


def report_filename() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"plant_analysis_report_{ts}_{uuid.uuid4().hex[:8]}.pdf"


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReportTitle", parent=base["Title"], fontSize=24, leading=30, alignment=TA_CENTER,
        ),
        "body": ParagraphStyle("ReportBody", parent=base["Normal"], fontSize=14, leading=18),
    }


def _image_flowable(data_url: Any) -> Image:
    raw = decode_data_url(data_url)
    with PILImage.open(io.BytesIO(raw)) as img:
        img.load()
        width, height = fit_within(*img.size)
    return Image(io.BytesIO(raw), width=width, height=height, hAlign="CENTER")


def render_report(
    path: str,
    result: str | None,
    image: Any = None,
    *,
    compress: bool = False,
    today: date | None = None,
) -> None:
    """Write a single report PDF to *path*."""
    styles = _styles()
    today = today or date.today()
    text = result or NO_ANALYSIS_TEXT

    story = [
        Paragraph(REPORT_TITLE, styles["title"]),
        Spacer(1, 14),
        Paragraph(f"Date: {today.strftime('%m/%d/%Y')}", styles["body"]),
        Spacer(1, 14),
        Paragraph(escape(text).replace("\n", "<br/>"), styles["body"]),
    ]
    if image:
        story.append(Spacer(1, 14))
        story.append(_image_flowable(image))

    doc = SimpleDocTemplate(
        path,
        pagesize=LETTER,
        leftMargin=50,
        rightMargin=50,
        topMargin=72,
        bottomMargin=72,
        title=REPORT_TITLE,
        pageCompression=1 if compress else 0,
    )
    doc.build(story)


def build_report(
    result: str | None, image: Any, reports_dir: str, *, compress: bool = False,
) -> str:
    """Render a report into *reports_dir* and return its path.

    Any failure removes the partial file and raises RenderError.
    """
    os.makedirs(reports_dir, exist_ok=True)
    path = os.path.join(reports_dir, report_filename())
    try:
        render_report(path, result, image, compress=compress)
    except Exception as exc:
        logger.exception("Error generating PDF report")
        discard(path)
        raise RenderError("An error occurred while generating the PDF report") from exc

    logger.info("Report written to %s (%d bytes).", path, os.path.getsize(path))
    return path
