from __future__ import annotations

import base64
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from pypdf import PdfReader

from plantlens.api.routes import get_analyzer
from plantlens.config import Settings, get_settings
from plantlens.main import app


def make_png(size: tuple[int, int] = (64, 48), color: tuple[int, int, int] = (34, 139, 34)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def pdf_text(data: bytes) -> str:
    """All text in the PDF with whitespace removed; layout may split or space runs."""
    reader = PdfReader(io.BytesIO(data))
    return compact(" ".join(page.extract_text() or "" for page in reader.pages))


def pdf_image_count(data: bytes) -> int:
    reader = PdfReader(io.BytesIO(data))
    return sum(len(page.images) for page in reader.pages)


def compact(text: str) -> str:
    return "".join(text.split())


def png_data_url(size: tuple[int, int] = (64, 48)) -> str:
    return "data:image/png;base64," + base64.b64encode(make_png(size)).decode("ascii")


class FakeAnalyzer:
    """Stands in for GeminiWrapper; records every call."""

    def __init__(self, result: str = "Healthy fern", *, configured: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.configured = configured
        self.error = error
        self.calls: list[tuple[bytes, str]] = []

    async def analyze(self, image_bytes: bytes, mime_type: str) -> str:
        self.calls.append((image_bytes, mime_type))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        UPLOAD_DIR=str(tmp_path / "upload"),
        REPORTS_DIR=str(tmp_path / "reports"),
    )


@pytest.fixture
def analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()


@pytest.fixture
def client(test_settings, analyzer):
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    yield TestClient(app)
    app.dependency_overrides.clear()
