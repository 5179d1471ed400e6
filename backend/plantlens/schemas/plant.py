"""Pydantic models for request / response validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class AnalysisResponse(BaseModel):
    result: str
    image: str  # data:<mime>;base64,<payload>


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class ReportRequest(BaseModel):
    # Any JSON value is accepted; only presence is checked.
    result: Any = None
    image: Any = None  # data URL as returned by /analyze

    def result_text(self) -> str | None:
        return str(self.result) if self.result else None


# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    error: str
    message: str | None = None


class HealthResponse(BaseModel):
    status: str
    mock_mode: bool
    model: str
