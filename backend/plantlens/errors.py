"""Error taxonomy shared by the route handlers.

Every error carries the HTTP status it maps to and renders to the
``{"error": ..., "message": ...}`` body returned to clients.
"""

from __future__ import annotations

from typing import Any


class PlantLensError(Exception):
    status_code: int = 500

    def __init__(self, error: str, message: str | None = None) -> None:
        super().__init__(message or error)
        self.error = error
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class ValidationError(PlantLensError):
    """Missing or empty client input."""

    status_code = 400


class ConfigurationError(PlantLensError):
    """A required credential or setting is absent."""


class AnalysisError(PlantLensError):
    """The external analysis call failed."""


class RenderError(PlantLensError):
    """The PDF report could not be generated or sent."""
