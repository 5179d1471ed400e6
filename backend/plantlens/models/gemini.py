"""Gemini wrapper: plant species, health and care analysis of a single image."""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from plantlens.errors import AnalysisError

logger = logging.getLogger(__name__)

NO_ANALYSIS_TEXT = "No analysis available."
ANALYSIS_FAILED_MESSAGE = "Failed to analyze image with Google Generative AI."

# ---------------------------------------------------------------------------
# Mock helpers
# ---------------------------------------------------------------------------

_MOCK_SPECIES = [
    "Boston fern (Nephrolepis exaltata)",
    "Snake plant (Dracaena trifasciata)",
    "Pothos (Epipremnum aureum)",
    "Peace lily (Spathiphyllum wallisii)",
    "Monstera (Monstera deliciosa)",
    "Spider plant (Chlorophytum comosum)",
    "Rubber plant (Ficus elastica)",
    "ZZ plant (Zamioculcas zamiifolia)",
]
_MOCK_HEALTH = [
    "Healthy: foliage is uniformly green with no visible lesions or pests.",
    "Mild stress: slight yellowing at leaf margins suggests irregular watering.",
    "Moderate stress: browning tips and drooping indicate low humidity.",
    "Possible fungal leaf spot: small dark lesions with yellow halos on older leaves.",
]
_MOCK_CARE = [
    "Keep in bright, indirect light and water when the top 2-3 cm of soil is dry.",
    "Increase humidity by misting or grouping plants; avoid cold drafts.",
    "Remove affected leaves, improve air circulation and avoid wetting foliage.",
    "Feed monthly with a balanced liquid fertilizer during the growing season.",
]


def _pick(seed: bytes, dimension: str, options: list[str]) -> str:
    """Deterministically pick one option for *seed* and *dimension*."""
    h = hashlib.sha256(dimension.encode() + b":" + seed).hexdigest()
    return options[int(h[:8], 16) % len(options)]


def _mock_analysis(image_bytes: bytes) -> str:
    """Return a plausible analysis; the same image always gets the same text."""
    return "\n".join([
        f"**Species:** {_pick(image_bytes, 'species', _MOCK_SPECIES)}",
        "",
        f"**Health:** {_pick(image_bytes, 'health', _MOCK_HEALTH)}",
        "",
        f"**Care recommendations:** {_pick(image_bytes, 'care', _MOCK_CARE)}",
    ])


def extract_text(response: Any) -> str:
    """Pull the first text part out of a ``generate_content`` response."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return NO_ANALYSIS_TEXT
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return NO_ANALYSIS_TEXT
    return getattr(parts[0], "text", None) or NO_ANALYSIS_TEXT


# ---------------------------------------------------------------------------
# Wrapper
# ---------------------------------------------------------------------------

class GeminiWrapper:
    """Thin wrapper around the Google GenAI client."""

    def __init__(
        self, api_key: str | None, model_name: str, prompt: str, *, mock: bool = False,
    ) -> None:
        self.api_key = api_key or ""
        self.model_name = model_name
        self.prompt = prompt
        self.mock = mock
        self._client: Any = None

    @property
    def configured(self) -> bool:
        return self.mock or bool(self.api_key)

    def load(self) -> None:
        if self.mock:
            logger.info("Gemini running in MOCK mode.")
            return
        if not self.api_key:
            logger.warning("GOOGLE_API_KEY is not set; /analyze will be unavailable.")
            return
        from google import genai

        logger.info("Creating Gemini client for model %s ...", self.model_name)
        self._client = genai.Client(api_key=self.api_key)

    async def analyze(self, image_bytes: bytes, mime_type: str) -> str:
        """Analyze a plant image. Raises AnalysisError on any SDK failure."""
        if self.mock:
            return _mock_analysis(image_bytes)

        from google.genai import types

        try:
            if self._client is None:
                raise RuntimeError("Gemini client not loaded.")
            response = await self._client.aio.models.generate_content(
                model=self.model_name,
                contents=[
                    types.Content(
                        role="user",
                        parts=[
                            types.Part.from_text(text=self.prompt),
                            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                        ],
                    )
                ],
            )
        except Exception as exc:
            logger.exception("Error analyzing image with %s", self.model_name)
            raise AnalysisError("Image analysis failed", ANALYSIS_FAILED_MESSAGE) from exc

        return extract_text(response)
