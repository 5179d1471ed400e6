"""FastAPI application entry point for PlantLens."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from plantlens.api.routes import router
from plantlens.config import settings
from plantlens.errors import PlantLensError
from plantlens.models.gemini import GeminiWrapper
from plantlens.schemas.plant import HealthResponse

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def load_analyzer() -> GeminiWrapper:
    """Build the Gemini client from settings."""
    analyzer = GeminiWrapper(
        settings.GOOGLE_API_KEY,
        settings.GEMINI_MODEL,
        settings.ANALYSIS_PROMPT,
        mock=settings.MOCK_MODELS,
    )
    analyzer.load()
    return analyzer


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    logger.info("Starting PlantLens API (mock=%s, model=%s).", settings.MOCK_MODELS, settings.GEMINI_MODEL)
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.state.analyzer = load_analyzer()

    yield

    # Shutdown
    logger.info("Shutting down PlantLens API.")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PlantLens API",
    version="0.1.0",
    description="Plant species and health analysis powered by Google Gemini.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > settings.MAX_BODY_BYTES:
        logger.warning("Rejected %s %s: body of %s bytes.", request.method, request.url.path, length)
        return JSONResponse(status_code=413, content={"error": "Request body too large"})
    return await call_next(request)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

@app.exception_handler(PlantLensError)
async def plantlens_error_handler(request: Request, exc: PlantLensError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s invalid request: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(router)


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        mock_mode=settings.MOCK_MODELS,
        model=settings.GEMINI_MODEL,
    )


# Mounted last so the API routes above take precedence over "/".
os.makedirs(settings.PUBLIC_DIR, exist_ok=True)
app.mount("/", StaticFiles(directory=settings.PUBLIC_DIR, html=True), name="public")


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
