"""Temp-file handling for uploaded images."""

from __future__ import annotations

import logging
import os
import re
import shutil
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

logger = logging.getLogger(__name__)

# Longest extension kept from the client's filename, dot included.
MAX_SUFFIX_LENGTH = 10

_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]+$")


def safe_suffix(filename: str | None) -> str:
    """Return the client's file extension if it is short and alphanumeric, else ''."""
    if not filename:
        return ""
    suffix = Path(filename).suffix
    if len(suffix) > MAX_SUFFIX_LENGTH or not _SAFE_SUFFIX.match(suffix):
        return ""
    return suffix.lower()


def save_upload(file: UploadFile, upload_dir: str) -> str:
    """Save an uploaded file to *upload_dir* and return its path.

    The stored name is generated; only a short extension is taken from the
    client's filename.
    """
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    filename = f"{ts}_{uuid.uuid4().hex}{safe_suffix(file.filename)}"
    os.makedirs(upload_dir, exist_ok=True)
    dest = os.path.join(upload_dir, filename)
    file.file.seek(0)
    with open(dest, "wb") as f:
        shutil.copyfileobj(file.file, f)
    return dest


def read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def discard(path: str) -> None:
    """Remove a temp file; a file that is already gone is not an error."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not delete temp file %s: %s", path, exc)


@asynccontextmanager
async def temp_upload(file: UploadFile, upload_dir: str) -> AsyncIterator[str]:
    """Persist *file* for the duration of the block, then delete it.

    Disk I/O runs on the threadpool so the event loop is never blocked.
    """
    path = await run_in_threadpool(save_upload, file, upload_dir)
    try:
        yield path
    finally:
        await run_in_threadpool(discard, path)
