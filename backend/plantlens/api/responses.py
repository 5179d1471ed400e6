"""Response classes for temp files that must not outlive the request."""

from __future__ import annotations

import logging
import os

from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.types import Receive, Scope, Send

from plantlens.services.uploads import discard

logger = logging.getLogger(__name__)

DOWNLOAD_FAILED = "Error downloading the PDF report"


class TempFileResponse(FileResponse):
    """Stream a file, then delete it whether or not the send succeeded.

    A file that is gone before streaming starts yields a 500 JSON error.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            if not os.path.isfile(self.path):
                logger.error("Temp file %s vanished before download.", self.path)
                error = JSONResponse(status_code=500, content={"error": DOWNLOAD_FAILED})
                await error(scope, receive, send)
                return
            await super().__call__(scope, receive, send)
        finally:
            await run_in_threadpool(discard, self.path)
