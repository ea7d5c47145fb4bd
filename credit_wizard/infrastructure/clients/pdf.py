"""HTML-to-PDF rendering client (Gotenberg-compatible Chromium route)"""

import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import httpx

from credit_wizard.config import settings
from credit_wizard.domain.exceptions import ExportError
from credit_wizard.domain.ports import Artifact
from credit_wizard.infrastructure.observability.metrics import export_failure_counter, export_latency_histogram

# A4 in inches
A4_PAPER = {"paperWidth": "8.27", "paperHeight": "11.7"}

CONVERT_HTML_ROUTE = "/forms/chromium/convert/html"


class PdfRendererClient:
    """Client for an external HTML-to-PDF rendering service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.pdf_renderer_url
        self.timeout = timeout or settings.pdf_timeout_seconds
        self.transport = transport

    async def render(self, document: str) -> bytes:
        """
        Convert an HTML document to PDF bytes on an A4 page.

        Raises:
            ExportError: On timeout, HTTP errors, or a non-PDF response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with export_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}{CONVERT_HTML_ROUTE}",
                        files={"files": ("index.html", document.encode("utf-8"), "text/html")},
                        data=A4_PAPER,
                    )
                    response.raise_for_status()

            except httpx.TimeoutException as e:
                export_failure_counter.inc()
                raise ExportError(f"PDF renderer timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                export_failure_counter.inc()
                raise ExportError(f"PDF renderer error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                export_failure_counter.inc()
                raise ExportError(f"PDF renderer unavailable: {e}") from e

        if not response.content.startswith(b"%PDF"):
            export_failure_counter.inc()
            raise ExportError("PDF renderer returned a non-PDF response")

        return response.content

    @asynccontextmanager
    async def export(self, document: str) -> AsyncIterator[Artifact]:
        """Render `document` into a temporary PDF file that is deleted when the scope exits"""
        content = await self.render(document)

        try:
            fd, name = tempfile.mkstemp(prefix="credit_assessment_", suffix=".pdf")
        except OSError as e:
            export_failure_counter.inc()
            raise ExportError(f"Could not create PDF artifact: {e}") from e

        path = Path(name)
        try:
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(content)
            except OSError as e:
                export_failure_counter.inc()
                raise ExportError(f"Could not write PDF artifact: {e}") from e
            yield Artifact(content=content, path=path)
        finally:
            path.unlink(missing_ok=True)
