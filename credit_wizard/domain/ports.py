"""Capability interfaces for the external PDF renderer and mail transport"""

from dataclasses import dataclass
from pathlib import Path
from typing import AsyncContextManager, Optional, Protocol

PDF_FILENAME = "credit_assessment.pdf"
PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class Artifact:
    """Rendered PDF; `path` is a temporary file valid only inside the export scope"""

    content: bytes
    path: Path
    filename: str = PDF_FILENAME
    content_type: str = PDF_CONTENT_TYPE


@dataclass(frozen=True)
class DeliveryReceipt:
    """Result of a successful send"""

    recipient: str
    message_id: Optional[str] = None


class DocumentExporter(Protocol):
    """HTML in, PDF out"""

    def export(self, document: str) -> AsyncContextManager[Artifact]:
        """
        Render `document` and yield the artifact; temporary files are
        removed when the context exits.

        Raises:
            ExportError: Renderer unavailable or rejected the markup
        """
        ...


class NotificationDispatcher(Protocol):
    """Sends the assessment artifact to a recipient"""

    async def dispatch(self, recipient: str, artifact: Artifact) -> DeliveryReceipt:
        """
        Raises:
            DeliveryError: Any transport failure
        """
        ...
