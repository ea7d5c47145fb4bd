"""Pytest fixtures for testing"""

import asyncio
import pytest
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, List, Optional, Tuple
from fastapi.testclient import TestClient
from credit_wizard.api.main import create_app
from credit_wizard.api.dependencies import get_dispatcher, get_exporter
from credit_wizard.domain.exceptions import DeliveryError, ExportError
from credit_wizard.domain.flow import FlowController
from credit_wizard.domain.ports import Artifact, DeliveryReceipt


FIXED_NOW = datetime(2025, 3, 5, 14, 7, 31, tzinfo=timezone.utc)

FAKE_PDF = b"%PDF-1.7\n% fake assessment\n%%EOF"

APPROVED_ANSWERS = {"paying_job": "yes", "consistent_job_12m": "yes", "own_home": "yes"}  # 8 points
DECLINED_ANSWERS = {"paying_job": "yes"}  # 4 points


class FakeExporter:
    """Writes a fixed PDF to a temp file; optionally slow, or failing like a dead renderer"""

    def __init__(self, tmp_path: Path, error: Optional[str] = None, delay: float = 0.0):
        self.tmp_path = tmp_path
        self.error = error
        self.delay = delay
        self.documents: List[str] = []
        self.paths: List[Path] = []

    @asynccontextmanager
    async def export(self, document: str) -> AsyncIterator[Artifact]:
        self.documents.append(document)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise ExportError(self.error)

        path = self.tmp_path / f"artifact_{len(self.paths)}.pdf"
        path.write_bytes(FAKE_PDF)
        self.paths.append(path)
        try:
            yield Artifact(content=FAKE_PDF, path=path)
        finally:
            path.unlink(missing_ok=True)


class FakeDispatcher:
    """Records every dispatch; optionally fails like a broken mail transport"""

    def __init__(self, error: Optional[str] = None):
        self.error = error
        self.sent: List[Tuple[str, Artifact]] = []

    async def dispatch(self, recipient: str, artifact: Artifact) -> DeliveryReceipt:
        if self.error:
            raise DeliveryError(self.error)
        self.sent.append((recipient, artifact))
        return DeliveryReceipt(recipient=recipient, message_id=f"msg-{len(self.sent)}")


@pytest.fixture
def exporter(tmp_path: Path) -> FakeExporter:
    return FakeExporter(tmp_path)


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def controller(exporter: FakeExporter, dispatcher: FakeDispatcher) -> FlowController:
    """Fresh session controller with a pinned clock"""
    return FlowController(exporter=exporter, dispatcher=dispatcher, clock=lambda: FIXED_NOW)


@pytest.fixture
def offer_controller(controller: FlowController) -> FlowController:
    """Controller already advanced to the offer step (income 4000, expenses 2200)"""
    controller.submit_eligibility(APPROVED_ANSWERS)
    controller.submit_financials("4000", "2200")
    return controller


@pytest.fixture
def client(exporter: FakeExporter, dispatcher: FakeDispatcher) -> TestClient:
    """Create FastAPI test client with fake PDF renderer and mail transport"""
    app = create_app()

    app.dependency_overrides[get_exporter] = lambda: exporter
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    return TestClient(app)
