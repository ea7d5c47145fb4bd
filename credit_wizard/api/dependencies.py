"""Dependency injection for FastAPI endpoints"""

from fastapi import HTTPException, Request

from credit_wizard.domain.exceptions import SessionNotFoundError
from credit_wizard.domain.flow import FlowController
from credit_wizard.domain.ports import DocumentExporter, NotificationDispatcher
from credit_wizard.infrastructure.clients.mail import build_dispatcher
from credit_wizard.infrastructure.clients.pdf import PdfRendererClient
from credit_wizard.infrastructure.sessions import SessionStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_exporter() -> DocumentExporter:
    """Provide PDF renderer client instance"""
    return PdfRendererClient()


def get_dispatcher() -> NotificationDispatcher:
    """Provide configured mail transport"""
    return build_dispatcher()


def get_session_store(request: Request) -> SessionStore:
    """Application-wide session registry"""
    return request.app.state.sessions


def get_controller(session_id: str, request: Request) -> FlowController:
    """Resolve the session's controller or 404"""
    try:
        return get_session_store(request).get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Assessment session not found")
