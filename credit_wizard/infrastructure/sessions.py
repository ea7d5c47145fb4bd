"""In-memory registry of live assessment sessions"""

import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from credit_wizard.config import settings
from credit_wizard.domain.exceptions import SessionNotFoundError
from credit_wizard.domain.flow import FlowController


class SessionStore:
    """
    Maps session ids to their FlowController.

    Nothing is persisted. A session idle for longer than `ttl_seconds` is
    discarded (checked on access and swept on every create), as is one
    ended explicitly.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds
        self.clock = clock
        # session id -> (controller, last touched)
        self._sessions: Dict[str, Tuple[FlowController, float]] = {}

    def create(self, controller: FlowController) -> str:
        """Register a new session and return its id"""
        self.sweep()
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = (controller, self.clock())
        return session_id

    def get(self, session_id: str) -> FlowController:
        """Return the session's controller and mark it as used"""
        entry = self._sessions.get(session_id)
        now = self.clock()
        if entry is None or self._expired(entry, now):
            self._sessions.pop(session_id, None)
            raise SessionNotFoundError(f"Unknown session: {session_id}")

        controller, _ = entry
        self._sessions[session_id] = (controller, now)
        return controller

    def discard(self, session_id: str) -> None:
        entry = self._sessions.pop(session_id, None)
        if entry is None or self._expired(entry, self.clock()):
            raise SessionNotFoundError(f"Unknown session: {session_id}")

    def sweep(self) -> int:
        """Drop every idle session; returns how many were removed"""
        now = self.clock()
        expired = [sid for sid, entry in self._sessions.items() if self._expired(entry, now)]
        for session_id in expired:
            del self._sessions[session_id]
        return len(expired)

    def _expired(self, entry: Tuple[FlowController, float], now: float) -> bool:
        return now - entry[1] > self.ttl_seconds

    def __len__(self) -> int:
        return len(self._sessions)
