"""In-process session store.

Sessions live only as long as the process; nothing is written to disk.
"""
import uuid
from typing import Dict, Optional, Tuple

import structlog

from agent.orchestrator import FixItOrchestrator

logger = structlog.get_logger()


class SessionStore:
    """Maps session ids to their view-state controller."""

    def __init__(self):
        self._sessions: Dict[str, FixItOrchestrator] = {}

    def create(self) -> Tuple[str, FixItOrchestrator]:
        session_id = str(uuid.uuid4())
        orchestrator = FixItOrchestrator()
        self._sessions[session_id] = orchestrator
        logger.info("Session created", session_id=session_id)
        return session_id, orchestrator

    def get(self, session_id: str) -> Optional[FixItOrchestrator]:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info("Session deleted", session_id=session_id)
        return removed

    def __len__(self) -> int:
        return len(self._sessions)


# Global session store
store: Optional[SessionStore] = None


def init_store() -> SessionStore:
    """Initialize the session store."""
    global store
    store = SessionStore()
    logger.info("Session store initialized")
    return store


def get_store() -> SessionStore:
    """Get the session store."""
    if store is None:
        init_store()
    return store
