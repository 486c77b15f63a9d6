"""Session store — one DebugSession per caller-assigned correlation id."""

from __future__ import annotations

import asyncio
import logging

from avd.schemas.session import DebugSession

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


class SessionStore:
    """Hands out sessions keyed by id, creating them on first use.

    Callers that never pass an id all share the ``"default"`` session.
    Each session also gets an ``asyncio.Lock`` so steps on the same session
    run one at a time.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, DebugSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, session_id: str | None = None) -> DebugSession:
        sid = session_id or DEFAULT_SESSION_ID
        if sid not in self._sessions:
            logger.debug("Creating session %r", sid)
            self._sessions[sid] = DebugSession(session_id=sid)
            self._locks[sid] = asyncio.Lock()
        return self._sessions[sid]

    def lock(self, session_id: str | None = None) -> asyncio.Lock:
        sid = session_id or DEFAULT_SESSION_ID
        self.get(sid)
        return self._locks[sid]
