"""In-memory session registry for quiz sessions served over HTTP.

Each visitor owns their sessions, identified by the ``(visitor_id,
session_id)`` pair.  The registry stores the latest :class:`AnswerSession`
value per pair and replaces it wholesale after every transition; the SDK
never sees the registry.

Sessions are not persisted.  Idle sessions older than the configured TTL
are purged whenever a new session is created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel

from treatment_finder.models.session import AnswerSession

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionInfo(BaseModel):
    """Public view of a hosted session."""

    visitor_id: str
    session_id: str
    status: Literal["in_progress", "complete"]
    cursor: int
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


@dataclass
class _Entry:
    session: AnswerSession
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class SessionRegistry:
    """Dict-backed store of quiz sessions keyed by visitor and session id.

    Args:
        ttl_minutes: idle age after which :meth:`purge_expired` drops a
            session; 0 disables expiry
    """

    def __init__(self, ttl_minutes: int = 0) -> None:
        self._ttl_minutes = ttl_minutes
        self._entries: dict[tuple[str, str], _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------

    def create(self, visitor_id: str, session_id: str, session: AnswerSession) -> SessionInfo:
        """Register a fresh session.

        Raises:
            ValueError: if the visitor already has a session with this id.
        """
        self.purge_expired()
        key = (visitor_id, session_id)
        if key in self._entries:
            raise ValueError(
                f"Session already exists: visitor_id={visitor_id}, session_id={session_id}"
            )
        now = _utcnow()
        self._entries[key] = _Entry(session=session, created_at=now, updated_at=now)
        logger.info("Created session %s for visitor %s", session_id, visitor_id)
        return self.info(visitor_id, session_id)

    def get(self, visitor_id: str, session_id: str) -> AnswerSession:
        """Return the current session value.

        Raises:
            ValueError: if the session does not exist.
        """
        return self._entry(visitor_id, session_id).session

    def completed_at(self, visitor_id: str, session_id: str) -> datetime | None:
        return self._entry(visitor_id, session_id).completed_at

    def info(self, visitor_id: str, session_id: str) -> SessionInfo:
        entry = self._entry(visitor_id, session_id)
        return SessionInfo(
            visitor_id=visitor_id,
            session_id=session_id,
            status="complete" if entry.session.is_complete else "in_progress",
            cursor=entry.session.cursor,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
            completed_at=entry.completed_at,
        )

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    def save(self, visitor_id: str, session_id: str, session: AnswerSession) -> None:
        """Replace the stored session value after a transition.

        Records the completion time on the transition into the complete
        state and clears it when the visitor steps back out of it.
        """
        entry = self._entry(visitor_id, session_id)
        now = _utcnow()
        if session.is_complete and not entry.session.is_complete:
            entry.completed_at = now
        elif not session.is_complete:
            entry.completed_at = None
        entry.session = session
        entry.updated_at = now

    def delete(self, visitor_id: str, session_id: str) -> None:
        """Remove a session.

        Raises:
            ValueError: if the session does not exist.
        """
        self._entry(visitor_id, session_id)
        del self._entries[(visitor_id, session_id)]
        logger.info("Deleted session %s for visitor %s", session_id, visitor_id)

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop sessions idle for longer than the TTL; return how many were dropped."""
        if self._ttl_minutes <= 0:
            return 0
        cutoff = (now or _utcnow()) - timedelta(minutes=self._ttl_minutes)
        expired = [key for key, entry in self._entries.items() if entry.updated_at < cutoff]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _entry(self, visitor_id: str, session_id: str) -> _Entry:
        entry = self._entries.get((visitor_id, session_id))
        if entry is None:
            raise ValueError(
                f"Session not found: visitor_id={visitor_id}, session_id={session_id}"
            )
        return entry
