"""Process-wide store of authenticated administrator sessions.

The store is empty on a cold start, so tokens issued by a previous process
are rejected. A session ends when it expires or when the admin logs out.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from uuid import uuid4


@dataclass(frozen=True)
class AdminProfile:
    """Snapshot of the authenticated administrator."""

    id: int
    username: str
    full_name: str | None = None


@dataclass
class AdminSession:
    """An authenticated administrator session."""

    profile: AdminProfile
    expires_at: datetime
    session_id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_authenticated(self) -> bool:
        return datetime.now(timezone.utc) < self.expires_at


class AdminSessionStore:
    """Thread-safe in-memory session registry."""

    def __init__(self):
        self._sessions: dict[str, AdminSession] = {}
        self._lock = threading.Lock()

    def open(self, profile: AdminProfile, lifetime: timedelta) -> AdminSession:
        session = AdminSession(
            profile=profile,
            expires_at=datetime.now(timezone.utc) + lifetime,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> AdminSession | None:
        """Return a live session, dropping it if it has expired."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if not session.is_authenticated:
                del self._sessions[session_id]
                return None
            return session

    def revoke(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def revoke_admin(self, admin_id: int) -> int:
        """End every session belonging to an admin."""
        with self._lock:
            stale = [
                sid for sid, s in self._sessions.items() if s.profile.id == admin_id
            ]
            for sid in stale:
                del self._sessions[sid]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


admin_sessions = AdminSessionStore()
