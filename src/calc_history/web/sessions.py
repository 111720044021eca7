"""Session manager for the calc-history web app.

Each session owns one Calculator. Sessions are stored in memory (dict) and
expire after ``ttl_seconds`` without use; a daemon thread cleans them up.
Calls on a session are serialised through ``Session.lock``.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field

from calc_history.core.engine import Calculator

_log = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600  # 1 hour


@dataclass
class Session:
    id: str
    calculator: Calculator
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    created_at: float = field(default_factory=time.time)
    last_used: float = field(default_factory=time.time)

    def touch(self) -> None:
        self.last_used = time.time()


class SessionManager:
    """Thread-safe in-memory session store with automatic expiry."""

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, cleanup_interval: float = 300) -> None:
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        if cleanup_interval > 0:
            self._start_cleanup_thread(cleanup_interval)

    def create(self, initial_value: float = 0) -> Session:
        session = Session(id=str(uuid.uuid4()), calculator=Calculator(initial_value))
        with self._lock:
            self._sessions[session.id] = session
        _log.info("Session %s created (initial value %s)", session.id, initial_value)
        return session

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is not None:
            session.touch()
        return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            _log.info("Session %s closed", session_id)
        return session is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def cleanup_expired(self, now: float | None = None) -> list[str]:
        """Delete sessions idle for longer than the TTL and return their ids."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items() if now - s.last_used > self.ttl_seconds
            ]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            _log.info("Expired %d idle session(s)", len(expired))
        return expired

    def _start_cleanup_thread(self, interval: float) -> None:
        def _loop() -> None:
            while True:
                time.sleep(interval)
                self.cleanup_expired()

        t = threading.Thread(target=_loop, daemon=True)
        t.start()
