"""
Chat Sessions

The parser is stateless. A chat session keeps what the next turn needs from
the previous ones: the last filter set worth carrying over ("export them"),
and a short transcript the chat loop can show with the `history` command.

Only a successful, non-casual, non-empty parse replaces the remembered
filters. The `reset` command forgets them without touching the transcript.
"""
import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from auditbot.core.report_parser import ParsedFilters, ParseResult

logger = logging.getLogger(__name__)


@dataclass
class ChatTurn:
    """One message in the transcript."""
    role: str                          # "user" or "assistant"
    content: str
    timestamp: datetime
    filters: Dict[str, str] = field(default_factory=dict)


@dataclass
class Session:
    """One chat: its transcript and the filters of the last successful request."""
    session_id: str
    created_at: datetime
    last_activity: datetime
    turns: deque = field(default_factory=lambda: deque(maxlen=20))
    last_filters: ParsedFilters = field(default_factory=ParsedFilters)
    user_id: Optional[str] = None

    def _append(self, turn: ChatTurn) -> ChatTurn:
        self.turns.append(turn)
        self.last_activity = turn.timestamp
        return turn

    def add_user_message(self, content: str) -> ChatTurn:
        return self._append(ChatTurn("user", content, datetime.now()))

    def add_assistant_message(self, content: str, filters: Optional[ParsedFilters] = None) -> ChatTurn:
        applied = filters.to_dict() if filters else {}
        return self._append(ChatTurn("assistant", content, datetime.now(), applied))

    def record_parse(self, result: ParseResult) -> bool:
        """
        Remember the filters of a parse result if they should carry over.

        Returns:
            True if last_filters was replaced
        """
        if not result.success or result.is_casual or result.filters.is_empty():
            return False
        self.last_filters = ParsedFilters.from_dict(result.filters.to_dict())
        logger.debug(f"Session {self.session_id}: carrying {self.last_filters.to_dict()}")
        return True

    @property
    def previous_filters(self) -> Dict[str, str]:
        """Filters to pass as previous_filters on the next parse."""
        return self.last_filters.to_dict()

    def recent_turns(self, limit: int = 10) -> List[ChatTurn]:
        return list(self.turns)[-limit:]

    def forget_filters(self) -> Dict[str, str]:
        """Drop the remembered filters and return what was dropped."""
        dropped = self.last_filters.to_dict()
        self.last_filters = ParsedFilters()
        logger.debug(f"Session {self.session_id}: forgot {dropped}")
        return dropped


class SessionManager:
    """
    Keeps chat sessions in memory, expiring idle ones and capping their number.
    """

    def __init__(
        self,
        session_timeout_minutes: int = 30,
        max_turns_per_session: int = 20,
        max_sessions: int = 1000,
    ):
        """
        Args:
            session_timeout_minutes: Idle sessions are dropped after this time
            max_turns_per_session: Transcript length kept per session
            max_sessions: Active session cap; the least recently used go first
        """
        self.session_timeout_minutes = session_timeout_minutes
        self.max_turns_per_session = max_turns_per_session
        self.max_sessions = max_sessions

        self._sessions: Dict[str, Session] = {}
        self._last_sweep = time.time()

    def create_session(self, user_id: str = None) -> Session:
        self._sweep()

        now = datetime.now()
        session = Session(
            session_id=uuid.uuid4().hex,
            created_at=now,
            last_activity=now,
            turns=deque(maxlen=self.max_turns_per_session),
            user_id=user_id,
        )
        self._sessions[session.session_id] = session
        logger.debug(f"Opened session {session.session_id} ({len(self._sessions)} active)")
        return session

    def close_session(self, session_id: str):
        if self._sessions.pop(session_id, None) is not None:
            logger.debug(f"Closed session {session_id}")

    def _idle_too_long(self, session: Session) -> bool:
        idle = (datetime.now() - session.last_activity).total_seconds()
        return idle > self.session_timeout_minutes * 60

    def _sweep(self):
        """Drop idle sessions every 5 minutes, or sooner when at the cap."""
        now = time.time()
        if now - self._last_sweep < 300 and len(self._sessions) < self.max_sessions:
            return
        self._last_sweep = now

        idle = [sid for sid, s in self._sessions.items() if self._idle_too_long(s)]
        for sid in idle:
            self.close_session(sid)
        if idle:
            logger.info(f"Dropped {len(idle)} idle sessions")

        # Leave room for the session being created
        overflow = len(self._sessions) - self.max_sessions + 1
        if overflow > 0:
            by_activity = sorted(self._sessions.values(), key=lambda s: s.last_activity)
            for session in by_activity[:overflow]:
                self.close_session(session.session_id)


_session_manager: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """Shared session manager, sized from CHAT_MAX_HISTORY."""
    global _session_manager
    if _session_manager is None:
        from config.settings import get_config
        _session_manager = SessionManager(max_turns_per_session=get_config().chat.max_history)
    return _session_manager


def reset_session_manager():
    """Drop the shared session manager (used by tests)."""
    global _session_manager
    _session_manager = None
