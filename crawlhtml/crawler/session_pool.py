"""
Session quality scoring.

A Session collects good/bad marks from navigation outcomes. Sessions whose
error score reaches the configured maximum, or that have been used too many
times, are retired by the pool and replaced on the next request.
"""

import uuid
from dataclasses import dataclass, field

from crawlhtml.utils.config import SessionPoolConfig, get_settings
from crawlhtml.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Session:
    """
    One reusable browser identity.

    Attributes:
        session_id: Unique identifier.
        max_error_score: Score at which the session is blocked.
        error_score_decrement: Amount a good mark takes off the score.
        max_usage_count: Uses after which the session is retired.
        error_score: Accumulated error score.
        usage_count: Number of marked uses.
    """

    max_error_score: float = 0.5
    error_score_decrement: float = 0.5
    max_usage_count: int = 5
    session_id: str = field(default_factory=lambda: f"session_{uuid.uuid4().hex[:10]}")
    error_score: float = 0.0
    usage_count: int = 0

    @property
    def is_blocked(self) -> bool:
        return self.error_score >= self.max_error_score

    @property
    def is_expired(self) -> bool:
        return self.usage_count >= self.max_usage_count

    @property
    def is_usable(self) -> bool:
        return not self.is_blocked and not self.is_expired

    def mark_good(self) -> None:
        """Record a successful use."""
        self.usage_count += 1
        self.error_score = max(0.0, self.error_score - self.error_score_decrement)
        logger.debug(
            "Session marked good",
            session_id=self.session_id,
            error_score=self.error_score,
            usage_count=self.usage_count,
        )

    def mark_bad(self) -> None:
        """Record a blocked or failed use."""
        self.usage_count += 1
        self.error_score += 1.0
        logger.debug(
            "Session marked bad",
            session_id=self.session_id,
            error_score=self.error_score,
            usage_count=self.usage_count,
        )


class SessionPool:
    """Hands out usable sessions and retires worn-out ones."""

    def __init__(self, config: SessionPoolConfig | None = None):
        self._config = config or get_settings().session_pool
        self._sessions: list[Session] = []

    @property
    def sessions(self) -> list[Session]:
        return list(self._sessions)

    def _create_session(self) -> Session:
        session = Session(
            max_error_score=self._config.max_error_score,
            error_score_decrement=self._config.error_score_decrement,
            max_usage_count=self._config.max_usage_count,
        )
        self._sessions.append(session)
        logger.debug("Session created", session_id=session.session_id)
        return session

    def retire_unusable(self) -> int:
        """Drop blocked or expired sessions. Returns how many were retired."""
        before = len(self._sessions)
        retired = [s for s in self._sessions if not s.is_usable]
        self._sessions = [s for s in self._sessions if s.is_usable]
        for session in retired:
            logger.info(
                "Session retired",
                session_id=session.session_id,
                error_score=session.error_score,
                usage_count=session.usage_count,
            )
        return before - len(self._sessions)

    def get_session(self) -> Session:
        """Return a usable session, creating one while the pool has room."""
        self.retire_unusable()
        if len(self._sessions) < self._config.max_pool_size:
            return self._create_session()
        # Pool is full: reuse the least-used healthy session
        return min(self._sessions, key=lambda s: (s.error_score, s.usage_count))
