"""Session countdown timer

Remaining time is never decremented. Every read recomputes it from the
countdown anchor, the fixed duration and the accumulated pause time, so a
missed or late tick cannot make the countdown drift.
"""
import logging
import math
from datetime import datetime
from typing import Callable, Optional

from app.models.relationship_session import RelationshipSession
from app.utils.datetime_helper import ensure_utc, seconds_between, utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TimerEngine:
    """Pausable countdown derived from absolute timestamps"""

    def __init__(
        self,
        started_at: datetime,
        duration_minutes: int,
        paused_seconds: float = 0.0,
        paused_at: Optional[datetime] = None,
        clock: Clock = utc_now,
    ):
        self._started_at = ensure_utc(started_at)
        self._duration_seconds = duration_minutes * 60
        self._paused_seconds = max(0.0, paused_seconds)
        self._paused_at = ensure_utc(paused_at) if paused_at else None
        self._clock = clock

    @classmethod
    def for_session(cls, session: RelationshipSession, clock: Clock = utc_now) -> "TimerEngine":
        """Build a timer from a fetched session, honouring a persisted open pause"""
        return cls(
            started_at=session.timer_anchor,
            duration_minutes=session.effective_duration_minutes,
            paused_seconds=session.paused_seconds,
            paused_at=session.timer_paused_at,
            clock=clock,
        )

    @property
    def duration_seconds(self) -> int:
        return self._duration_seconds

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    @property
    def paused_at(self) -> Optional[datetime]:
        return self._paused_at

    @property
    def paused_seconds(self) -> float:
        """Accumulated pause time, excluding a pause still in progress"""
        return self._paused_seconds

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        """Whole seconds left, rounded up and clamped at zero"""
        if self._paused_at is not None:
            # Frozen while paused
            now = self._paused_at
        elif now is None:
            now = self._clock()

        elapsed = seconds_between(self._started_at, now) - self._paused_seconds
        remaining = max(0.0, self._duration_seconds - elapsed)
        return math.ceil(remaining)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.remaining_seconds(now) <= 0

    def pause(self, now: Optional[datetime] = None) -> bool:
        """Freeze the countdown. Returns False if already paused."""
        if self._paused_at is not None:
            return False

        self._paused_at = ensure_utc(now or self._clock())
        logger.info(f"Timer paused with {self.remaining_seconds()}s remaining")
        return True

    def resume(self, now: Optional[datetime] = None) -> bool:
        """Fold the pause into the paused baseline. Returns False if not paused."""
        if self._paused_at is None:
            return False

        now = ensure_utc(now or self._clock())
        self._paused_seconds += max(0.0, seconds_between(self._paused_at, now))
        self._paused_at = None
        logger.info(f"Timer resumed with {self.remaining_seconds(now)}s remaining")
        return True
