"""Session controller: one open session view and everything it owns"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Set

from app import config
from app.config import DEFAULT_TIMINGS, SessionTimings
from app.models.action import ActionStatus, SessionAction
from app.models.relationship_session import RelationshipSession
from app.utils.datetime_helper import utc_now

from .client import SessionsApiClient
from .orchestrator import CloseCallback, CompletionOrchestrator
from .progress import ActionOutcome, ActionQueue
from .scheduling import TimerScope
from .timer import Clock, TimerEngine

logger = logging.getLogger(__name__)

ChangeListener = Callable[["SessionController"], Any]


class SessionController:
    """
    Wires the timer, action queue and completion orchestrator together for a
    single session, and owns every timer they schedule.

    Use as an async context manager: entering starts the countdown, leaving
    cancels every pending timer however the block exits. In-flight backend
    writes (session completion, progress sync) are left to finish.
    """

    TICK_TIMER = "tick"
    CELEBRATION_TIMER = "celebration"
    INTRO_TIMER = "intro"

    def __init__(
        self,
        session: RelationshipSession,
        client: SessionsApiClient,
        on_close: Optional[CloseCallback] = None,
        timings: SessionTimings = DEFAULT_TIMINGS,
        clock: Clock = utc_now,
        persist_action_progress: Optional[bool] = None,
        sync_pause: bool = False,
    ):
        self.session = session
        self.timings = timings
        self.scope = TimerScope()
        self.timer = TimerEngine.for_session(session, clock=clock)
        self.queue = ActionQueue(session.actions)
        self.orchestrator = CompletionOrchestrator(
            session.id,
            client.complete_session,
            self.scope,
            timings=timings,
            on_close=on_close,
        )
        self._client = client
        self._clock = clock
        if persist_action_progress is None:
            persist_action_progress = config.SESSION_PERSIST_ACTION_PROGRESS
        self._persist_action_progress = persist_action_progress
        self._sync_pause = sync_pause
        self._listeners: list[ChangeListener] = []
        self._sync_tasks: Set[asyncio.Task] = set()

        self.time_remaining_seconds = self.timer.remaining_seconds()
        self.time_expired = self.time_remaining_seconds <= 0
        self.recently_completed_action_id: Optional[str] = None
        self.show_intro = True
        self._started = False

    @classmethod
    async def open(cls, client: SessionsApiClient, session_id: str, **kwargs) -> "SessionController":
        """Fetch a session and build its controller

        Raises:
            SessionLoadError: the session could not be loaded
        """
        session = await client.fetch_session(session_id)
        logger.info(f"Loaded session {session.id} with {len(session.actions)} actions")
        return cls(session, client, **kwargs)

    async def __aenter__(self) -> "SessionController":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Start ticking and schedule the intro overlay to hide"""
        if self._started:
            return
        self._started = True

        self.scope.call_later(self.INTRO_TIMER, self.timings.intro_overlay, self._hide_intro)
        self.tick()
        self._schedule_tick()

    def close(self):
        """Cancel every timer this session owns"""
        if self.scope.closed:
            return
        self.scope.close()
        logger.info(f"Session view {self.session.id} closed")

    @property
    def closed(self) -> bool:
        return self.scope.closed

    def subscribe(self, listener: ChangeListener):
        """Call listener after every state change"""
        self._listeners.append(listener)

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    @property
    def is_paused(self) -> bool:
        return self.timer.is_paused

    def _schedule_tick(self):
        if self.timer.is_paused or self.time_expired:
            return
        self.scope.every(self.TICK_TIMER, self.timings.tick_interval, self.tick)

    def tick(self, now: Optional[datetime] = None) -> int:
        """Recompute remaining time from absolute timestamps"""
        self.time_remaining_seconds = self.timer.remaining_seconds(now)

        if self.time_remaining_seconds <= 0 and not self.time_expired:
            self.time_expired = True
            self.scope.cancel(self.TICK_TIMER)
            logger.info(f"Session {self.session.id} time expired")

        self._notify()
        return self.time_remaining_seconds

    def pause(self, now: Optional[datetime] = None) -> bool:
        if not self.timer.pause(now):
            return False

        self.scope.cancel(self.TICK_TIMER)
        self.time_remaining_seconds = self.timer.remaining_seconds()
        if self._sync_pause:
            self._spawn_sync(self._client.pause_session(self.session.id), "pause sync")
        self._notify()
        return True

    def resume(self, now: Optional[datetime] = None) -> bool:
        if not self.timer.resume(now):
            return False

        if self._sync_pause:
            self._spawn_sync(self._client.resume_session(self.session.id), "resume sync")
        self.tick(now)
        self._schedule_tick()
        return True

    def toggle_pause(self) -> bool:
        """Pause or resume; returns the new paused state"""
        if self.timer.is_paused:
            self.resume()
        else:
            self.pause()
        return self.timer.is_paused

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    @property
    def current_action(self) -> Optional[SessionAction]:
        return self.queue.current_action()

    @property
    def show_celebration(self) -> bool:
        return self.recently_completed_action_id is not None

    def mark_complete(self, action_id: str) -> bool:
        if not self.queue.mark_complete(action_id):
            return False

        # A newer celebration replaces one still on screen
        self.recently_completed_action_id = action_id
        self.scope.call_later(self.CELEBRATION_TIMER, self.timings.celebration, self._clear_celebration)
        self._after_action(action_id, ActionOutcome.COMPLETED)
        return True

    def mark_skipped(self, action_id: str) -> bool:
        if not self.queue.mark_skipped(action_id):
            return False

        self._after_action(action_id, ActionOutcome.SKIPPED)
        return True

    def _after_action(self, action_id: str, outcome: ActionOutcome):
        self.orchestrator.on_action_handled(outcome, self.queue.is_fully_handled())

        if self._persist_action_progress:
            status = ActionStatus.COMPLETED if outcome is ActionOutcome.COMPLETED else ActionStatus.SKIPPED
            self._spawn_sync(self._client.update_action_status(action_id, status), f"action {action_id} sync")

        self._notify()

    def _clear_celebration(self):
        self.recently_completed_action_id = None
        self._notify()

    def _hide_intro(self):
        self.show_intro = False
        self._notify()

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def continue_working(self) -> bool:
        changed = self.orchestrator.continue_working()
        if changed:
            self._notify()
        return changed

    async def end_session(self) -> bool:
        """Complete the session on the backend (partial completion allowed)

        Raises:
            CompleteSessionError: the request failed and may be retried
        """
        try:
            ended = await self.orchestrator.end_session()
        finally:
            self._notify()

        if ended:
            self.close()
        return ended

    # ------------------------------------------------------------------
    # Background writes
    # ------------------------------------------------------------------

    def _spawn_sync(self, coro, what: str):
        task = asyncio.get_running_loop().create_task(coro)
        self._sync_tasks.add(task)
        task.add_done_callback(lambda t: self._on_sync_done(t, what))

    def _on_sync_done(self, task: asyncio.Task, what: str):
        self._sync_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Session {self.session.id} {what} failed: {exc}")

    async def wait_for_sync(self):
        """Wait for in-flight backend writes to settle"""
        if self._sync_tasks:
            await asyncio.gather(*self._sync_tasks, return_exceptions=True)
