"""Completion orchestration for a relationship session"""
import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from app.config import DEFAULT_TIMINGS, SessionTimings

from .errors import CompleteSessionError
from .progress import ActionOutcome
from .scheduling import TimerScope

logger = logging.getLogger(__name__)

CompleteSessionFn = Callable[[str], Awaitable[Any]]
CloseCallback = Callable[[], Any]


class CompletionState(str, Enum):
    """Where the session is in its completion lifecycle"""
    RUNNING = "running"
    PROMPT_PENDING = "prompt_pending"
    ENDING = "ending"
    TERMINATED = "terminated"


class CompletionOrchestrator:
    """
    Decides when to ask "continue or end?" and performs the terminal
    complete-session request.

    The prompt is armed once, when the last action is handled, and shows
    after a short delay so the per-action celebration can finish first.
    Ending the session is allowed at any time, including with actions left.
    """

    PROMPT_TIMER = "completion_prompt"

    def __init__(
        self,
        session_id: str,
        complete_session: CompleteSessionFn,
        scope: TimerScope,
        timings: SessionTimings = DEFAULT_TIMINGS,
        on_close: Optional[CloseCallback] = None,
    ):
        self._session_id = session_id
        self._complete_session = complete_session
        self._scope = scope
        self._timings = timings
        self._on_close = on_close
        self._state = CompletionState.RUNNING
        self._prompt_armed = False
        self._prompt_due = False
        self.last_error: Optional[CompleteSessionError] = None

    @property
    def state(self) -> CompletionState:
        return self._state

    @property
    def prompt_visible(self) -> bool:
        return self._state is CompletionState.PROMPT_PENDING

    @property
    def can_end_session(self) -> bool:
        """False while a complete request is in flight or after termination"""
        return self._state not in (CompletionState.ENDING, CompletionState.TERMINATED)

    def on_action_handled(self, outcome: ActionOutcome, fully_handled: bool) -> bool:
        """Arm the completion prompt if this action finished the queue

        Returns:
            True if the prompt was scheduled by this call
        """
        if not fully_handled or self._prompt_armed or self._state is not CompletionState.RUNNING:
            return False

        self._prompt_armed = True
        if outcome is ActionOutcome.COMPLETED:
            delay = self._timings.prompt_after_complete
        else:
            delay = self._timings.prompt_after_skip

        self._scope.call_later(self.PROMPT_TIMER, delay, self._show_prompt)
        return True

    def _show_prompt(self):
        if self._state is CompletionState.ENDING:
            # Shown if the end request fails
            self._prompt_due = True
            return
        if self._state is not CompletionState.RUNNING:
            return
        self._state = CompletionState.PROMPT_PENDING
        logger.info(f"All actions handled for session {self._session_id}, prompting to finish")

    def continue_working(self) -> bool:
        """Dismiss the prompt and stay in the session"""
        if self._state is not CompletionState.PROMPT_PENDING:
            return False
        self._state = CompletionState.RUNNING
        return True

    async def end_session(self) -> bool:
        """
        Complete the session on the backend.

        Returns:
            True when the session was completed, False if a request is
            already in flight or the session has already ended

        Raises:
            CompleteSessionError: the request failed; the end control is
            re-enabled so the user can retry
        """
        if not self.can_end_session:
            return False

        previous = self._state
        self._state = CompletionState.ENDING
        self.last_error = None

        try:
            await self._complete_session(self._session_id)
        except CompleteSessionError as e:
            self._fail(previous, e)
            raise
        except Exception as e:
            error = CompleteSessionError(self._session_id, str(e) or type(e).__name__)
            self._fail(previous, error)
            raise error from e
        except BaseException:
            self._restore(previous)
            raise

        self._scope.cancel(self.PROMPT_TIMER)
        self._state = CompletionState.TERMINATED
        logger.info(f"Session {self._session_id} completed")

        if self._on_close is not None:
            result = self._on_close()
            if asyncio.iscoroutine(result):
                await result
        return True

    def _fail(self, previous: CompletionState, error: CompleteSessionError):
        self._restore(previous)
        self.last_error = error
        logger.error(f"Error completing session {self._session_id}: {error}")

    def _restore(self, previous: CompletionState):
        if previous is CompletionState.RUNNING and self._prompt_due:
            previous = CompletionState.PROMPT_PENDING
            logger.info(f"All actions handled for session {self._session_id}, prompting to finish")
        self._prompt_due = False
        self._state = previous
