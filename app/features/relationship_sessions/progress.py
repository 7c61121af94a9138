"""Action queue and progress tracking for a session"""
import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence

from app.models.action import ActionStatus, SessionAction

from .errors import UnknownActionError

logger = logging.getLogger(__name__)


class ActionOutcome(str, Enum):
    """How the user handled an action during the session"""
    COMPLETED = "completed"
    SKIPPED = "skipped"


class ActionQueue:
    """
    Tracks which actions have been handled and exposes the current one.

    Completed and skipped actions both count as progress. An action can be
    handled once and never reverts.

    Actions the backend already records as completed or skipped start out
    handled, so a reloaded session resumes where it left off.
    """

    def __init__(self, actions: Sequence[SessionAction]):
        self._actions: List[SessionAction] = list(actions)
        self._index: Dict[str, int] = {action.id: i for i, action in enumerate(self._actions)}
        self._outcomes: Dict[str, ActionOutcome] = {}
        for action in self._actions:
            if action.status is ActionStatus.COMPLETED:
                self._outcomes[action.id] = ActionOutcome.COMPLETED
            elif action.status is ActionStatus.SKIPPED:
                self._outcomes[action.id] = ActionOutcome.SKIPPED

    @property
    def actions(self) -> List[SessionAction]:
        return list(self._actions)

    @property
    def total(self) -> int:
        return len(self._actions)

    @property
    def handled_count(self) -> int:
        return len(self._outcomes)

    @property
    def handled_ids(self) -> FrozenSet[str]:
        return frozenset(self._outcomes)

    def outcome_of(self, action_id: str) -> Optional[ActionOutcome]:
        return self._outcomes.get(action_id)

    def count(self, outcome: ActionOutcome) -> int:
        return sum(1 for value in self._outcomes.values() if value is outcome)

    def _mark(self, action_id: str, outcome: ActionOutcome) -> bool:
        if action_id not in self._index:
            raise UnknownActionError(action_id)

        if action_id in self._outcomes:
            return False

        self._outcomes[action_id] = outcome
        logger.debug(f"Action {action_id} {outcome.value} ({self.handled_count}/{self.total})")
        return True

    def mark_complete(self, action_id: str) -> bool:
        """Mark an action completed. Returns False if it was already handled."""
        return self._mark(action_id, ActionOutcome.COMPLETED)

    def mark_skipped(self, action_id: str) -> bool:
        """Mark an action skipped. Returns False if it was already handled."""
        return self._mark(action_id, ActionOutcome.SKIPPED)

    def remaining_actions(self) -> List[SessionAction]:
        return [action for action in self._actions if action.id not in self._outcomes]

    def current_action(self) -> Optional[SessionAction]:
        """First unhandled action in session order, or None"""
        for action in self._actions:
            if action.id not in self._outcomes:
                return action
        return None

    def current_position(self) -> int:
        """1-based position of the current action ("Action i of n")"""
        return self.total - len(self.remaining_actions()) + 1

    def progress(self) -> float:
        """Fraction handled; 0.0 for a session without actions"""
        if not self._actions:
            return 0.0
        return self.handled_count / self.total

    def is_fully_handled(self) -> bool:
        return self.handled_count == self.total
