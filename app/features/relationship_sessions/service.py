"""Business logic for persisted relationship sessions"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from app.infra.supabase.repositories import RepositoryFactory
from app.models.action import ACTION_TYPE_CATEGORIES, ActionCreate, ActionStatus, ActionUpdate, SessionAction
from app.models.relationship_session import (
    RelationshipSession,
    RelationshipSessionCreate,
    RelationshipSessionUpdate,
    SessionStatus,
)
from app.utils.datetime_helper import ensure_utc, seconds_between, utc_now

from .errors import ActionNotFoundError, SessionNotFoundError, SessionStateError
from .schemas import (
    CreateSessionRequest,
    PendingActionCountsResponse,
    RecentSessionsResponse,
)
from .timer import Clock

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 30
FIRST_SESSION_MESSAGE = "Ready to start your first relationship-building session?"


def default_action_title(action_type: str) -> str:
    """add_meeting_notes -> Add Meeting Notes"""
    return " ".join(word.capitalize() for word in action_type.split("_"))


def default_action_description(action_type: str) -> str:
    return f"Complete {action_type.replace('_', ' ')} action"


def momentum_message(days_since_last_session: Optional[int]) -> str:
    if days_since_last_session is None:
        return FIRST_SESSION_MESSAGE
    if days_since_last_session == 0:
        return "Great momentum! Ready for another productive session?"
    if days_since_last_session <= 2:
        return "Excellent consistency! Keep the relationship momentum going."
    if days_since_last_session <= 7:
        return "Perfect timing for your next relationship-building session."
    if days_since_last_session <= 14:
        return "Your network is ready for some attention. Let's reconnect!"
    return "Your relationships are waiting - time to strengthen those connections."


def summarize_recent_sessions(rows: List[Dict[str, Any]], now: datetime) -> RecentSessionsResponse:
    """
    Build the momentum summary from session rows ordered most recent first.

    Pure logic; rows only need a started_at value.
    """
    total = len(rows)
    last_session_date: Optional[datetime] = None
    days_since: Optional[int] = None

    if rows:
        last_session_date = ensure_utc(datetime.fromisoformat(str(rows[0]["started_at"])))
        days_since = int(seconds_between(last_session_date, now) // 86400)

    average_per_week = (total / RECENT_WINDOW_DAYS) * 7 if total > 0 else 0.0

    return RecentSessionsResponse(
        last_session_date=last_session_date,
        days_since_last_session=days_since,
        total_sessions=total,
        average_sessions_per_week=round(average_per_week, 1),
        momentum_message=momentum_message(days_since),
    )


class RelationshipSessionService:
    """Service layer for relationship session persistence"""

    def __init__(self, repositories: RepositoryFactory, clock: Clock = utc_now):
        self.sessions = repositories.relationship_sessions
        self.actions = repositories.actions
        self._clock = clock

    async def get_session(self, session_id: str) -> RelationshipSession:
        """
        Load a session with its goal and ordered actions.

        Raises:
            SessionNotFoundError: no such session
        """
        session = await self.sessions.find_with_actions(session_id)
        if not session:
            raise SessionNotFoundError(session_id)
        return session

    async def _get_row(self, session_id: str) -> RelationshipSession:
        session = await self.sessions.find_by_id(session_id)
        if not session:
            raise SessionNotFoundError(session_id)
        return session

    async def complete_session(self, session_id: str) -> RelationshipSession:
        """
        Mark a session completed and tally its action outcomes.

        Business rules:
        - Completing an already completed session is a no-op
        - Partial completion (pending actions left) is allowed
        - An open pause is closed out into total_paused_duration
        """
        session = await self._get_row(session_id)
        if session.status is SessionStatus.COMPLETED:
            logger.info(f"Session {session_id} already completed")
            return session

        now = self._clock()
        counts = await self.actions.count_by_status(session_id)
        update = RelationshipSessionUpdate(
            status=SessionStatus.COMPLETED,
            completed_at=now,
            actions_completed=counts[ActionStatus.COMPLETED],
            actions_skipped=counts[ActionStatus.SKIPPED],
        )
        if session.timer_paused_at is not None:
            update.timer_paused_at = None
            update.total_paused_duration = session.paused_seconds + max(
                0.0, seconds_between(session.timer_paused_at, now)
            )

        updated = await self.sessions.update(session_id, update)
        if not updated:
            raise SessionNotFoundError(session_id)

        logger.info(
            f"Session {session_id} completed: {counts[ActionStatus.COMPLETED]} completed, "
            f"{counts[ActionStatus.SKIPPED]} skipped, {counts[ActionStatus.PENDING]} left pending"
        )
        return updated

    async def pause_session(self, session_id: str) -> RelationshipSession:
        """Record the pause start; pausing a paused session is a no-op"""
        session = await self._get_row(session_id)
        if session.status is SessionStatus.COMPLETED:
            raise SessionStateError(f"Session {session_id} is already completed")
        if session.timer_paused_at is not None:
            return session

        updated = await self.sessions.update(
            session_id, RelationshipSessionUpdate(timer_paused_at=self._clock())
        )
        if not updated:
            raise SessionNotFoundError(session_id)
        return updated

    async def resume_session(self, session_id: str) -> RelationshipSession:
        """Fold the open pause into total_paused_duration; no-op if not paused"""
        session = await self._get_row(session_id)
        if session.status is SessionStatus.COMPLETED:
            raise SessionStateError(f"Session {session_id} is already completed")
        if session.timer_paused_at is None:
            return session

        paused_for = max(0.0, seconds_between(session.timer_paused_at, self._clock()))
        update = RelationshipSessionUpdate(
            timer_paused_at=None,
            total_paused_duration=session.paused_seconds + paused_for,
        )
        updated = await self.sessions.update(session_id, update)
        if not updated:
            raise SessionNotFoundError(session_id)
        return updated

    async def update_action_status(
        self,
        action_id: str,
        status: ActionStatus,
        action_data: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> SessionAction:
        """Persist a single action's completion or skip"""
        if status is ActionStatus.PENDING:
            raise SessionStateError("Actions can only be marked completed or skipped")

        action = await self.actions.find_by_id(action_id)
        if not action:
            raise ActionNotFoundError(action_id)
        if action.status is not ActionStatus.PENDING:
            raise SessionStateError(f"Action {action_id} is already {action.status.value}")

        update = ActionUpdate(
            status=status,
            action_data=action_data or {},
            completed_at=self._clock(),
        )
        if user_id:
            update.completed_by_user_id = user_id

        updated = await self.actions.update(action_id, update)
        if not updated:
            raise ActionNotFoundError(action_id)
        return updated

    async def create_session(self, request: CreateSessionRequest) -> RelationshipSession:
        """
        Create a goal-focused session and attach its actions.

        Requested actions carrying an action_id are existing orphaned actions
        and are linked; the rest are inserted as new pending actions.
        """
        session = await self.sessions.create(
            RelationshipSessionCreate(
                user_id=request.user_id,
                session_type="goal_focused",
                status=SessionStatus.ACTIVE,
                goal_id=request.goal_id,
                duration_minutes=request.duration_minutes,
                timer_started_at=self._clock(),
            )
        )

        orphaned_ids: List[str] = []
        new_actions: List[ActionCreate] = []
        for action in request.actions:
            if action.action_id:
                orphaned_ids.append(action.action_id)
                continue

            new_actions.append(
                ActionCreate(
                    session_id=session.id,
                    user_id=request.user_id,
                    action_type=action.type,
                    title=action.title or default_action_title(action.type),
                    description=action.description or default_action_description(action.type),
                    contact_id=action.contact_id,
                    goal_id=action.goal_id,
                    artifact_id=action.meeting_artifact_id,
                    priority="medium",
                    status=ActionStatus.PENDING,
                    estimated_duration_minutes=15,
                    action_data={},
                    created_source="session_creation",
                )
            )

        if orphaned_ids:
            linked = await self.actions.link_to_session(orphaned_ids, session.id)
            logger.info(f"Linked {linked} orphaned actions to session {session.id}")

        if new_actions:
            await self.actions.create_many(new_actions)

        logger.info(
            f"Session {session.id} created for user {request.user_id}: "
            f"{request.duration_minutes}min, {len(request.actions)} actions"
        )
        return session

    async def get_pending_action_counts(self, user_id: str) -> PendingActionCountsResponse:
        """Roll up pending actions not yet assigned to a session"""
        counts: Dict[str, int] = {category.value: 0 for category in set(ACTION_TYPE_CATEGORIES.values())}
        for action_type in await self.actions.find_pending_unassigned_types(user_id):
            category = ACTION_TYPE_CATEGORIES.get(action_type)
            if category is not None:
                counts[category.value] += 1
        return PendingActionCountsResponse(**counts)

    async def get_recent_sessions(self, user_id: str) -> RecentSessionsResponse:
        """Momentum summary over the last 30 days"""
        now = self._clock()
        rows = await self.sessions.find_started_since(user_id, now - timedelta(days=RECENT_WINDOW_DAYS))
        return summarize_recent_sessions(rows, now)
