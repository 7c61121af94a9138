"""Relationship session domain model"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.config import DEFAULT_SESSION_DURATION_MINUTES
from .action import GoalRef, SessionAction


class SessionStatus(str, Enum):
    """Persisted session status"""
    ACTIVE = "active"
    COMPLETED = "completed"


class RelationshipSession(BaseModel):
    """Session aggregate: metadata plus its ordered actions"""
    id: str
    user_id: Optional[str] = None
    session_type: str = "goal_focused"
    status: SessionStatus = SessionStatus.ACTIVE
    goal_id: Optional[str] = None
    duration_minutes: Optional[int] = None
    started_at: datetime
    timer_started_at: Optional[datetime] = None
    timer_paused_at: Optional[datetime] = None
    total_paused_duration: Optional[float] = None  # seconds
    completed_at: Optional[datetime] = None
    actions_completed: Optional[int] = None
    actions_skipped: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    goal: Optional[GoalRef] = None
    actions: List[SessionAction] = Field(default_factory=list)

    class Config:
        from_attributes = True

    @property
    def effective_duration_minutes(self) -> int:
        return self.duration_minutes or DEFAULT_SESSION_DURATION_MINUTES

    @property
    def timer_anchor(self) -> datetime:
        """Instant the countdown started"""
        return self.timer_started_at or self.started_at

    @property
    def paused_seconds(self) -> float:
        return self.total_paused_duration or 0.0

    @property
    def session_goal(self) -> Optional[GoalRef]:
        """Session goal, falling back to the first action's goal"""
        if self.goal:
            return self.goal
        if self.actions:
            return self.actions[0].goal
        return None


class RelationshipSessionCreate(BaseModel):
    """Session row insert model"""
    user_id: str
    session_type: str = "goal_focused"
    status: SessionStatus = SessionStatus.ACTIVE
    goal_id: Optional[str] = None
    duration_minutes: int
    timer_started_at: datetime


class RelationshipSessionUpdate(BaseModel):
    """Session row update model - all fields optional"""
    status: Optional[SessionStatus] = None
    completed_at: Optional[datetime] = None
    timer_paused_at: Optional[datetime] = None
    total_paused_duration: Optional[float] = None
    actions_completed: Optional[int] = None
    actions_skipped: Optional[int] = None
