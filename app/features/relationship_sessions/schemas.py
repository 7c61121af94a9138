"""Request and response schemas for the relationship sessions API"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.action import ActionStatus, SessionAction
from app.models.relationship_session import RelationshipSession


class SessionResponse(BaseModel):
    session: RelationshipSession


class CompleteSessionRequest(BaseModel):
    """Body of POST /complete"""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")


class CompleteSessionResponse(BaseModel):
    success: bool
    session: RelationshipSession


class SessionTimerResponse(BaseModel):
    """Persisted pause state after a pause/resume call"""
    session_id: str
    timer_paused_at: Optional[datetime] = None
    total_paused_duration: float = 0.0


class UpdateActionStatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: ActionStatus  # completed or skipped
    action_data: Dict[str, Any] = Field(default_factory=dict, alias="actionData")
    user_id: Optional[str] = Field(None, alias="userId")


class ActionResponse(BaseModel):
    action: SessionAction


class CreateSessionActionRequest(BaseModel):
    """An action to include in a new session

    When action_id is set, the existing orphaned action is linked instead of
    inserting a new row.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: str
    goal_id: Optional[str] = Field(None, alias="goalId")
    meeting_artifact_id: Optional[str] = Field(None, alias="meetingArtifactId")
    contact_id: Optional[str] = Field(None, alias="contactId")
    title: Optional[str] = None
    description: Optional[str] = None
    action_id: Optional[str] = Field(None, alias="actionId")


class CreateSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    goal_id: str = Field(..., alias="goalId")
    duration_minutes: int = Field(..., alias="durationMinutes", ge=1)
    actions: List[CreateSessionActionRequest] = Field(default_factory=list)


class PendingActionCountsResponse(BaseModel):
    pogs: int = 0
    asks: int = 0
    follow_ups: int = 0
    meetings: int = 0
    contacts: int = 0


class RecentSessionsResponse(BaseModel):
    last_session_date: Optional[datetime] = None
    days_since_last_session: Optional[int] = None
    total_sessions: int = 0
    average_sessions_per_week: float = 0.0
    momentum_message: str
