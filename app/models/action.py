"""Session action domain models

Actions are a closed set of variants discriminated by ``action_type``.
Type-specific behaviour dispatches with ``match`` + ``assert_never`` so a new
variant has to be handled everywhere it matters.
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class ActionStatus(str, Enum):
    """Action lifecycle status"""
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class ActionCategory(str, Enum):
    """Display bucket for pending action roll-ups"""
    POGS = "pogs"
    ASKS = "asks"
    FOLLOW_UPS = "follow_ups"
    MEETINGS = "meetings"
    CONTACTS = "contacts"


class ContactRef(BaseModel):
    """Contact embedded in an action or goal row"""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class GoalContactRef(BaseModel):
    contact_id: str
    contacts: Optional[ContactRef] = None


class GoalRef(BaseModel):
    """Goal embedded in a session or action row"""
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    target_contact_count: Optional[int] = None
    goal_contacts: List[GoalContactRef] = Field(default_factory=list)

    @property
    def current_contact_count(self) -> int:
        return len(self.goal_contacts)

    @property
    def target_count(self) -> int:
        return self.target_contact_count or 50


class ArtifactRef(BaseModel):
    """Meeting artifact embedded in an action row"""
    id: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    @property
    def title(self) -> Optional[str]:
        if self.metadata and isinstance(self.metadata.get("title"), str):
            return self.metadata["title"]
        return None


class SessionActionBase(BaseModel):
    """Fields shared by every action variant"""
    id: str
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    status: ActionStatus = ActionStatus.PENDING
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    contact_id: Optional[str] = None
    goal_id: Optional[str] = None
    artifact_id: Optional[str] = None
    action_data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Joined relations
    contact: Optional[ContactRef] = None
    goal: Optional[GoalRef] = None
    artifact: Optional[ArtifactRef] = None

    @property
    def contact_name(self) -> str:
        if self.contact and self.contact.name:
            return self.contact.name
        return "Unknown Contact"


class AddContactToGoalAction(SessionActionBase):
    action_type: Literal["add_contact_to_goal"]


class AddMeetingNotesAction(SessionActionBase):
    action_type: Literal["add_meeting_notes"]

    @property
    def meeting_title(self) -> str:
        if self.action_data and isinstance(self.action_data.get("meeting_title"), str):
            return self.action_data["meeting_title"]
        if self.artifact and self.artifact.title:
            return self.artifact.title
        return "Meeting"


class DeliverPogAction(SessionActionBase):
    """Packet of Generosity offered to a contact"""
    action_type: Literal["deliver_pog", "make_introduction", "share_content"]


class FollowUpAskAction(SessionActionBase):
    action_type: Literal["follow_up_ask", "send_follow_up"]


class ReconnectAction(SessionActionBase):
    action_type: Literal["reconnect_with_contact", "schedule_meeting"]


SessionAction = Annotated[
    Union[
        AddContactToGoalAction,
        AddMeetingNotesAction,
        DeliverPogAction,
        FollowUpAskAction,
        ReconnectAction,
    ],
    Field(discriminator="action_type"),
]

session_action_adapter: TypeAdapter[SessionAction] = TypeAdapter(SessionAction)


# Pending roll-up bucket for every action_type the variants accept
ACTION_TYPE_CATEGORIES: Dict[str, ActionCategory] = {
    "deliver_pog": ActionCategory.POGS,
    "make_introduction": ActionCategory.POGS,
    "share_content": ActionCategory.POGS,
    "follow_up_ask": ActionCategory.ASKS,
    "send_follow_up": ActionCategory.ASKS,
    "reconnect_with_contact": ActionCategory.FOLLOW_UPS,
    "schedule_meeting": ActionCategory.FOLLOW_UPS,
    "add_meeting_notes": ActionCategory.MEETINGS,
    "add_contact_to_goal": ActionCategory.CONTACTS,
}


class ActionCreate(BaseModel):
    """Action row insert model"""
    session_id: Optional[str] = None
    user_id: str
    action_type: str
    title: str
    description: Optional[str] = None
    priority: str = "medium"
    status: ActionStatus = ActionStatus.PENDING
    contact_id: Optional[str] = None
    goal_id: Optional[str] = None
    artifact_id: Optional[str] = None
    estimated_duration_minutes: Optional[int] = 15
    action_data: Dict[str, Any] = Field(default_factory=dict)
    created_source: Optional[str] = None


class ActionUpdate(BaseModel):
    """Action row update model - all fields optional"""
    status: Optional[ActionStatus] = None
    action_data: Optional[Dict[str, Any]] = None
    completed_at: Optional[datetime] = None
    completed_by_user_id: Optional[str] = None
    session_id: Optional[str] = None
