"""Domain models for the application"""
from .action import (
    ActionCategory,
    ActionCreate,
    ActionStatus,
    ActionUpdate,
    AddContactToGoalAction,
    AddMeetingNotesAction,
    ArtifactRef,
    ContactRef,
    DeliverPogAction,
    FollowUpAskAction,
    GoalRef,
    ReconnectAction,
    SessionAction,
    SessionActionBase,
    session_action_adapter,
)
from .relationship_session import (
    RelationshipSession,
    RelationshipSessionCreate,
    RelationshipSessionUpdate,
    SessionStatus,
)

__all__ = [
    'ActionCategory', 'ActionCreate', 'ActionStatus', 'ActionUpdate',
    'AddContactToGoalAction', 'AddMeetingNotesAction', 'DeliverPogAction',
    'FollowUpAskAction', 'ReconnectAction',
    'ArtifactRef', 'ContactRef', 'GoalRef',
    'SessionAction', 'SessionActionBase', 'session_action_adapter',
    'RelationshipSession', 'RelationshipSessionCreate', 'RelationshipSessionUpdate',
    'SessionStatus',
]
