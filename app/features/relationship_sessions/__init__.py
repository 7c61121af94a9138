"""Relationship sessions feature module"""

from app.features.relationship_sessions.api import router
from app.features.relationship_sessions.service import RelationshipSessionService
from app.features.relationship_sessions.client import SessionsApiClient
from app.features.relationship_sessions.controller import SessionController
from app.features.relationship_sessions.timer import TimerEngine
from app.features.relationship_sessions.progress import ActionOutcome, ActionQueue
from app.features.relationship_sessions.orchestrator import CompletionOrchestrator, CompletionState
from app.features.relationship_sessions.scheduling import TimerScope
from app.features.relationship_sessions.adapters import (
    Control,
    DesktopSessionAdapter,
    Gesture,
    MobileSessionAdapter,
    adapter_for_viewport,
)
from app.features.relationship_sessions.view import (
    SessionErrorView,
    SessionView,
    build_error_view,
    build_session_view,
)
from app.features.relationship_sessions.errors import (
    CompleteSessionError,
    RelationshipSessionError,
    SessionLoadError,
    SessionNotFoundError,
    SessionStateError,
    UnknownActionError,
)

__all__ = [
    "router",
    "RelationshipSessionService",
    "SessionsApiClient",
    "SessionController",
    "TimerEngine",
    "ActionOutcome",
    "ActionQueue",
    "CompletionOrchestrator",
    "CompletionState",
    "TimerScope",
    "Control",
    "DesktopSessionAdapter",
    "Gesture",
    "MobileSessionAdapter",
    "adapter_for_viewport",
    "SessionErrorView",
    "SessionView",
    "build_error_view",
    "build_session_view",
    "CompleteSessionError",
    "RelationshipSessionError",
    "SessionLoadError",
    "SessionNotFoundError",
    "SessionStateError",
    "UnknownActionError",
]
