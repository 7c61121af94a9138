"""Pytest configuration and shared fixtures for relationship session tests.

Provides a controllable clock, session factories, a fake sessions API client
and shrunk timings so async timer behaviour runs in milliseconds.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from app.config import SessionTimings
from app.features.relationship_sessions.errors import CompleteSessionError, SessionLoadError
from app.models.relationship_session import RelationshipSession

T0 = datetime(2025, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock"""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now = self.now + timedelta(seconds=seconds)


class FakeSessionsClient:
    """Stands in for SessionsApiClient; records every call"""

    def __init__(self, session: Optional[RelationshipSession] = None):
        self.session = session
        self.fetch_error: Optional[Exception] = None
        self.complete_failures = 0
        self.completed: List[str] = []
        self.complete_attempts = 0
        self.paused: List[str] = []
        self.resumed: List[str] = []
        self.action_updates: List[tuple] = []

    async def fetch_session(self, session_id: str) -> RelationshipSession:
        if self.fetch_error is not None:
            raise self.fetch_error
        if self.session is None or self.session.id != session_id:
            raise SessionLoadError(session_id, "not found")
        return self.session

    async def complete_session(self, session_id: str) -> Dict[str, Any]:
        self.complete_attempts += 1
        if self.complete_failures > 0:
            self.complete_failures -= 1
            raise CompleteSessionError(session_id, "HTTP 500", status_code=500)
        self.completed.append(session_id)
        return {"success": True}

    async def pause_session(self, session_id: str) -> Dict[str, Any]:
        self.paused.append(session_id)
        return {}

    async def resume_session(self, session_id: str) -> Dict[str, Any]:
        self.resumed.append(session_id)
        return {}

    async def update_action_status(self, action_id, status, action_data=None) -> Dict[str, Any]:
        self.action_updates.append((action_id, status))
        return {}


def action_row(action_id: str, action_type: str = "add_contact_to_goal", **extra) -> Dict[str, Any]:
    row = {
        "id": action_id,
        "action_type": action_type,
        "status": "pending",
        "title": f"Action {action_id}",
    }
    row.update(extra)
    return row


def session_row(
    session_id: str = "session-1",
    actions: Optional[List[Dict[str, Any]]] = None,
    duration_minutes: Optional[int] = 30,
    started_at: datetime = T0,
    **extra,
) -> Dict[str, Any]:
    row = {
        "id": session_id,
        "user_id": "user-1",
        "session_type": "goal_focused",
        "status": "active",
        "goal_id": "goal-1",
        "duration_minutes": duration_minutes,
        "started_at": started_at.isoformat(),
        "timer_started_at": started_at.isoformat(),
        "total_paused_duration": 0,
        "goal": {
            "id": "goal-1",
            "title": "Land a product role",
            "target_contact_count": 10,
            "goal_contacts": [{"contact_id": "c-1"}, {"contact_id": "c-2"}],
        },
        "actions": actions if actions is not None else [],
    }
    row.update(extra)
    return row


def make_session(action_count: int = 3, **kwargs) -> RelationshipSession:
    actions = kwargs.pop("actions", None)
    if actions is None:
        actions = [action_row(f"a{i}") for i in range(1, action_count + 1)]
    return RelationshipSession.model_validate(session_row(actions=actions, **kwargs))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fast_timings():
    return SessionTimings(
        tick_interval=0.01,
        celebration=0.05,
        prompt_after_complete=0.06,
        prompt_after_skip=0.02,
        swipe_animation=0.02,
        intro_overlay=0.05,
    )


@pytest.fixture
def session_factory():
    return make_session


@pytest.fixture
def fake_client():
    return FakeSessionsClient()
