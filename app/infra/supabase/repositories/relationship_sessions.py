"""Relationship session repository"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase import Client  # type: ignore

from app.models.relationship_session import (
    RelationshipSession,
    RelationshipSessionCreate,
    RelationshipSessionUpdate,
)

from .base import BaseRepository

_GOAL_SELECT = """
    id, title, description, target_contact_count,
    goal_contacts(
        contact_id,
        contacts!inner(id, name, email)
    )
"""

SESSION_WITH_ACTIONS_SELECT = f"""
    *,
    goal:goals({_GOAL_SELECT}),
    actions:actions(
        *,
        contact:contacts(id, name),
        artifact:artifacts!artifact_id(id, metadata, created_at),
        goal:goals({_GOAL_SELECT})
    )
"""


def _action_sort_key(action: Dict[str, Any]):
    return (action.get("created_at") or "", action.get("id") or "")


class RelationshipSessionRepository(
    BaseRepository[RelationshipSession, RelationshipSessionCreate, RelationshipSessionUpdate]
):
    """Repository for relationship session operations"""

    def __init__(self, client: Client):
        super().__init__(client, "relationship_sessions", RelationshipSession)

    async def find_with_actions(self, session_id: str) -> Optional[RelationshipSession]:
        """Find a session with its goal and actions joined

        Actions are returned in creation order so the session queue is stable
        across fetches.
        """
        response = (
            self._client.table(self._table_name)
            .select(SESSION_WITH_ACTIONS_SELECT)
            .eq("id", session_id)
            .execute()
        )

        if not response.data:
            return None

        row = dict(response.data[0])
        row["actions"] = sorted(row.get("actions") or [], key=_action_sort_key)
        return self._to_model(row)

    async def find_started_since(self, user_id: str, since: datetime) -> List[Dict[str, Any]]:
        """Session start/complete stamps for a user, most recent first"""
        response = (
            self._client.table(self._table_name)
            .select("started_at, completed_at, status")
            .eq("user_id", user_id)
            .gte("started_at", since.isoformat())
            .order("started_at", desc=True)
            .execute()
        )
        return response.data or []
