"""Session action repository"""
from typing import Any, Dict, List

from supabase import Client  # type: ignore

from app.models.action import (
    ActionCreate,
    ActionStatus,
    ActionUpdate,
    SessionAction,
    SessionActionBase,
    session_action_adapter,
)

from .base import BaseRepository


class ActionRepository(BaseRepository[SessionActionBase, ActionCreate, ActionUpdate]):
    """Repository for action rows

    Rows are parsed into the concrete action variant selected by action_type.
    """

    def __init__(self, client: Client):
        super().__init__(client, "actions", SessionActionBase)

    def _to_model(self, data: Dict[str, Any]) -> SessionAction:
        return session_action_adapter.validate_python(data)

    async def link_to_session(self, action_ids: List[str], session_id: str) -> int:
        """Attach existing (orphaned) actions to a session

        Returns:
            Number of linked actions
        """
        if not action_ids:
            return 0

        response = (
            self._client.table(self._table_name)
            .update({"session_id": session_id})
            .in_("id", action_ids)
            .execute()
        )
        return len(response.data) if response.data else 0

    async def find_pending_unassigned_types(self, user_id: str) -> List[str]:
        """action_type of every pending action not yet attached to a session"""
        response = (
            self._client.table(self._table_name)
            .select("action_type")
            .eq("user_id", user_id)
            .eq("status", ActionStatus.PENDING.value)
            .is_("session_id", "null")
            .execute()
        )
        return [row["action_type"] for row in response.data or []]

    async def count_by_status(self, session_id: str) -> Dict[ActionStatus, int]:
        """Tally a session's actions by status"""
        response = (
            self._client.table(self._table_name)
            .select("status")
            .eq("session_id", session_id)
            .execute()
        )
        counts = {status: 0 for status in ActionStatus}
        for row in response.data or []:
            try:
                counts[ActionStatus(row["status"])] += 1
            except ValueError:
                continue
        return counts
