"""Repository factory and exports"""
from supabase import Client
from .actions import ActionRepository
from .relationship_sessions import RelationshipSessionRepository


class RepositoryFactory:
    """Factory for creating repository instances"""

    def __init__(self, client: Client):
        self._client = client
        self._relationship_sessions: RelationshipSessionRepository = None
        self._actions: ActionRepository = None

    @property
    def relationship_sessions(self) -> RelationshipSessionRepository:
        """Get relationship sessions repository"""
        if self._relationship_sessions is None:
            self._relationship_sessions = RelationshipSessionRepository(self._client)
        return self._relationship_sessions

    @property
    def actions(self) -> ActionRepository:
        """Get actions repository"""
        if self._actions is None:
            self._actions = ActionRepository(self._client)
        return self._actions


__all__ = [
    'RepositoryFactory',
    'RelationshipSessionRepository',
    'ActionRepository',
]
