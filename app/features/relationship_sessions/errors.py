"""Relationship session errors"""


class RelationshipSessionError(Exception):
    """Base error for the relationship session feature"""


class SessionLoadError(RelationshipSessionError):
    """Session could not be fetched (not found, network, malformed payload)"""

    def __init__(self, session_id: str, reason: str):
        self.session_id = session_id
        self.reason = reason
        super().__init__(f"Failed to load relationship session {session_id}: {reason}")


class CompleteSessionError(RelationshipSessionError):
    """Complete-session request failed; the caller may retry"""

    def __init__(self, session_id: str, reason: str, status_code: int | None = None):
        self.session_id = session_id
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to complete session {session_id}: {reason}")


class SessionSyncError(RelationshipSessionError):
    """A pause/resume or action-progress write failed"""


class UnknownActionError(RelationshipSessionError, ValueError):
    """Action id does not belong to the session"""

    def __init__(self, action_id: str):
        self.action_id = action_id
        super().__init__(f"Action {action_id} is not part of this session")


class SessionNotFoundError(RelationshipSessionError, ValueError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Relationship session {session_id} not found")


class ActionNotFoundError(RelationshipSessionError, ValueError):
    def __init__(self, action_id: str):
        self.action_id = action_id
        super().__init__(f"Action {action_id} not found")


class SessionStateError(RelationshipSessionError, ValueError):
    """Operation is not valid for the session's current state"""
