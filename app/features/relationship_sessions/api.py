"""Relationship sessions API endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from app.infra.supabase import get_supabase_client
from app.infra.supabase.repositories import RepositoryFactory
from app.features.relationship_sessions.errors import SessionStateError
from app.features.relationship_sessions.service import RelationshipSessionService
from app.features.relationship_sessions.schemas import (
    ActionResponse,
    CompleteSessionRequest,
    CompleteSessionResponse,
    CreateSessionRequest,
    PendingActionCountsResponse,
    RecentSessionsResponse,
    SessionResponse,
    SessionTimerResponse,
    UpdateActionStatusRequest,
)

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/relationship-sessions", tags=["relationship-sessions"])


def get_session_service() -> RelationshipSessionService:
    """FastAPI dependency building the service over the shared Supabase client"""
    return RelationshipSessionService(RepositoryFactory(get_supabase_client()))


@router.post("", response_model=SessionResponse)
async def create_session(
    request: CreateSessionRequest,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """
    Create a goal-focused session.

    Existing orphaned actions (those sent with an actionId) are linked to the
    new session; the others are created as pending actions.
    """
    try:
        session = await service.create_session(request)
        return {"session": session}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating session: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create session: {str(e)}"
        )


@router.post("/complete", response_model=CompleteSessionResponse)
async def complete_session(
    request: CompleteSessionRequest,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """
    Complete a session. Idempotent; pending actions may remain.

    Raises:
        404: Session not found
        500: Server error during processing
    """
    try:
        session = await service.complete_session(request.session_id)
        return {"success": True, "session": session}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error completing session {request.session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to complete session: {str(e)}"
        )


@router.get("/pending-counts", response_model=PendingActionCountsResponse)
async def get_pending_action_counts(
    user_id: str,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """Count pending actions not yet assigned to a session, by category"""
    try:
        return await service.get_pending_action_counts(user_id)
    except Exception as e:
        logger.error(f"Error counting pending actions for {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to count pending actions: {str(e)}"
        )


@router.get("/recent", response_model=RecentSessionsResponse)
async def get_recent_sessions(
    user_id: str,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """Momentum summary of the user's sessions over the last 30 days"""
    try:
        return await service.get_recent_sessions(user_id)
    except Exception as e:
        logger.error(f"Error fetching recent sessions for {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch recent sessions: {str(e)}"
        )


@router.post("/actions/{action_id}", response_model=ActionResponse)
async def update_action_status(
    action_id: str,
    request: UpdateActionStatusRequest,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """
    Persist a single action as completed or skipped.

    Raises:
        404: Action not found
        409: Action already handled, or an invalid target status
    """
    try:
        action = await service.update_action_status(
            action_id,
            request.status,
            request.action_data,
            request.user_id,
        )
        return {"action": action}
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating action {action_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update action: {str(e)}"
        )


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """Get a session with its goal and ordered actions"""
    try:
        session = await service.get_session(session_id)
        return {"session": session}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching session {session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch session: {str(e)}"
        )


@router.post("/{session_id}/pause", response_model=SessionTimerResponse)
async def pause_session(
    session_id: str,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """Persist the start of a pause. Pausing a paused session is a no-op."""
    try:
        session = await service.pause_session(session_id)
        return SessionTimerResponse(
            session_id=session.id,
            timer_paused_at=session.timer_paused_at,
            total_paused_duration=session.paused_seconds,
        )
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error pausing session {session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to pause session: {str(e)}"
        )


@router.post("/{session_id}/resume", response_model=SessionTimerResponse)
async def resume_session(
    session_id: str,
    service: RelationshipSessionService = Depends(get_session_service),
):
    """Fold the open pause into the total paused duration"""
    try:
        session = await service.resume_session(session_id)
        return SessionTimerResponse(
            session_id=session.id,
            timer_paused_at=session.timer_paused_at,
            total_paused_duration=session.paused_seconds,
        )
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error resuming session {session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to resume session: {str(e)}"
        )
