"""HTTP client the session engine uses to reach the sessions API"""
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from app import config
from app.models.action import ActionStatus
from app.models.relationship_session import RelationshipSession

from .errors import CompleteSessionError, SessionLoadError, SessionSyncError

logger = logging.getLogger(__name__)

API_PREFIX = "/api/relationship-sessions"


def _json_object(response: httpx.Response) -> Dict[str, Any]:
    """Body of a successful write as a dict; empty or non-object bodies give {}"""
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        logger.warning(f"Non-JSON body from {response.request.url.path}")
        return {}
    return body if isinstance(body, dict) else {}


class SessionsApiClient:
    """
    Thin async wrapper over the relationship sessions REST API.

    Errors are translated into feature exceptions; nothing is retried here.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url or config.SESSIONS_API_BASE_URL,
            timeout=timeout or config.SESSIONS_API_TIMEOUT,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "SessionsApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def fetch_session(self, session_id: str) -> RelationshipSession:
        """
        Load a session with its ordered actions.

        Raises:
            SessionLoadError: not found, network failure or malformed payload
        """
        try:
            response = await self._http.get(f"{API_PREFIX}/{session_id}")
            response.raise_for_status()
            return RelationshipSession.model_validate(response.json()["session"])
        except httpx.HTTPStatusError as e:
            logger.error(f"Session {session_id} fetch returned {e.response.status_code}")
            reason = "not found" if e.response.status_code == 404 else f"HTTP {e.response.status_code}"
            raise SessionLoadError(session_id, reason) from e
        except httpx.HTTPError as e:
            logger.error(f"Network error fetching session {session_id}: {e}")
            raise SessionLoadError(session_id, str(e) or type(e).__name__) from e
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed session payload for {session_id}: {e}")
            raise SessionLoadError(session_id, "malformed session payload") from e

    async def complete_session(self, session_id: str) -> Dict[str, Any]:
        """
        Mark a session completed.

        Raises:
            CompleteSessionError: on any non-2xx or transport failure
        """
        try:
            response = await self._http.post(f"{API_PREFIX}/complete", json={"sessionId": session_id})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CompleteSessionError(
                session_id, f"HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise CompleteSessionError(session_id, str(e) or type(e).__name__) from e

        # Any 2xx completes the session, with or without a body
        return _json_object(response)

    async def pause_session(self, session_id: str) -> Dict[str, Any]:
        return await self._sync(f"{API_PREFIX}/{session_id}/pause", None, f"pause session {session_id}")

    async def resume_session(self, session_id: str) -> Dict[str, Any]:
        return await self._sync(f"{API_PREFIX}/{session_id}/resume", None, f"resume session {session_id}")

    async def update_action_status(
        self,
        action_id: str,
        status: ActionStatus,
        action_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload = {"status": status.value, "actionData": action_data or {}}
        return await self._sync(f"{API_PREFIX}/actions/{action_id}", payload, f"update action {action_id}")

    async def _sync(self, path: str, payload: Optional[Dict[str, Any]], what: str) -> Dict[str, Any]:
        try:
            response = await self._http.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SessionSyncError(f"Failed to {what}: {e}") from e
        return _json_object(response)
