"""SessionsApiClient tests against an in-process transport"""
import json

import httpx
import pytest

from app.features.relationship_sessions.client import SessionsApiClient
from app.features.relationship_sessions.errors import (
    CompleteSessionError,
    SessionLoadError,
    SessionSyncError,
)
from app.models.action import ActionStatus, DeliverPogAction

from .conftest import action_row, session_row


def _client(handler) -> SessionsApiClient:
    return SessionsApiClient(base_url="http://sessions.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_session_parses_actions():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/relationship-sessions/session-1"
        row = session_row(actions=[action_row("a1", "deliver_pog"), action_row("a2")])
        return httpx.Response(200, json={"session": row})

    async with _client(handler) as client:
        session = await client.fetch_session("session-1")

    assert [a.id for a in session.actions] == ["a1", "a2"]
    assert isinstance(session.actions[0], DeliverPogAction)


@pytest.mark.asyncio
async def test_fetch_missing_session():
    async with _client(lambda request: httpx.Response(404, json={"detail": "nope"})) as client:
        with pytest.raises(SessionLoadError) as exc_info:
            await client.fetch_session("gone")
    assert exc_info.value.reason == "not found"


@pytest.mark.asyncio
async def test_fetch_server_error():
    async with _client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(SessionLoadError) as exc_info:
            await client.fetch_session("session-1")
    assert exc_info.value.reason == "HTTP 500"


@pytest.mark.asyncio
async def test_fetch_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(SessionLoadError):
            await client.fetch_session("session-1")


@pytest.mark.asyncio
async def test_fetch_unknown_action_type_is_a_load_error():
    row = session_row(actions=[action_row("a1", "write_poem")])
    async with _client(lambda request: httpx.Response(200, json={"session": row})) as client:
        with pytest.raises(SessionLoadError) as exc_info:
            await client.fetch_session("session-1")
    assert exc_info.value.reason == "malformed session payload"


@pytest.mark.asyncio
async def test_fetch_payload_without_session_key():
    async with _client(lambda request: httpx.Response(200, json={})) as client:
        with pytest.raises(SessionLoadError):
            await client.fetch_session("session-1")


@pytest.mark.asyncio
async def test_complete_session_posts_session_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "session": session_row()})

    async with _client(handler) as client:
        result = await client.complete_session("session-1")

    assert seen == {"path": "/api/relationship-sessions/complete", "body": {"sessionId": "session-1"}}
    assert result["success"] is True


@pytest.mark.asyncio
async def test_complete_session_failure_carries_status():
    async with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(CompleteSessionError) as exc_info:
            await client.complete_session("session-1")
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_update_action_status_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"action": action_row("a1", status="skipped")})

    async with _client(handler) as client:
        await client.update_action_status("a1", ActionStatus.SKIPPED)

    assert seen["path"] == "/api/relationship-sessions/actions/a1"
    assert seen["body"] == {"status": "skipped", "actionData": {}}


@pytest.mark.asyncio
async def test_pause_and_resume_paths():
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"session_id": "session-1"})

    async with _client(handler) as client:
        await client.pause_session("session-1")
        await client.resume_session("session-1")

    assert paths == [
        "/api/relationship-sessions/session-1/pause",
        "/api/relationship-sessions/session-1/resume",
    ]


@pytest.mark.asyncio
async def test_sync_failure_raises_sync_error():
    async with _client(lambda request: httpx.Response(409)) as client:
        with pytest.raises(SessionSyncError):
            await client.pause_session("session-1")


@pytest.mark.asyncio
async def test_complete_session_accepts_empty_success():
    async with _client(lambda request: httpx.Response(204)) as client:
        assert await client.complete_session("session-1") == {}


@pytest.mark.asyncio
async def test_complete_session_accepts_non_json_success():
    async with _client(lambda request: httpx.Response(200, text="ok")) as client:
        assert await client.complete_session("session-1") == {}


@pytest.mark.asyncio
async def test_fetch_non_object_payload_is_a_load_error():
    async with _client(lambda request: httpx.Response(200, json=[1, 2])) as client:
        with pytest.raises(SessionLoadError) as exc_info:
            await client.fetch_session("session-1")
    assert exc_info.value.reason == "malformed session payload"
