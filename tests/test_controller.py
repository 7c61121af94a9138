"""SessionController tests, including end-to-end session walkthroughs"""
import asyncio

import httpx
import pytest

from app.config import SessionTimings
from app.features.relationship_sessions.client import SessionsApiClient
from app.features.relationship_sessions.controller import SessionController
from app.features.relationship_sessions.errors import CompleteSessionError, SessionLoadError
from app.features.relationship_sessions.orchestrator import CompletionState
from app.features.relationship_sessions.view import build_session_view
from app.models.action import ActionStatus

from .conftest import FakeSessionsClient, action_row, make_session


@pytest.fixture
def make_controller(clock, fast_timings):
    def _make(session=None, client=None, **kwargs):
        session = session or make_session(action_count=3)
        client = client or FakeSessionsClient(session)
        kwargs.setdefault("persist_action_progress", False)
        kwargs.setdefault("timings", fast_timings)
        return SessionController(session, client, clock=clock, **kwargs)
    return _make


@pytest.mark.asyncio
async def test_open_fetches_session(clock, fast_timings):
    session = make_session(action_count=2)
    client = FakeSessionsClient(session)

    controller = await SessionController.open(
        client, "session-1", timings=fast_timings, clock=clock, persist_action_progress=False
    )
    assert controller.queue.total == 2
    assert controller.time_remaining_seconds == 1800


@pytest.mark.asyncio
async def test_open_propagates_load_error(fast_timings):
    client = FakeSessionsClient(None)
    with pytest.raises(SessionLoadError):
        await SessionController.open(client, "missing", timings=fast_timings)


@pytest.mark.asyncio
async def test_time_runs_out_with_actions_left(make_controller, clock):
    client = FakeSessionsClient()
    async with make_controller(client=client) as controller:
        controller.mark_complete("a1")
        clock.advance(1800)
        assert controller.tick() == 0

        assert controller.time_expired
        assert not controller.scope.is_scheduled(SessionController.TICK_TIMER)
        assert controller.queue.current_action().id == "a2"
        assert controller.orchestrator.state is CompletionState.RUNNING
        assert client.completed == []

        # Actions stay workable after expiry
        assert controller.mark_complete("a2")


@pytest.mark.asyncio
async def test_all_handled_prompts_then_ends(make_controller, fast_timings):
    client = FakeSessionsClient()
    closed = []
    controller = make_controller(client=client, on_close=lambda: closed.append(True))

    async with controller:
        for action_id in ("a1", "a2", "a3"):
            assert controller.mark_complete(action_id)

        assert controller.current_action is None
        assert controller.queue.progress() == 1.0
        assert not controller.orchestrator.prompt_visible

        await asyncio.sleep(fast_timings.prompt_after_complete + 0.03)
        assert controller.orchestrator.prompt_visible

        assert await controller.end_session()

    assert client.completed == ["session-1"]
    assert closed == [True]
    assert controller.closed


@pytest.mark.asyncio
async def test_sixty_second_session_stops_at_zero(make_controller, clock):
    controller = make_controller(session=make_session(action_count=2, duration_minutes=1))
    async with controller:
        clock.advance(59)
        assert controller.tick() == 1
        clock.advance(1)
        assert controller.tick() == 0
        clock.advance(10)
        assert controller.tick() == 0
        assert controller.time_expired


@pytest.mark.asyncio
async def test_zero_actions_is_all_done_immediately(make_controller):
    client = FakeSessionsClient()
    controller = make_controller(session=make_session(action_count=0), client=client)

    async with controller:
        view = build_session_view(controller)
        assert view.all_done
        assert view.current_action is None
        assert view.progress_percent == 0
        assert view.position_label is None
        assert not view.completion_prompt_visible

        assert await controller.end_session()
    assert client.completed == ["session-1"]


@pytest.mark.asyncio
async def test_partial_completion(make_controller):
    client = FakeSessionsClient()
    controller = make_controller(session=make_session(action_count=5), client=client)

    async with controller:
        controller.mark_complete("a1")
        controller.mark_skipped("a2")
        assert await controller.end_session()

    assert client.completed == ["session-1"]
    assert controller.queue.handled_count == 2
    assert len(controller.queue.remaining_actions()) == 3


@pytest.mark.asyncio
async def test_failed_end_keeps_session_open(make_controller):
    client = FakeSessionsClient()
    client.complete_failures = 1
    controller = make_controller(client=client)

    async with controller:
        with pytest.raises(CompleteSessionError):
            await controller.end_session()

        assert not controller.closed
        view = build_session_view(controller)
        assert view.end_session_enabled
        assert view.error_message == "Failed to complete session. Please try again."

        assert await controller.end_session()
        assert build_session_view(controller).error_message is None


@pytest.mark.asyncio
async def test_celebration_clears_after_delay(make_controller, fast_timings):
    async with make_controller() as controller:
        controller.mark_complete("a1")
        assert controller.show_celebration
        assert controller.recently_completed_action_id == "a1"

        await asyncio.sleep(fast_timings.celebration + 0.03)
        assert not controller.show_celebration


@pytest.mark.asyncio
async def test_newer_celebration_replaces_older(make_controller):
    timings = SessionTimings(tick_interval=0.01, celebration=0.2)
    async with make_controller(timings=timings) as controller:
        controller.mark_complete("a1")
        await asyncio.sleep(0.1)
        controller.mark_complete("a2")
        assert controller.recently_completed_action_id == "a2"

        # The first timer would have fired by now had it not been replaced
        await asyncio.sleep(0.15)
        assert controller.recently_completed_action_id == "a2"


@pytest.mark.asyncio
async def test_skip_does_not_celebrate(make_controller):
    async with make_controller() as controller:
        controller.mark_skipped("a1")
        assert not controller.show_celebration


@pytest.mark.asyncio
async def test_close_cancels_pending_timers(make_controller, fast_timings):
    controller = make_controller()
    async with controller:
        controller.mark_complete("a1")
        assert controller.scope.is_scheduled(SessionController.TICK_TIMER)
        assert controller.scope.is_scheduled(SessionController.CELEBRATION_TIMER)

    assert controller.closed
    await asyncio.sleep(fast_timings.celebration + 0.03)
    # Cancelled, so the celebration never cleared
    assert controller.recently_completed_action_id == "a1"
    assert not controller.scope.is_scheduled(SessionController.TICK_TIMER)


@pytest.mark.asyncio
async def test_close_on_error_exit(make_controller):
    controller = make_controller()
    with pytest.raises(RuntimeError):
        async with controller:
            raise RuntimeError("view crashed")
    assert controller.closed


@pytest.mark.asyncio
async def test_intro_overlay_hides(make_controller, fast_timings):
    async with make_controller() as controller:
        assert controller.show_intro
        await asyncio.sleep(fast_timings.intro_overlay + 0.03)
        assert not controller.show_intro


@pytest.mark.asyncio
async def test_pause_stops_ticking_and_resume_restarts(make_controller, clock):
    async with make_controller() as controller:
        clock.advance(100)
        assert controller.pause()
        assert controller.is_paused
        assert not controller.scope.is_scheduled(SessionController.TICK_TIMER)

        clock.advance(300)
        assert controller.tick() == 1700

        assert controller.resume()
        assert controller.scope.is_scheduled(SessionController.TICK_TIMER)
        assert controller.time_remaining_seconds == 1700


@pytest.mark.asyncio
async def test_toggle_pause_returns_new_state(make_controller):
    async with make_controller() as controller:
        assert controller.toggle_pause() is True
        assert controller.toggle_pause() is False


@pytest.mark.asyncio
async def test_pause_sync_is_sent_in_background(make_controller):
    client = FakeSessionsClient()
    async with make_controller(client=client, sync_pause=True) as controller:
        controller.pause()
        controller.resume()
        await controller.wait_for_sync()

    assert client.paused == ["session-1"]
    assert client.resumed == ["session-1"]


@pytest.mark.asyncio
async def test_action_progress_persisted_when_enabled(make_controller):
    client = FakeSessionsClient()
    async with make_controller(client=client, persist_action_progress=True) as controller:
        controller.mark_complete("a1")
        controller.mark_skipped("a2")
        await controller.wait_for_sync()

    assert client.action_updates == [("a1", ActionStatus.COMPLETED), ("a2", ActionStatus.SKIPPED)]


@pytest.mark.asyncio
async def test_action_progress_not_persisted_by_default(make_controller):
    client = FakeSessionsClient()
    async with make_controller(client=client) as controller:
        controller.mark_complete("a1")
        await controller.wait_for_sync()
    assert client.action_updates == []


@pytest.mark.asyncio
async def test_failed_background_sync_is_logged(make_controller, caplog):
    class FailingClient(FakeSessionsClient):
        async def update_action_status(self, action_id, status, action_data=None):
            raise RuntimeError("offline")

    async with make_controller(client=FailingClient(), persist_action_progress=True) as controller:
        controller.mark_complete("a1")
        await controller.wait_for_sync()

    assert "action a1 sync failed" in caplog.text
    assert controller.queue.outcome_of("a1") is not None


@pytest.mark.asyncio
async def test_listeners_are_notified(make_controller):
    seen = []
    async with make_controller() as controller:
        controller.subscribe(lambda c: seen.append(c.queue.handled_count))
        controller.mark_skipped("a1")
    assert seen[-1] == 1


@pytest.mark.asyncio
async def test_ticks_run_on_the_loop(make_controller, clock, fast_timings):
    async with make_controller() as controller:
        clock.advance(42)
        await asyncio.sleep(fast_timings.tick_interval * 4)
        assert controller.time_remaining_seconds == 1800 - 42


@pytest.mark.asyncio
async def test_empty_success_reply_ends_session(clock, fast_timings):
    session = make_session(action_count=1)
    closed = []
    client = SessionsApiClient(
        base_url="http://sessions.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(204)),
    )
    controller = SessionController(
        session,
        client,
        on_close=lambda: closed.append(True),
        timings=fast_timings,
        clock=clock,
        persist_action_progress=False,
    )

    async with client, controller:
        assert await controller.end_session()

    assert controller.orchestrator.state is CompletionState.TERMINATED
    assert closed == [True]


@pytest.mark.asyncio
async def test_reloaded_session_resumes_after_persisted_actions(make_controller):
    session = make_session(
        actions=[
            action_row("a1", status="completed"),
            action_row("a2", status="skipped"),
            action_row("a3"),
        ]
    )
    client = FakeSessionsClient(session)

    async with make_controller(session=session, client=client, persist_action_progress=True) as controller:
        view = build_session_view(controller)
        assert view.current_action.action_id == "a3"
        assert view.position_label == "Action 3 of 3"
        assert view.progress_percent == 67

        assert not controller.mark_complete("a1")
        assert controller.mark_complete("a3")
        await controller.wait_for_sync()

    assert client.action_updates == [("a3", ActionStatus.COMPLETED)]
