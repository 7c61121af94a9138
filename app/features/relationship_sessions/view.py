"""View models for the session screen

Turns controller state into plain data a desktop or mobile surface renders.
No business rules live here.
"""
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Literal, Optional, assert_never

from pydantic import BaseModel

from app.config import TIMER_WARNING_THRESHOLD_SECONDS
from app.models.action import (
    AddContactToGoalAction,
    AddMeetingNotesAction,
    DeliverPogAction,
    FollowUpAskAction,
    GoalRef,
    ReconnectAction,
    SessionAction,
)
from app.utils.datetime_helper import format_countdown

from .errors import SessionLoadError

if TYPE_CHECKING:
    from .controller import SessionController


class TimerColor(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


def timer_color(remaining_seconds: int) -> TimerColor:
    if remaining_seconds <= 0:
        return TimerColor.ERROR
    if remaining_seconds <= TIMER_WARNING_THRESHOLD_SECONDS:
        return TimerColor.WARNING
    return TimerColor.SUCCESS


class ActionCard(BaseModel):
    """Card shown for the current action"""
    kind: Literal["add_contact", "meeting_notes", "pog", "ask_follow_up", "reconnect"]
    action_id: str
    action_type: str
    title: str
    subtitle: Optional[str] = None
    contact_name: Optional[str] = None
    goal_id: Optional[str] = None
    current_count: Optional[int] = None
    target_count: Optional[int] = None
    meeting_artifact_id: Optional[str] = None


def build_action_card(action: SessionAction, goal: Optional[GoalRef] = None) -> ActionCard:
    """Pick the card for an action variant"""
    match action:
        case AddContactToGoalAction():
            action_goal = action.goal or goal
            goal_title = action_goal.title if action_goal and action_goal.title else "Unknown Goal"
            return ActionCard(
                kind="add_contact",
                action_id=action.id,
                action_type=action.action_type,
                title=f"Add contacts to {goal_title}",
                subtitle=(
                    f"{action_goal.current_contact_count} of {action_goal.target_count} contacts"
                    if action_goal else None
                ),
                goal_id=action.goal_id or (action_goal.id if action_goal else None),
                current_count=action_goal.current_contact_count if action_goal else 0,
                target_count=action_goal.target_count if action_goal else 50,
            )
        case AddMeetingNotesAction():
            return ActionCard(
                kind="meeting_notes",
                action_id=action.id,
                action_type=action.action_type,
                title=action.meeting_title,
                subtitle=f"Add notes from your meeting with {action.contact_name}",
                contact_name=action.contact_name,
                meeting_artifact_id=action.artifact_id,
            )
        case DeliverPogAction():
            return ActionCard(
                kind="pog",
                action_id=action.id,
                action_type=action.action_type,
                title=action.title or "Deliver a Packet of Generosity",
                subtitle=action.description,
                contact_name=action.contact_name,
            )
        case FollowUpAskAction():
            return ActionCard(
                kind="ask_follow_up",
                action_id=action.id,
                action_type=action.action_type,
                title=action.title or f"Follow up with {action.contact_name}",
                subtitle=action.description,
                contact_name=action.contact_name,
            )
        case ReconnectAction():
            return ActionCard(
                kind="reconnect",
                action_id=action.id,
                action_type=action.action_type,
                title=action.title or f"Reconnect with {action.contact_name}",
                subtitle=action.description,
                contact_name=action.contact_name,
            )
        case _:
            assert_never(action)


class ActionContextView(BaseModel):
    """Read-only detail shown in the context drawer"""
    action_id: str
    action_type: str
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    contact_name: Optional[str] = None
    goal_title: Optional[str] = None
    created_at: Optional[datetime] = None


def build_action_context(action: SessionAction, goal: Optional[GoalRef] = None) -> ActionContextView:
    action_goal = action.goal or goal
    return ActionContextView(
        action_id=action.id,
        action_type=action.action_type,
        title=action.title,
        description=action.description,
        priority=action.priority,
        contact_name=action.contact.name if action.contact else None,
        goal_title=action_goal.title if action_goal else None,
        created_at=action.created_at,
    )


class SessionView(BaseModel):
    """Everything the session screen renders"""
    session_id: str
    layout: Literal["desktop", "mobile"] = "desktop"
    time_remaining_seconds: int
    time_display: str
    timer_color: TimerColor
    is_paused: bool
    time_expired: bool
    total_actions: int
    handled_count: int
    progress_percent: int
    position_label: Optional[str] = None
    goal_title: Optional[str] = None
    current_action: Optional[ActionCard] = None
    all_done: bool
    show_intro: bool = False
    celebrating_action_id: Optional[str] = None
    completion_prompt_visible: bool = False
    end_session_enabled: bool = True
    error_message: Optional[str] = None
    swipe_direction: Optional[Literal["left", "right"]] = None
    drawer: Optional[ActionContextView] = None


def build_session_view(controller: "SessionController") -> SessionView:
    session = controller.session
    queue = controller.queue
    goal = session.session_goal
    current = queue.current_action()
    remaining = controller.time_remaining_seconds
    error = controller.orchestrator.last_error

    return SessionView(
        session_id=session.id,
        time_remaining_seconds=remaining,
        time_display=format_countdown(remaining),
        timer_color=timer_color(remaining),
        is_paused=controller.is_paused,
        time_expired=controller.time_expired,
        total_actions=queue.total,
        handled_count=queue.handled_count,
        progress_percent=int(queue.progress() * 100 + 0.5),
        position_label=f"Action {queue.current_position()} of {queue.total}" if current else None,
        goal_title=goal.title if goal else None,
        current_action=build_action_card(current, goal) if current else None,
        all_done=current is None,
        show_intro=controller.show_intro,
        celebrating_action_id=controller.recently_completed_action_id,
        completion_prompt_visible=controller.orchestrator.prompt_visible,
        end_session_enabled=controller.orchestrator.can_end_session,
        error_message="Failed to complete session. Please try again." if error else None,
    )


class SessionErrorView(BaseModel):
    """Terminal panel shown when a session cannot be loaded"""
    session_id: str
    title: str = "Session Loading Error"
    message: str = "Failed to load relationship session. Please try again."
    recovery_label: str = "Return to Dashboard"
    reason: Optional[str] = None


def build_error_view(error: SessionLoadError) -> SessionErrorView:
    return SessionErrorView(session_id=error.session_id, reason=error.reason)
