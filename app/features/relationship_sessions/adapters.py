"""Desktop and mobile presentation adapters

Both adapters translate user input into the same controller primitives.
The mobile adapter adds swipe and long-press gestures on top.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Literal, Optional

from .controller import SessionController
from .errors import CompleteSessionError
from .view import SessionView, build_action_context, build_session_view

logger = logging.getLogger(__name__)

# Viewports narrower than this render the mobile layout
MOBILE_BREAKPOINT_PX = 900


class Control(str, Enum):
    """Buttons available on both layouts"""
    COMPLETE = "complete"
    SKIP = "skip"
    PAUSE_RESUME = "pause_resume"
    CONTINUE_WORKING = "continue_working"
    END_SESSION = "end_session"
    CLOSE = "close"


class Gesture(str, Enum):
    """Touch gestures on the mobile layout"""
    SWIPE_RIGHT = "swipe_right"
    SWIPE_LEFT = "swipe_left"
    SWIPE_DOWN = "swipe_down"
    LONG_PRESS = "long_press"


class SessionAdapter:
    """Shared control handling; input with nothing to act on is a no-op"""

    layout: Literal["desktop", "mobile"] = "desktop"

    def __init__(self, controller: SessionController, on_close: Optional[Callable[[], Any]] = None):
        self.controller = controller
        self._on_close = on_close

    async def press(self, control: Control) -> bool:
        """
        Handle a button press.

        Returns:
            True if the press changed session state
        """
        controller = self.controller

        if control is Control.COMPLETE:
            current = controller.current_action
            if current is None:
                return False
            return controller.mark_complete(current.id)

        if control is Control.SKIP:
            current = controller.current_action
            if current is None:
                return False
            return controller.mark_skipped(current.id)

        if control is Control.PAUSE_RESUME:
            controller.toggle_pause()
            return True

        if control is Control.CONTINUE_WORKING:
            return controller.continue_working()

        if control is Control.END_SESSION:
            try:
                return await controller.end_session()
            except CompleteSessionError:
                # Shown inline via the view's error_message; control stays enabled
                return False

        if control is Control.CLOSE:
            controller.close()
            if self._on_close is not None:
                result = self._on_close()
                if asyncio.iscoroutine(result):
                    await result
            return True

        raise ValueError(f"Unsupported control: {control}")

    def render(self) -> SessionView:
        view = build_session_view(self.controller)
        view.layout = self.layout
        return view


class DesktopSessionAdapter(SessionAdapter):
    layout = "desktop"


class MobileSessionAdapter(SessionAdapter):
    """
    Adds gestures: swipe right completes, swipe left skips, swipe down or
    long-press opens a read-only context drawer.

    Swipes play a transform-out animation before the state changes; the
    action is captured when the gesture lands.
    """

    layout = "mobile"
    SWIPE_TIMER = "swipe_animation"

    def __init__(self, controller: SessionController, on_close: Optional[Callable[[], Any]] = None):
        super().__init__(controller, on_close)
        self.swipe_direction: Optional[Literal["left", "right"]] = None
        self.drawer_action_id: Optional[str] = None

    def handle_gesture(self, gesture: Gesture) -> bool:
        """
        Handle a gesture.

        Returns:
            True if the gesture was accepted
        """
        current = self.controller.current_action
        if current is None:
            logger.debug(f"Ignoring {gesture.value} with no current action")
            return False

        if gesture in (Gesture.SWIPE_RIGHT, Gesture.SWIPE_LEFT):
            if self.swipe_direction is not None:
                # Previous swipe still animating
                return False

            direction = "right" if gesture is Gesture.SWIPE_RIGHT else "left"
            self.swipe_direction = direction
            action_id = current.id
            self.controller.scope.call_later(
                self.SWIPE_TIMER,
                self.controller.timings.swipe_animation,
                lambda: self._finish_swipe(action_id, direction),
            )
            return True

        if gesture in (Gesture.SWIPE_DOWN, Gesture.LONG_PRESS):
            self.drawer_action_id = current.id
            return True

        raise ValueError(f"Unsupported gesture: {gesture}")

    def _finish_swipe(self, action_id: str, direction: str):
        self.swipe_direction = None
        if direction == "right":
            self.controller.mark_complete(action_id)
        else:
            self.controller.mark_skipped(action_id)

    def close_drawer(self) -> bool:
        if self.drawer_action_id is None:
            return False
        self.drawer_action_id = None
        return True

    def render(self) -> SessionView:
        view = super().render()
        view.swipe_direction = self.swipe_direction

        if self.drawer_action_id is not None:
            session = self.controller.session
            action = next((a for a in session.actions if a.id == self.drawer_action_id), None)
            if action is not None:
                view.drawer = build_action_context(action, session.session_goal)
        return view


def adapter_for_viewport(
    controller: SessionController,
    viewport_width: int,
    on_close: Optional[Callable[[], Any]] = None,
) -> SessionAdapter:
    """Mobile layout below the breakpoint, desktop otherwise"""
    if viewport_width < MOBILE_BREAKPOINT_PX:
        return MobileSessionAdapter(controller, on_close)
    return DesktopSessionAdapter(controller, on_close)
