"""Drag-and-drop state machine using transitions library.

Makes the board's drag interaction explicit instead of leaving it to
incidental event-handler state:

    idle --drag_enter(col)--> drag_hover(col)
    drag_hover --drag_enter(col2)--> drag_hover(col2)
    drag_hover --drag_leave--> idle
    drag_hover --drop--> idle

Usage:
    from sprintboard.board.fsm import DragFSM

    fsm = DragFSM()
    fsm.drag_enter(column_id="in_progress")
    fsm.hover_column  # "in_progress"
    fsm.drop()
"""

import logging
from typing import Callable

from transitions import Machine

logger = logging.getLogger(__name__)


IDLE = "idle"
DRAG_HOVER = "drag_hover"

STATES = [IDLE, DRAG_HOVER]

TRANSITIONS = [
    {"trigger": "drag_enter", "source": IDLE, "dest": DRAG_HOVER},
    # Moving straight from one column into another
    {"trigger": "drag_enter", "source": DRAG_HOVER, "dest": DRAG_HOVER},
    {"trigger": "drag_leave", "source": DRAG_HOVER, "dest": IDLE},
    {"trigger": "drop", "source": DRAG_HOVER, "dest": IDLE},
    # Pointer released outside any column; nothing to do
    {"trigger": "reset", "source": [IDLE, DRAG_HOVER], "dest": IDLE},
]


class DragFSM:
    """Hover tracking for board columns.

    hover_column is the column that should be highlighted, or None.
    """

    def __init__(self, on_transition: Callable[[str, str, str], None] | None = None):
        """
        Args:
            on_transition: Optional callback(from_state, to_state, trigger)
        """
        self.on_transition = on_transition
        self.hover_column: str | None = None

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=IDLE,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def on_enter_drag_hover(self, event) -> None:
        self.hover_column = event.kwargs.get("column_id")

    def on_enter_idle(self, event) -> None:
        self.hover_column = None

    def on_state_change(self, event) -> None:
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.debug(f"[DRAG] {from_state} -> {to_state} ({trigger}) hover={self.hover_column}")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)
