"""Protocol definitions for session observers."""

from enum import Enum
from typing import Any, Protocol, runtime_checkable


class SessionEvent(Enum):
    """Events fired by the SessionController."""

    STATE_CHANGED = "state_changed"          # Editing / Running / Finished transition
    FRAME_PUSHED = "frame_pushed"            # Entered a subcommand
    FRAME_POPPED = "frame_popped"            # Went back to the parent command
    FIELD_CHANGED = "field_changed"          # A field value or its error changed
    FOCUS_CHANGED = "focus_changed"          # Active field moved
    OUTPUT_RECEIVED = "output_received"      # Chunk of process output arrived
    VALIDATION_FAILED = "validation_failed"  # Submission blocked by field errors
    ERROR = "error"                          # Recoverable session-level error (e.g. spawn failure)


@runtime_checkable
class SessionObserver(Protocol):
    """
    Observer that receives session events.

    The TUI implements this to keep widgets in sync with the controller,
    but the controller itself has no dependency on Textual.
    """

    def on_session_event(self, event: SessionEvent, **kwargs: Any) -> None:
        """
        Handle a session event.

        Args:
            event: The type of session event
            **kwargs: Event-specific data (state, frame, index, chunk, errors, error)
        """
        ...
