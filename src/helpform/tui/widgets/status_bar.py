"""Status bar widget showing session state, command path and exit status."""

from textual.widgets import Static

from helpform.models import ExitStatus, SessionState


class StatusBar(Static):
    """
    Status bar displaying current session state.

    Shows:
    - Session state (editing, running or finished)
    - Current command path
    - Exit status of the last run
    """

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $panel;
        color: $text;
        padding: 0 1;
    }

    StatusBar.editing {
        background: $accent;
    }

    StatusBar.running {
        background: $warning;
    }

    StatusBar.finished {
        background: $success;
    }

    StatusBar.failed {
        background: $error;
    }
    """

    def __init__(self) -> None:
        """Initialize status bar."""
        super().__init__()
        self._state = SessionState.EDITING
        self._command_path = ""
        self._status: ExitStatus | None = None
        self._update_display()

    def update_state(
        self,
        state: SessionState,
        command_path: str,
        status: ExitStatus | None = None,
    ) -> None:
        """
        Update all status information.

        Args:
            state: Current session state
            command_path: Space separated path of the current command
            status: How the last run ended, if it has
        """
        self._state = state
        self._command_path = command_path
        self._status = status
        self._update_display()

    def _update_display(self) -> None:
        """Update the status bar display."""
        self.remove_class("editing", "running", "finished", "failed")

        if self._state == SessionState.RUNNING:
            state_text = "▶ RUNNING  esc: cancel"
            self.add_class("running")
        elif self._state == SessionState.FINISHED:
            outcome = self._status.describe() if self._status else "done"
            state_text = f"■ FINISHED ({outcome})  esc: back to form"
            ok = self._status is not None and self._status.success
            self.add_class("finished" if ok else "failed")
        else:
            state_text = "✏ EDITING  ctrl+r: run"
            self.add_class("editing")

        parts = [state_text]
        if self._command_path:
            parts.append(self._command_path)

        self.update(" | ".join(parts))
