"""Service for keeping the TUI in sync with the session controller."""

import logging
from typing import TYPE_CHECKING

from helpform.core import format_invocation
from helpform.exceptions import format_error_for_display
from helpform.models import SessionState
from helpform.protocols import SessionEvent, SessionObserver
from helpform.tui.widgets import DetailsPanel, FormPanel, OutputPane, StatusBar

if TYPE_CHECKING:
    from helpform.tui.app import HelpFormApp

logger = logging.getLogger(__name__)


class TUIService(SessionObserver):
    """
    Observes the SessionController and updates widgets accordingly.

    The controller never touches widgets itself; every visible change goes
    through a SessionEvent handled here.
    """

    def __init__(self, app: "HelpFormApp"):
        """
        Initialize the TUI service.

        Args:
            app: The HelpFormApp instance
        """
        self.app = app
        logger.info("TUIService initialized")

    @property
    def controller(self):
        return self.app.controller

    def on_session_event(self, event: SessionEvent, **kwargs) -> None:
        """
        Handle session events.

        Args:
            event: The type of session event
            **kwargs: Event-specific data
        """
        try:
            if event == SessionEvent.STATE_CHANGED:
                self._handle_state_changed(**kwargs)
            elif event in (SessionEvent.FRAME_PUSHED, SessionEvent.FRAME_POPPED):
                self.app.call_later(self.app.refresh_frame)
            elif event == SessionEvent.FIELD_CHANGED:
                self._handle_field_changed(**kwargs)
            elif event == SessionEvent.FOCUS_CHANGED:
                self.app.query_one(FormPanel).focus_field(kwargs["index"])
            elif event == SessionEvent.OUTPUT_RECEIVED:
                self.app.query_one(OutputPane).write_chunk(kwargs["chunk"])
            elif event == SessionEvent.VALIDATION_FAILED:
                self._handle_validation_failed(**kwargs)
            elif event == SessionEvent.ERROR:
                self._handle_error(**kwargs)
            else:
                logger.warning(f"TUIService received unknown session event: {event}")

        except Exception as e:
            logger.error(f"Error handling session event {event}: {e}")

    def _handle_state_changed(self, state: SessionState, **kwargs) -> None:
        form_panel = self.app.query_one(FormPanel)
        form_panel.disabled = state == SessionState.RUNNING

        if state == SessionState.RUNNING:
            self.app.query_one(OutputPane).start_run(format_invocation(self.controller.invocation()))
        elif state == SessionState.FINISHED and self.controller.last_status is not None:
            status = self.controller.last_status
            severity = "information" if status.success else "warning"
            self.app.notify(f"Finished: {status.describe()}", severity=severity, timeout=3)

        self.update_status_bar()

    def _handle_field_changed(self, index: int, **kwargs) -> None:
        form = self.controller.current_form
        self.app.query_one(FormPanel).update_field(index, form.error_for(index))
        self.update_details()

    def _handle_validation_failed(self, errors: dict, **kwargs) -> None:
        self.app.query_one(FormPanel).show_errors(
            {index: error for index, error in errors.items() if index >= 0}
        )
        first = next(iter(errors.values()))
        message, hint = format_error_for_display(first)
        if len(errors) > 1:
            message = f"{message} (+{len(errors) - 1} more)"
        self.app.notify(f"{message}\n{hint}" if hint else message, severity="error", timeout=5)

    def _handle_error(self, error: Exception, **kwargs) -> None:
        message, hint = format_error_for_display(error)
        self.app.notify(f"{message}\n{hint}" if hint else message, severity="error", timeout=8)

    def update_status_bar(self) -> None:
        path = " ".join(command.name for command in self.controller.path)
        self.app.query_one(StatusBar).update_state(
            self.controller.state, path, self.controller.last_status
        )

    def update_details(self) -> None:
        self.app.query_one(DetailsPanel).show(
            self.controller.path, format_invocation(self.controller.invocation())
        )
