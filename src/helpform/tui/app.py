"""Textual application presenting a command's help text as a form."""

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import DescendantFocus
from textual.widgets import Footer, Header, OptionList

from helpform.core import SessionController
from helpform.exceptions import FieldValidationError
from helpform.models import SessionState

from .decorators import handle_action_errors, require_state
from .services import TUIService
from .widgets import DetailsPanel, FieldRow, FormPanel, OutputPane, StatusBar, SubcommandList

logger = logging.getLogger(__name__)


class HelpFormApp(App):
    """
    Textual TUI for filling in a command line.

    A pure UI layer: the SessionController owns navigation, form state and
    the running process. Widgets are refreshed by TUIService in response
    to session events.

    Layout:
    - Form panel: one row per option and positional of the current command
    - Side: command details with invocation preview, subcommand list
    - Output log of the last run
    - Status bar with session state and exit status

    Escape goes back to the parent command while editing, cancels a
    running process, and returns to the form once a run has finished.
    """

    TITLE = "helpform"

    CSS = """
    #main {
        height: 2fr;
    }

    #side {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+r", "run", "Run", show=True),
        Binding("escape", "back", "Back / Cancel", show=True),
        Binding("ctrl+l", "clear_field", "Clear Field", show=True),
        Binding("ctrl+down", "focus_next_field", "Next Field", show=False),
        Binding("ctrl+up", "focus_previous_field", "Previous Field", show=False),
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(self, controller: SessionController):
        """
        Initialize the Textual UI application.

        Args:
            controller: A started SessionController (root command resolved)
        """
        super().__init__()
        self.controller = controller
        self.tui_service = TUIService(self)
        logger.info("HelpFormApp created")

    # =================================================================
    # Textual Lifecycle
    # =================================================================

    def compose(self) -> ComposeResult:
        """Create the main layout."""
        yield Header()

        with Horizontal(id="main"):
            yield FormPanel()
            with Vertical(id="side"):
                yield DetailsPanel()
                yield SubcommandList()

        yield OutputPane()
        yield StatusBar()
        yield Footer()

    async def on_mount(self) -> None:
        self.controller.register_observer(self.tui_service)
        await self.refresh_frame()
        logger.info("TUI mounted")

    def on_unmount(self) -> None:
        self.controller.quit()
        logger.info("TUI unmounted")

    async def refresh_frame(self) -> None:
        """Rebuild every widget for the frame on top of the navigation stack."""
        command = self.controller.current_command
        form = self.controller.current_form

        await self.query_one(FormPanel).load(command, form)
        self.query_one(SubcommandList).load(
            [
                (name, self.controller.catalog.get(child_id).description)
                for name, child_id in command.subcommands.items()
            ],
            required=command.is_branch,
        )
        self.tui_service.update_details()
        self.tui_service.update_status_bar()
        self.sub_title = " ".join(c.name for c in self.controller.path)

        if form.fields:
            self.query_one(FormPanel).focus_field(form.focus)
        elif command.subcommands:
            self.query_one(SubcommandList).focus()

    # =================================================================
    # Widget messages
    # =================================================================

    def on_field_row_edited(self, event: FieldRow.Edited) -> None:
        if self.controller.state != SessionState.EDITING:
            return
        try:
            self.controller.set_field(event.index, event.raw)
        except FieldValidationError as e:
            # Shown inline next to the field
            logger.debug(f"Field {event.index} rejected: {e.user_message}")

    def on_descendant_focus(self, event: DescendantFocus) -> None:
        for node in event.widget.ancestors_with_self:
            if isinstance(node, FieldRow):
                self.controller.engine.focus(self.controller.current_form, node.index)
                return

    @handle_action_errors("open subcommand")
    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if not isinstance(event.option_list, SubcommandList) or event.option.id is None:
            return
        if self.controller.state != SessionState.EDITING:
            return
        self.controller.select_subcommand(event.option.id)

    # =================================================================
    # Actions
    # =================================================================

    @handle_action_errors("run command")
    @require_state(SessionState.EDITING)
    async def action_run(self) -> None:
        """Validate the form and run the invocation."""
        if await self.controller.submit():
            self.run_worker(self._stream_output(), group="process", exclusive=True)

    @handle_action_errors("stream output")
    async def _stream_output(self) -> None:
        await self.controller.stream_output()

    @handle_action_errors("go back")
    def action_back(self) -> None:
        state = self.controller.state
        if state == SessionState.RUNNING:
            self.controller.cancel()
        elif state == SessionState.FINISHED:
            self.controller.acknowledge()
        else:
            self.controller.back()

    @handle_action_errors("clear field")
    @require_state(SessionState.EDITING)
    def action_clear_field(self) -> None:
        form = self.controller.current_form
        if form.fields:
            self.controller.clear_field(form.focus)

    @require_state(SessionState.EDITING)
    def action_focus_next_field(self) -> None:
        self.controller.focus_next()

    @require_state(SessionState.EDITING)
    def action_focus_previous_field(self) -> None:
        self.controller.focus_previous()

    async def action_quit(self) -> None:
        """Kill any running process and exit."""
        self.controller.quit()
        self.exit()
