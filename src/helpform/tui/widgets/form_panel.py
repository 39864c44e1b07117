"""Scrollable panel holding the field rows of the current command."""

from textual.containers import VerticalScroll
from textual.widgets import Label

from helpform.exceptions import FieldValidationError
from helpform.models import Command, FormState

from .field_row import FieldRow


class FormPanel(VerticalScroll):
    """
    Form for the command on top of the navigation stack.

    Rows are rebuilt whenever a frame is pushed or popped; single fields
    are refreshed in place when their value or error changes.
    """

    DEFAULT_CSS = """
    FormPanel {
        width: 2fr;
        height: 100%;
        border: solid $primary;
        padding: 0 1;
    }

    FormPanel .empty-form {
        color: $text-muted;
        padding: 1;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.border_title = "Options"
        self.rows: list[FieldRow] = []

    async def load(self, command: Command, form: FormState) -> None:
        """Replace all rows with the fields of a form."""
        await self.remove_children()
        self.border_title = f"{command.name} options"
        self.rows = [FieldRow(index, field_value) for index, field_value in enumerate(form.fields)]
        if self.rows:
            await self.mount_all(self.rows)
        else:
            await self.mount(Label("This command takes no options.", classes="empty-form"))
        self.show_errors({i: e for i, e in enumerate(form.errors) if e is not None})

    def update_field(self, index: int, error: FieldValidationError | None) -> None:
        if 0 <= index < len(self.rows):
            row = self.rows[index]
            row.sync_value()
            row.show_error(error)

    def show_errors(self, errors: dict[int, FieldValidationError]) -> None:
        """Show the given errors and clear every other row."""
        for index, row in enumerate(self.rows):
            row.show_error(errors.get(index))

    def focus_field(self, index: int) -> None:
        if 0 <= index < len(self.rows):
            row = self.rows[index]
            row.editor.focus()
            row.scroll_visible()
