"""One editable row of the form: label, editor widget and inline error."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Checkbox, Input, Label, Select

from helpform.exceptions import FieldValidationError
from helpform.models import FieldValue, ValueKind


class FieldRow(Vertical):
    """
    Editor for a single field.

    The editor widget depends on the field kind:
    - FLAG: Checkbox
    - ENUM: Select over the declared choices
    - everything else: Input (REPEATABLE values are space separated)

    The row reports edits as FieldRow.Edited messages carrying the raw
    text; parsing and validation happen in the session controller.
    """

    DEFAULT_CSS = """
    FieldRow {
        height: auto;
        margin: 0 0 1 0;
    }

    FieldRow .field-line {
        height: auto;
    }

    FieldRow .field-label {
        width: 30%;
        padding: 1 1 0 0;
    }

    FieldRow .field-editor {
        width: 70%;
    }

    FieldRow .field-help {
        color: $text-muted;
        padding-left: 1;
    }

    FieldRow .field-error {
        color: $error;
        padding-left: 1;
        display: none;
    }

    FieldRow.-invalid .field-error {
        display: block;
    }
    """

    class Edited(Message):
        """Posted when the user changes the field's value."""

        def __init__(self, index: int, raw: str) -> None:
            """
            Initialize message.

            Args:
                index: Field index in the form
                raw: Value as entered, "" for unset
            """
            super().__init__()
            self.index = index
            self.raw = raw

    def __init__(self, index: int, field_value: FieldValue) -> None:
        super().__init__()
        self.index = index
        self.field_value = field_value

    def compose(self) -> ComposeResult:
        field = self.field_value.field
        label = field.label + (" *" if self.field_value.required else "")
        with Horizontal(classes="field-line"):
            yield Label(label, classes="field-label", markup=False)
            yield self._build_editor()
        if field.help_text:
            yield Label(self._help_line(), classes="field-help", markup=False)
        yield Label("", classes="field-error", markup=False)

    def _build_editor(self) -> Widget:
        field = self.field_value.field
        kind = self.field_value.kind

        if kind == ValueKind.FLAG:
            return Checkbox(field.key, value=self.field_value.is_set, classes="field-editor")

        if kind == ValueKind.ENUM:
            options = [(choice, choice) for choice in field.choices]
            value = self.field_value.value
            if isinstance(value, str) and value in field.choices:
                return Select(options, value=value, prompt="(unset)", classes="field-editor")
            return Select(options, prompt="(unset)", classes="field-editor")

        placeholder = field.default or ""
        if kind == ValueKind.REPEATABLE:
            placeholder = "values separated by spaces"
        return Input(
            value=self.field_value.raw or "",
            placeholder=placeholder,
            type="text",
            classes="field-editor",
        )

    def _help_line(self) -> str:
        field = self.field_value.field
        parts = [field.help_text]
        if field.default is not None:
            parts.append(f"[default: {field.default}]")
        return " ".join(parts)

    @property
    def editor(self) -> Widget:
        return self.query_one(".field-editor")

    # =================================================================
    # Editor events -> FieldRow.Edited
    # =================================================================

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.post_message(self.Edited(self.index, event.value))

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        self.post_message(self.Edited(self.index, "true" if event.value else "false"))

    def on_select_changed(self, event: Select.Changed) -> None:
        event.stop()
        raw = event.value if isinstance(event.value, str) else ""
        self.post_message(self.Edited(self.index, raw))

    # =================================================================
    # Updates from the controller
    # =================================================================

    def show_error(self, error: FieldValidationError | None) -> None:
        """Show or hide the inline validation message."""
        message = self.query_one(".field-error", Label)
        if error is None:
            self.remove_class("-invalid")
            message.update("")
        else:
            self.add_class("-invalid")
            message.update(error.user_message)

    def sync_value(self) -> None:
        """Bring the editor in line with the field value without re-posting an edit."""
        editor = self.editor
        if isinstance(editor, Checkbox):
            if editor.value != self.field_value.is_set:
                with editor.prevent(Checkbox.Changed):
                    editor.value = self.field_value.is_set
        elif isinstance(editor, Input):
            raw = self.field_value.raw or ""
            if editor.value != raw:
                with editor.prevent(Input.Changed):
                    editor.value = raw
        elif isinstance(editor, Select) and self.field_value.raw is None:
            with editor.prevent(Select.Changed):
                editor.clear()
