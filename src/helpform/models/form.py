"""Runtime form state for one command frame."""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .command import Option, Positional
from .enums import ValueKind

if TYPE_CHECKING:
    from helpform.exceptions import FieldValidationError

ParsedValue = bool | int | float | str | list[str]


class FieldValue(BaseModel):
    """Binding of an option or positional to the value the user entered."""

    field: Option | Positional = Field(description="Model element being edited")
    raw: str | None = Field(default=None, description="Text as entered, None when unset")
    value: ParsedValue | None = Field(default=None, description="Parsed representation")

    @property
    def is_set(self) -> bool:
        """Check if the user has supplied a value."""
        if self.kind == ValueKind.FLAG:
            return self.value is True
        return self.raw is not None

    @property
    def is_option(self) -> bool:
        """True for options, False for positionals."""
        return isinstance(self.field, Option)

    @property
    def kind(self) -> ValueKind:
        """Kind of the underlying field."""
        return self.field.value_kind

    @property
    def required(self) -> bool:
        """Whether the underlying field is required."""
        return self.field.required

    def clear(self) -> None:
        """Reset to the unset state."""
        self.raw = None
        self.value = None


class FormState(BaseModel):
    """
    Editable form for a single command.

    Holds one FieldValue per option and positional, the focused field index
    and one validation-error slot per field.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    command_id: int = Field(ge=0, description="Command this form edits")
    fields: list[FieldValue] = Field(default_factory=list)
    focus: int = Field(default=0, ge=0, description="Index of the focused field")
    errors: list[Any] = Field(
        default_factory=list, description="FieldValidationError or None per field"
    )

    @property
    def focused(self) -> FieldValue | None:
        """Currently focused field, or None for an empty form."""
        if not self.fields:
            return None
        return self.fields[self.focus]

    @property
    def has_errors(self) -> bool:
        """Check if any field currently carries a validation error."""
        return any(error is not None for error in self.errors)

    def error_for(self, index: int) -> "FieldValidationError | None":
        """Get the validation error recorded for a field."""
        return self.errors[index]
