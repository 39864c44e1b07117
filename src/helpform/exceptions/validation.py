"""Form validation exceptions.

Validation errors are recorded next to the offending field and block
submission until resolved. They never end the session.
"""

from typing import Optional

from .base import HelpFormError


class FieldValidationError(HelpFormError):
    """A field value is invalid or missing."""

    def __init__(self, field_label: str, user_message: str, recovery_hint: Optional[str] = None):
        super().__init__(
            user_message=user_message,
            technical_message=f"Validation failed for {field_label}: {user_message}",
            recoverable=True,
            recovery_hint=recovery_hint,
        )
        self.field_label = field_label


class NotANumberError(FieldValidationError):
    """A number field received text that is not a number."""

    def __init__(self, field_label: str, raw: str):
        super().__init__(field_label, f"'{raw}' is not a number", "Enter a value like 3 or 0.5")
        self.raw = raw


class NotAChoiceError(FieldValidationError):
    """An enum field received a value outside its declared choices."""

    def __init__(self, field_label: str, raw: str, choices: list[str]):
        super().__init__(
            field_label,
            f"'{raw}' is not one of: {', '.join(choices)}",
            f"Pick one of {', '.join(choices)}",
        )
        self.raw = raw
        self.choices = choices


class MissingRequiredError(FieldValidationError):
    """A required field was left unset."""

    def __init__(self, field_label: str):
        super().__init__(field_label, f"{field_label} is required")


class SubcommandRequiredError(FieldValidationError):
    """A branch command was submitted without choosing a subcommand."""

    def __init__(self, command_name: str, subcommands: list[str]):
        super().__init__(
            command_name,
            f"'{command_name}' needs a subcommand",
            f"Choose one of: {', '.join(subcommands)}",
        )
        self.subcommands = subcommands
