"""Form engine: builds editable forms from commands and validates input."""

import logging
import shlex

from helpform.exceptions import (
    FieldValidationError,
    MissingRequiredError,
    NotAChoiceError,
    NotANumberError,
    SubcommandRequiredError,
)
from helpform.models import (
    Command,
    FieldValue,
    FormState,
    Option,
    ParsedValue,
    Positional,
    ValueKind,
)
from helpform.parsing.builder import is_number

from .catalog import CommandCatalog

logger = logging.getLogger(__name__)

TRUE_WORDS = {"true", "yes", "on", "1", "y"}
FALSE_WORDS = {"false", "no", "off", "0", "n"}

# Key used in validate() results for errors that belong to the command itself
COMMAND_ERROR_KEY = -1


class FormEngine:
    """
    Turns Command nodes into forms and keeps field values consistent.

    The engine is stateless apart from its choice-matching policy; all
    mutable state lives in the FormState it is handed. Every mutation
    re-validates the touched field, so the error slot of a field always
    reflects its current value.
    """

    def __init__(self, case_insensitive_choices: bool = False):
        """
        Initialize the engine.

        Args:
            case_insensitive_choices: Accept enum values regardless of case and
                normalize them to the declared spelling
        """
        self.case_insensitive_choices = case_insensitive_choices

    # =================================================================
    # Form construction
    # =================================================================

    def build_form(self, command: Command) -> FormState:
        """
        Create an empty form for a command.

        Fields are ordered options first (in help order), then positionals
        by ascending position index. Focus starts on the first field.
        """
        fields = [FieldValue(field=option) for option in command.options]
        fields.extend(
            FieldValue(field=positional)
            for positional in sorted(command.positionals, key=lambda p: p.position_index)
        )
        return FormState(command_id=command.id, fields=fields, errors=[None] * len(fields))

    # =================================================================
    # Field editing
    # =================================================================

    def set_field(self, state: FormState, index: int, raw: str) -> FieldValue:
        """
        Store a value entered by the user.

        The raw text is parsed according to the field's kind. Setting the
        same raw value twice leaves the form unchanged. Empty text clears
        the field.

        Args:
            state: Form to edit
            index: Field index
            raw: Text as typed

        Returns:
            The updated field

        Raises:
            NotANumberError: If a number field receives non-numeric text
            NotAChoiceError: If an enum field receives a value outside its choices
            IndexError: If the index is out of range
        """
        field_value = state.fields[index]

        if raw.strip() == "":
            self.clear_field(state, index)
            return field_value

        try:
            parsed = self._parse(field_value.field, raw)
        except FieldValidationError as e:
            # Keep what was typed so the user can correct it in place
            field_value.raw = raw
            field_value.value = None
            state.errors[index] = e
            logger.debug(f"Rejected value for {field_value.field.label}: {e.user_message}")
            raise

        if field_value.kind == ValueKind.FLAG:
            field_value.raw = raw if parsed else None
        else:
            field_value.raw = raw
        field_value.value = parsed
        state.errors[index] = None
        return field_value

    def toggle_field(self, state: FormState, index: int) -> FieldValue:
        """
        Flip a flag field on or off.

        Raises:
            ValueError: If the field is not a flag
        """
        field_value = state.fields[index]
        if field_value.kind != ValueKind.FLAG:
            raise ValueError(f"{field_value.field.label} is not a flag")
        if field_value.is_set:
            field_value.clear()
        else:
            field_value.raw = "true"
            field_value.value = True
        state.errors[index] = None
        return field_value

    def clear_field(self, state: FormState, index: int) -> FieldValue:
        """Reset a field to unset and drop its error."""
        field_value = state.fields[index]
        field_value.clear()
        state.errors[index] = None
        return field_value

    # =================================================================
    # Focus
    # =================================================================

    def focus_next(self, state: FormState) -> int:
        """Move focus to the next field, wrapping at the end."""
        if state.fields:
            state.focus = (state.focus + 1) % len(state.fields)
        return state.focus

    def focus_previous(self, state: FormState) -> int:
        """Move focus to the previous field, wrapping at the start."""
        if state.fields:
            state.focus = (state.focus - 1) % len(state.fields)
        return state.focus

    def focus(self, state: FormState, index: int) -> int:
        """Move focus to a specific field."""
        if not 0 <= index < len(state.fields):
            raise IndexError(f"Field index {index} out of range")
        state.focus = index
        return state.focus

    # =================================================================
    # Validation
    # =================================================================

    def validate(self, state: FormState, command: Command) -> dict[int, FieldValidationError]:
        """
        Re-check every field of a form.

        Can be called at any time; the form's error slots are refreshed to
        match the result.

        Args:
            state: Form to check
            command: Command the form belongs to

        Returns:
            Field index -> error. Errors that belong to the command itself
            (a branch command without a chosen subcommand) use key -1.
        """
        errors: dict[int, FieldValidationError] = {}

        for index, field_value in enumerate(state.fields):
            error: FieldValidationError | None = None
            if field_value.raw is not None:
                try:
                    self._parse(field_value.field, field_value.raw)
                except FieldValidationError as e:
                    error = e
            elif field_value.required and field_value.kind != ValueKind.FLAG:
                error = MissingRequiredError(field_value.field.label)

            state.errors[index] = error
            if error is not None:
                errors[index] = error

        if command.is_branch:
            errors[COMMAND_ERROR_KEY] = SubcommandRequiredError(
                command.name, list(command.subcommands)
            )

        if errors:
            logger.debug(f"Form for '{command.name}' has {len(errors)} error(s)")
        return errors

    # =================================================================
    # Navigation
    # =================================================================

    def select_subcommand(self, catalog: CommandCatalog, command: Command, name: str) -> Command:
        """
        Resolve a subcommand of the current command.

        The subcommand's help text is fetched on first use only.

        Raises:
            CommandNotFoundError: If the command declares no such subcommand
            HelpFetchError: If the subcommand's help text cannot be obtained
        """
        return catalog.child(command, name)

    # =================================================================
    # Parsing
    # =================================================================

    def _parse(self, field: Option | Positional, raw: str) -> ParsedValue:
        kind = field.value_kind

        if kind == ValueKind.FLAG:
            word = raw.strip().lower()
            if word in TRUE_WORDS:
                return True
            if word in FALSE_WORDS:
                return False
            raise FieldValidationError(
                field.label, f"'{raw}' is not a yes/no value", "Enter yes or no"
            )

        if kind == ValueKind.NUMBER:
            return self._parse_number(field, raw)

        if kind == ValueKind.ENUM:
            return self._match_choice(field, raw.strip())

        if kind == ValueKind.REPEATABLE:
            try:
                items = shlex.split(raw)
            except ValueError:
                items = raw.split()
            if field.choices:
                return [self._match_choice(field, item) for item in items]
            return items

        return raw

    def _parse_number(self, field: Option | Positional, raw: str) -> int | float:
        # Plain decimal literals only; int()/float() would also take nan, inf and 1_000
        text = raw.strip()
        if not is_number(text):
            raise NotANumberError(field.label, raw)
        try:
            return int(text)
        except ValueError:
            return float(text)

    def _match_choice(self, field: Option | Positional, value: str) -> str:
        if value in field.choices:
            return value
        if self.case_insensitive_choices:
            for choice in field.choices:
                if choice.lower() == value.lower():
                    return choice
        raise NotAChoiceError(field.label, value, field.choices)
