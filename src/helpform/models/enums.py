"""Enumerations for the help-text model and the interactive session."""

from enum import Enum


class ValueKind(str, Enum):
    """Kind of value a field accepts."""

    FLAG = "flag"  # Boolean switch, never carries a value
    STRING = "string"
    NUMBER = "number"
    ENUM = "enum"  # One of a declared set of choices
    REPEATABLE = "repeatable"  # Zero or more values


class LineKind(str, Enum):
    """Classification of a single line of help text."""

    USAGE = "usage"
    DESCRIPTION = "description"
    OPTIONS_HEADER = "options_header"
    OPTION_LINE = "option_line"
    ARGUMENTS_HEADER = "arguments_header"
    ARGUMENT_LINE = "argument_line"
    SUBCOMMANDS_HEADER = "subcommands_header"
    SUBCOMMAND_LINE = "subcommand_line"
    CONTINUATION = "continuation"  # Wrapped text belonging to the previous entry
    BLANK = "blank"
    UNRECOGNIZED = "unrecognized"


class SessionState(str, Enum):
    """States of the interactive session."""

    EDITING = "editing"
    RUNNING = "running"
    FINISHED = "finished"
