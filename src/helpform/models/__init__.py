"""Data models for commands, forms, processes and configuration."""

from .command import Command, Option, Positional
from .config import AppConfig
from .enums import LineKind, SessionState, ValueKind
from .execution import ExitStatus, OutputChunk
from .form import FieldValue, FormState, ParsedValue

__all__ = [
    "AppConfig",
    "Command",
    "ExitStatus",
    "FieldValue",
    "FormState",
    "LineKind",
    "Option",
    "OutputChunk",
    "ParsedValue",
    "Positional",
    "SessionState",
    "ValueKind",
]
