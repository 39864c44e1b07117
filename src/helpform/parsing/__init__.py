"""Help-text parsing: line classification, model building and help retrieval."""

from .builder import build_command, parse_option, parse_usage
from .classifier import ClassifiedLine, classify
from .help_source import HelpSource, SubprocessHelpSource

__all__ = [
    "ClassifiedLine",
    "HelpSource",
    "SubprocessHelpSource",
    "build_command",
    "classify",
    "parse_option",
    "parse_usage",
]
