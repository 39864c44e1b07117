"""Helpform: interactive terminal forms for command-line tools."""

__version__ = "0.1.0"

from .core import CommandCatalog, ExecutionBridge, FormEngine, SessionController
from .parsing import build_command, classify

__all__ = [
    "CommandCatalog",
    "ExecutionBridge",
    "FormEngine",
    "SessionController",
    "build_command",
    "classify",
]
