"""Core session logic, independent of the terminal UI."""

from .catalog import CommandCatalog
from .execution import ExecutionBridge, ProcessHandle, format_invocation
from .form_engine import FormEngine
from .navigation import Frame, NavigationStack
from .session import SessionController

__all__ = [
    "CommandCatalog",
    "ExecutionBridge",
    "FormEngine",
    "Frame",
    "NavigationStack",
    "ProcessHandle",
    "SessionController",
    "format_invocation",
]
