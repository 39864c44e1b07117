"""Navigation, execution and session-state exceptions."""

from typing import Optional

from .base import HelpFormError


class CommandNotFoundError(HelpFormError):
    """A subcommand name is not declared by the current command."""

    def __init__(self, parent: str, name: str, available: list[str]):
        hint = f"Available subcommands: {', '.join(available)}" if available else None
        super().__init__(
            user_message=f"'{parent}' has no subcommand '{name}'",
            recoverable=True,
            recovery_hint=hint,
        )
        self.parent = parent
        self.name = name


class SpawnError(HelpFormError):
    """The external process could not be started."""

    def __init__(self, executable: str, reason: str, recovery_hint: Optional[str] = None):
        super().__init__(
            user_message=f"Could not start '{executable}': {reason}",
            technical_message=f"Spawn of {executable!r} failed: {reason}",
            recoverable=True,
            recovery_hint=recovery_hint,
        )
        self.executable = executable
        self.reason = reason


class SessionStateError(HelpFormError):
    """An action was requested in a state that does not allow it."""

    def __init__(self, action: str, state: str):
        super().__init__(
            user_message=f"Cannot {action} while {state}",
            recoverable=True,
        )
        self.action = action
        self.state = state
