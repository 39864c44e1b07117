"""Help retrieval exceptions."""

from .base import HelpFormError


class HelpFetchError(HelpFormError):
    """The target tool's help text could not be obtained."""

    def __init__(self, argv: list[str], reason: str):
        """
        Initialize help fetch error.

        Args:
            argv: Help command that was run
            reason: Why it failed (missing executable, timeout, empty output)
        """
        command = " ".join(argv)
        super().__init__(
            user_message=f"Could not read help for '{command}': {reason}",
            technical_message=f"Help command {argv!r} failed: {reason}",
            recoverable=True,
            recovery_hint="Check that the tool is installed and prints help for this flag",
        )
        self.argv = argv
        self.reason = reason
