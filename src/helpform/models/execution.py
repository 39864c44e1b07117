"""Models describing a running or finished external process."""

from typing import Literal

from pydantic import BaseModel, Field


class OutputChunk(BaseModel):
    """A piece of text read from the child process."""

    stream: Literal["stdout", "stderr"] = Field(description="Stream the text came from")
    text: str = Field(description="Decoded text")


class ExitStatus(BaseModel):
    """
    How a process ended.

    A cancelled run has ``cancelled=True`` and no exit code, which keeps it
    distinct from any status the process itself could report.
    """

    code: int | None = Field(default=None, description="Exit code reported by the OS")
    cancelled: bool = Field(default=False, description="Terminated at the user's request")

    @property
    def success(self) -> bool:
        """True when the process exited normally with code 0."""
        return not self.cancelled and self.code == 0

    @classmethod
    def cancelled_status(cls) -> "ExitStatus":
        """Status recorded when the user cancels a run."""
        return cls(code=None, cancelled=True)

    def describe(self) -> str:
        """Short text for the status bar."""
        if self.cancelled:
            return "cancelled"
        return f"exit code {self.code}"
