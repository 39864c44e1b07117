"""Navigation stack of command frames."""

from collections.abc import Iterator

from pydantic import BaseModel, Field

from helpform.models import FormState


class Frame(BaseModel):
    """One level of navigation: a command and the form editing it."""

    command_id: int = Field(ge=0)
    form: FormState


class NavigationStack:
    """
    Ordered frames from the root command to the current one.

    The root frame is never popped, so the stack is non-empty once
    it has been started.
    """

    def __init__(self, root: Frame):
        self._frames: list[Frame] = [root]

    @property
    def current(self) -> Frame:
        """Top frame."""
        return self._frames[-1]

    @property
    def root(self) -> Frame:
        """Bottom frame."""
        return self._frames[0]

    @property
    def depth(self) -> int:
        """Number of subcommand levels below the root."""
        return len(self._frames) - 1

    @property
    def at_root(self) -> bool:
        return len(self._frames) == 1

    def push(self, frame: Frame) -> None:
        self._frames.append(frame)

    def pop(self) -> Frame | None:
        """
        Remove the top frame.

        Returns:
            The removed frame, or None when already at the root (no-op)
        """
        if self.at_root:
            return None
        return self._frames.pop()

    def command_ids(self) -> list[int]:
        """Command ids from root to top."""
        return [frame.command_id for frame in self._frames]

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)
