"""Panel describing the current command and the invocation it would run."""

from textual.widgets import Static

from helpform.models import Command


class DetailsPanel(Static):
    """Command path, description, usage and a preview of the argv."""

    DEFAULT_CSS = """
    DetailsPanel {
        height: auto;
        max-height: 50%;
        border: solid $primary;
        padding: 0 1;
    }
    """

    def __init__(self) -> None:
        # Help text is full of [OPTIONS]-style brackets, so no markup
        super().__init__(markup=False)
        self.border_title = "Command"

    def show(self, path: list[Command], preview: str) -> None:
        """
        Render details for the command at the end of a path.

        Args:
            path: Commands from the root to the current one
            preview: Shell-quoted invocation the form would run
        """
        command = path[-1]
        lines = [" ".join(c.name for c in path)]
        if command.description:
            lines.append(command.description)
        if command.usage:
            lines += ["", command.usage]
        lines += ["", f"$ {preview}"]
        if command.parse_warnings:
            lines += ["", f"{len(command.parse_warnings)} help line(s) not understood"]
        self.update("\n".join(lines))
