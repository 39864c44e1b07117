"""Live output of the running tool."""

from textual.widgets import Log

from helpform.models import OutputChunk


class OutputPane(Log):
    """Append-only log of stdout and stderr, interleaved as received."""

    DEFAULT_CSS = """
    OutputPane {
        height: 1fr;
        border: solid $secondary;
    }
    """

    def __init__(self) -> None:
        super().__init__(highlight=False)
        self.border_title = "Output"

    def write_chunk(self, chunk: OutputChunk) -> None:
        self.write(chunk.text)

    def start_run(self, preview: str) -> None:
        """Clear previous output and show the command being run."""
        self.clear()
        self.border_title = f"Output: {preview}"
