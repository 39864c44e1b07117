"""List of the current command's subcommands."""

from rich.text import Text
from textual.widgets import OptionList
from textual.widgets.option_list import Option as ListItem


class SubcommandList(OptionList):
    """
    Subcommands of the command being edited.

    Selecting an entry posts OptionList.OptionSelected whose option id is
    the subcommand name. Descriptions are taken from the parent's help
    text, so nothing is fetched until an entry is chosen.
    """

    DEFAULT_CSS = """
    SubcommandList {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self.border_title = "Subcommands"

    def load(self, entries: list[tuple[str, str | None]], required: bool = False) -> None:
        """
        Show a command's subcommands.

        Args:
            entries: (name, description) pairs in help order
            required: The command cannot run without one of them
        """
        self.clear_options()
        self.add_options(
            [
                ListItem(Text(f"{name}  {description}" if description else name), id=name)
                for name, description in entries
            ]
        )
        self.display = bool(entries)
        self.border_title = "Subcommands (required)" if required else "Subcommands"
