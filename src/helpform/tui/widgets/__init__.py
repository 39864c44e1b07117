"""Reusable UI widgets for the TUI."""

from .details_panel import DetailsPanel
from .field_row import FieldRow
from .form_panel import FormPanel
from .output_pane import OutputPane
from .status_bar import StatusBar
from .subcommand_list import SubcommandList

__all__ = [
    "DetailsPanel",
    "FieldRow",
    "FormPanel",
    "OutputPane",
    "StatusBar",
    "SubcommandList",
]
