"""Terminal user interface built on Textual."""

from .app import HelpFormApp

__all__ = ["HelpFormApp"]
