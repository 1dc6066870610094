"""UI package - console rendering and input."""

from askuser.ui.cli_io import LineUserIO
from askuser.ui.console import Console
from askuser.ui.terminal import TerminalUserIO

__all__ = ["Console", "LineUserIO", "TerminalUserIO"]
