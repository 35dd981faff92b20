"""Help screen - key reference and what the colors mean."""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from .base import VisualizerModalScreen


# Note: Use \[ to escape brackets so Rich doesn't interpret them as markup tags
HELP_TEXT = """

                          opt visualizer

          every pass, in order, and what it changed


      navigation                      pipeline

      j / k      next / previous      r        run again
      g / G      first / last         t        diff / full text


      colors                          stages

      [bold green]added[/]                           ○  original input
      [red strike]removed[/]                         ●  changed
      [dim]unchanged[/]                       ◌  no change


      other

      ?          help
      q          quit


                              \\[esc]  close"""


class HelpScreen(VisualizerModalScreen):
    """Single-page help."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen #dialog {
        width: 72;
        height: auto;
        padding: 0 2;
        background: $surface;
        border: round $surface-lighten-1;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(HELP_TEXT, markup=True)
