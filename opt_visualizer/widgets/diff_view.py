"""DiffView widget for displaying what one stage changed.

Two modes:
- diff: spans colored by kind (added, removed, unchanged)
- text: the full output of the selected stage, unstyled
"""

from rich.markup import escape
from rich.text import Text
from textual.app import ComposeResult
from textual.reactive import reactive
from textual.widgets import RichLog, Static

from ..models.diff import DiffSpan, SpanKind


SPAN_STYLES = {
    SpanKind.ADDED: "bold green",
    SpanKind.REMOVED: "red strike",
    SpanKind.UNCHANGED: "dim",
}


def render_spans(spans: list[DiffSpan]) -> Text:
    """Build a styled Text from diff spans."""
    text = Text()
    for span in spans:
        text.append(span.value, style=SPAN_STYLES[span.kind])
    return text


class DiffView(Static, can_focus=False):
    """Scrolling view of a stage diff or a stage's full text."""

    DEFAULT_CSS = """
    DiffView {
        width: 100%;
        height: 100%;
        border: none;
        padding: 0 1;
    }

    DiffView .title {
        height: 1;
        color: $text-disabled;
        margin-bottom: 1;
    }

    DiffView .content {
        height: 1fr;
        padding: 0;
    }

    DiffView .empty-message {
        content-align: center middle;
        color: $text-disabled;
        height: 1fr;
    }
    """

    show_text: reactive[bool] = reactive(False)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._title = ""
        self._spans: list[DiffSpan] | None = None
        self._text = ""

    def compose(self) -> ComposeResult:
        if self._spans is None and not self._text:
            yield Static("\n\n\n\n      ·\n\n    run the pipeline", classes="empty-message")
            return

        mode = "text" if self.show_text or self._spans is None else "diff"
        yield Static(f"{escape(self._title)}  [dim]·  {mode}[/dim]", classes="title", markup=True)

        log = RichLog(classes="content", highlight=False, markup=False, wrap=True)
        log.can_focus = False
        if mode == "text":
            log.write(self._text)
        else:
            log.write(render_spans(self._spans))
        yield log

    def show(self, title: str, text: str, spans: list[DiffSpan] | None) -> None:
        """Show a history entry; spans is None for the original input."""
        self._title = title
        self._text = text
        self._spans = spans
        self.refresh(recompose=True)

    def watch_show_text(self, show_text: bool) -> None:
        self.refresh(recompose=True)
