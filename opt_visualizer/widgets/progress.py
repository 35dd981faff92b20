"""Progress bar widget showing pipeline state."""

from rich.text import Text
from textual.reactive import reactive
from textual.widgets import Static


class PipelineStatus(Static):
    """One-line status: idle, stage N of M, done, or failed."""

    DEFAULT_CSS = """
    PipelineStatus {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }

    PipelineStatus.-failed {
        color: $error;
    }
    """

    stage_name = reactive("")
    position = reactive(0)
    total = reactive(0)
    state = reactive("idle")  # idle / running / done / failed
    message = reactive("")

    def render(self) -> Text:
        """Render the status line; tool output is never parsed as markup."""
        return Text(self._line(), no_wrap=True, overflow="ellipsis")

    def _line(self) -> str:
        if self.state == "running" and self.position == 0:
            return f"  starting  │  {self.total} stages"
        if self.state == "running":
            width = 10
            filled = int((self.position - 1) / self.total * width) if self.total else 0
            bar = "●" * filled + "○" * (width - filled)
            return f"  [{bar}] stage {self.position} of {self.total}: {self.stage_name}"
        if self.state == "done":
            return f"  done  │  {self.total} stages  │  ? help"
        if self.state == "failed":
            return f"  failed at '{self.stage_name}'  │  {self.message}"
        return "  idle  │  r run  │  ? help"

    def watch_state(self, state: str) -> None:
        self.set_class(state == "failed", "-failed")

    def begin(self, total: int) -> None:
        """Show a run that has not reached its first stage yet."""
        self.stage_name = ""
        self.position = 0
        self.total = total
        self.state = "running"

    def start_stage(self, stage_name: str, position: int, total: int) -> None:
        """Show a stage as running."""
        self.stage_name = stage_name
        self.position = position
        self.total = total
        self.state = "running"

    def finish(self, total: int) -> None:
        self.total = total
        self.state = "done"

    def fail(self, stage_name: str, message: str) -> None:
        self.stage_name = stage_name
        self.message = message.splitlines()[0] if message else ""
        self.state = "failed"
