"""StageList widget: one row per pipeline stage with change counts."""

from dataclasses import dataclass

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.reactive import reactive
from textual.widgets import Static

from ..models.events import StageSelected
from ..services.diff import DiffStats


@dataclass
class StageRow:
    """Display data for one history entry."""

    label: str
    stats: DiffStats | None = None  # None for the original input
    pending: bool = False

    @property
    def glyph(self) -> str:
        if self.pending:
            return "·"
        if self.stats is None:
            return "○"
        return "●" if self.stats.changed else "◌"

    @property
    def counts(self) -> str:
        if self.stats is None or self.pending:
            return ""
        return f"+{self.stats.added} -{self.stats.removed}"

    def line(self, width: int) -> str:
        """Glyph, name truncated to fit, then counts."""
        counts = self.counts
        name_width = max(1, width - len(counts) - 4)
        name = self.label[:name_width]
        return f"{self.glyph}  {name:<{name_width}} {counts}"


class StageListItem(Static):
    """A single stage row."""

    DEFAULT_CSS = """
    StageListItem {
        width: 100%;
        height: 1;
        padding: 0 1;
    }

    StageListItem.selected {
        background: $surface-lighten-1;
    }

    StageListItem.pending {
        color: $text-disabled;
    }
    """

    def __init__(self, row: StageRow, selected: bool = False) -> None:
        super().__init__()
        self.row = row
        self.set_class(selected, "selected")
        self.set_class(row.pending, "pending")

    def render(self) -> Text:
        """Stage names are shown literally, never parsed as markup."""
        return Text(self.row.line(max(1, self.size.width - 2)))


class StageList(Vertical, can_focus=False):
    """Vertical list of stages; the screen drives selection."""

    DEFAULT_CSS = """
    StageList {
        width: 100%;
        height: 100%;
        padding: 1 0;
    }
    """

    selected: reactive[int] = reactive(0)

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._rows: list[StageRow] = []

    @property
    def rows(self) -> list[StageRow]:
        return self._rows

    def compose(self) -> ComposeResult:
        for i, row in enumerate(self._rows):
            yield StageListItem(row, selected=i == self.selected)

    def set_rows(self, rows: list[StageRow]) -> None:
        """Replace all rows, keeping the selection in range."""
        self._rows = rows
        self.selected = min(self.selected, max(0, len(rows) - 1))
        self.refresh(recompose=True)

    def move(self, delta: int) -> None:
        if not self._rows:
            return
        self.selected = max(0, min(len(self._rows) - 1, self.selected + delta))

    def watch_selected(self, old: int, new: int) -> None:
        items = list(self.query(StageListItem))
        for i, item in enumerate(items):
            item.set_class(i == new, "selected")
        if old != new:
            self.post_message(StageSelected(new))
