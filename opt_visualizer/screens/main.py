"""MainScreen: stage list, diff view and pipeline status."""

import asyncio
import logging
from pathlib import Path

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Header
from textual.worker import Worker, WorkerState

from ..models.diff import DiffSpan
from ..models.events import PipelineUpdate, StageSelected
from ..models.exceptions import PipelineFailure
from ..models.stage import StageResult, stage_label
from ..services.config import ResolvedConfig
from ..services.diff import diff_stats, pairwise_diffs
from ..services.events import (
    EventBus,
    PipelineCompletedEvent,
    PipelineEvent,
    PipelineFailedEvent,
    PipelineStartedEvent,
    StageStartedEvent,
)
from ..services.notification import NotificationService
from ..services.pipeline_async import AsyncPipelineRunner
from ..widgets.diff_view import DiffView
from ..widgets.progress import PipelineStatus
from ..widgets.stage_list import StageList, StageRow
from .base import VisualizerScreen
from .help import HelpScreen


logger = logging.getLogger(__name__)

PIPELINE_WORKER = "pipeline"

PIPELINE_EVENTS = (
    PipelineStartedEvent,
    StageStartedEvent,
    PipelineCompletedEvent,
    PipelineFailedEvent,
)


class MainScreen(VisualizerScreen):
    """Runs the pipeline over one source file and browses the results."""

    BINDINGS = [
        ("j", "move_down", "↓"),
        ("k", "move_up", "↑"),
        Binding("down", "move_down", "↓", show=False),
        Binding("up", "move_up", "↑", show=False),
        Binding("g", "first", "First", show=False),
        Binding("G", "last", "Last", show=False),
        ("r", "rerun", "Run"),
        ("t", "toggle_text", "Diff/Text"),
        ("?", "show_help", "Help"),
        ("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    MainScreen {
        layout: vertical;
    }

    MainScreen #body {
        height: 1fr;
    }

    MainScreen #stages {
        width: 32;
        border-right: solid $surface-lighten-1;
    }

    MainScreen #diff {
        width: 1fr;
    }
    """

    def __init__(
        self,
        source: Path,
        config: ResolvedConfig,
        runner: AsyncPipelineRunner,
        notification: NotificationService,
        tool_path: str | None = None,
    ) -> None:
        super().__init__()
        self._source = source
        self._config = config
        self._runner = runner
        self._notification = notification
        self._tool_path = tool_path or config.tool_path
        self._input = ""
        self._history: list[StageResult] = []
        self._diffs: list[list[DiffSpan]] = []
        self._run_id = 0
        self._worker: Worker | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="body"):
            with Vertical(id="stages"):
                yield StageList(id="stage-list")
            with Vertical(id="diff"):
                yield DiffView(id="diff-view")
        yield PipelineStatus(id="status")
        yield from super().compose()

    def on_mount(self) -> None:
        self.title = self._source.name
        bus = EventBus.get()
        for event_type in PIPELINE_EVENTS:
            bus.subscribe(event_type, self._on_pipeline_event, weak=True)
        self.action_rerun()

    def on_unmount(self) -> None:
        bus = EventBus.get()
        for event_type in PIPELINE_EVENTS:
            bus.unsubscribe(event_type, self._on_pipeline_event)

    # Pipeline

    def action_rerun(self) -> None:
        """Read the source file and run every stage again."""
        try:
            self._input = self._source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.post_message(self._notification.error(f"cannot read {self._source}: {e}"))
            return

        # Events from earlier runs still in flight are ignored from here on
        self._run_id += 1
        self._history = []
        self._diffs = []
        self._show_pending()
        self._worker = self.run_worker(
            self._run_pipeline(self._run_id),
            name=PIPELINE_WORKER,
            exclusive=True,
            exit_on_error=False,
        )

    async def _run_pipeline(self, run_id: int) -> tuple[list[StageResult], list[list[DiffSpan]]]:
        history = await self._runner.run(
            self._input,
            self._config.stages,
            self._tool_path,
            source=self._source.name,
            run_id=run_id,
        )
        diffs = await asyncio.to_thread(pairwise_diffs, history)
        return history, diffs

    def _on_pipeline_event(self, event: PipelineEvent) -> None:
        """Called on the emitting thread; post_message is thread-safe."""
        if event.run_id == self._run_id:
            self.post_message(PipelineUpdate(event))

    def on_pipeline_update(self, message: PipelineUpdate) -> None:
        event = message.event
        if event.run_id != self._run_id:
            return
        status = self.query_one("#status", PipelineStatus)
        if isinstance(event, PipelineStartedEvent):
            status.begin(event.total)
        elif isinstance(event, StageStartedEvent):
            status.start_stage(event.stage_name, event.index + 1, event.total)
        elif isinstance(event, PipelineCompletedEvent):
            status.finish(event.total)
        elif isinstance(event, PipelineFailedEvent):
            status.fail(event.failed_stage, event.diagnostics)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Handle pipeline results and failure notifications."""
        if event.worker is not self._worker:
            return  # superseded run

        if event.state == WorkerState.SUCCESS:
            history, diffs = event.worker.result
            self._show_history(history, diffs)
            if len(history) > 1 and not any(diff_stats(spans).changed for spans in diffs):
                self.post_message(self._notification.warning(
                    f"no stage changed {self._source.name}"
                ))
            else:
                self.post_message(self._notification.success(
                    f"{len(self._config.stages)} stages over {self._source.name}"
                ))
        elif event.state == WorkerState.ERROR:
            error = event.worker.error
            if isinstance(error, PipelineFailure):
                self.post_message(self._notification.pipeline_failure(error))
            else:
                logger.error(f"Pipeline worker crashed: {error}")
                self.query_one("#status", PipelineStatus).fail("?", str(error))
                self.post_message(self._notification.error(f"pipeline error: {error}"))

    # Display

    def _show_pending(self) -> None:
        """Original input plus one pending row per stage."""
        rows = [StageRow("original")]
        rows.extend(StageRow(stage.name, pending=True) for stage in self._config.stages)
        stage_list = self.query_one("#stage-list", StageList)
        stage_list.set_rows(rows)
        stage_list.selected = 0
        self.query_one("#diff-view", DiffView).show("original", self._input, None)

    def _show_history(self, history: list[StageResult], diffs: list[list[DiffSpan]]) -> None:
        self._history = history
        self._diffs = diffs
        rows = [StageRow("original")]
        rows.extend(
            StageRow(stage_label(result, self._config.stages), diff_stats(spans))
            for result, spans in zip(history[1:], self._diffs)
        )
        stage_list = self.query_one("#stage-list", StageList)
        stage_list.set_rows(rows)
        stage_list.selected = min(1, len(rows) - 1)
        self._show_position(stage_list.selected)

    def _show_position(self, position: int) -> None:
        view = self.query_one("#diff-view", DiffView)
        if not self._history:
            view.show("original", self._input, None)
            return
        result = self._history[position]
        title = stage_label(result, self._config.stages)
        if result.is_original:
            view.show(title, result.text, None)
        else:
            view.show(f"{position}/{len(self._history) - 1}  {title}", result.text, self._diffs[position - 1])

    def on_stage_selected(self, event: StageSelected) -> None:
        self._show_position(event.position)

    # Actions

    def action_move_down(self) -> None:
        self.query_one("#stage-list", StageList).move(1)

    def action_move_up(self) -> None:
        self.query_one("#stage-list", StageList).move(-1)

    def action_first(self) -> None:
        self.query_one("#stage-list", StageList).selected = 0

    def action_last(self) -> None:
        stage_list = self.query_one("#stage-list", StageList)
        stage_list.selected = max(0, len(stage_list.rows) - 1)

    def action_toggle_text(self) -> None:
        view = self.query_one("#diff-view", DiffView)
        view.show_text = not view.show_text

    def action_show_help(self) -> None:
        self.app.push_screen(HelpScreen())

    def action_quit(self) -> None:
        self.app.exit()
