"""Async wrapper for PipelineRunner - non-blocking runs from the UI loop."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..models.exceptions import PipelineFailure
from .events import (
    EventBus,
    EventBusProgress,
    PipelineCompletedEvent,
    PipelineFailedEvent,
    PipelineStartedEvent,
)

if TYPE_CHECKING:
    from opt_visualizer.models.stage import Stage, StageResult
    from opt_visualizer.services.pipeline import PipelineRunner


logger = logging.getLogger(__name__)


class AsyncPipelineRunner:
    """Async wrapper for PipelineRunner.

    Wraps the blocking run with asyncio.to_thread() so the event loop
    keeps drawing while the tool runs. The whole run happens in one
    worker thread, so stages stay strictly sequential. Progress is
    published on the EventBus from that thread.

    Example:
        runner = AsyncPipelineRunner(PipelineRunner(TransformInvoker()))
        history = await runner.run(text, stages, "tf-opt", source="model.mlir")
    """

    def __init__(self, runner: PipelineRunner, bus: EventBus | None = None) -> None:
        """Initialize with underlying sync PipelineRunner."""
        self._runner = runner
        self._bus = bus or EventBus.get()

    async def run(
        self,
        input: str,
        stages: list[Stage],
        tool_path: str | Path,
        source: str = "",
        run_id: int = 0,
    ) -> list[StageResult]:
        """Run all stages (non-blocking).

        Every event this run emits carries run_id.

        Raises:
            PipelineFailure: re-raised after PipelineFailedEvent is emitted
        """
        self._bus.emit(PipelineStartedEvent(run_id=run_id, source=source, total=len(stages)))
        try:
            history = await asyncio.to_thread(
                self._runner.run, input, stages, tool_path, EventBusProgress(self._bus, run_id)
            )
        except PipelineFailure as e:
            self._bus.emit(PipelineFailedEvent(
                run_id=run_id,
                failed_stage=e.failed_stage,
                message=e.message,
                diagnostics=e.diagnostics,
            ))
            raise
        logger.debug(f"Pipeline finished: {len(stages)} stages over {source or 'input'}")
        self._bus.emit(PipelineCompletedEvent(run_id=run_id, total=len(stages)))
        return history
