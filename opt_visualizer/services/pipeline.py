"""Stage pipeline: runs ordered transform passes and keeps every output."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..models.exceptions import IOFailure, PipelineFailure, TransformFailure
from ..models.stage import ORIGINAL_INDEX, Stage, StageResult
from .temp_artifact import temp_artifact
from .transform import TransformInvoker


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageProgress:
    """Progress event: stage `index` of `total` is starting."""

    stage_name: str
    index: int
    total: int

    @property
    def position(self) -> int:
        """1-based position for "stage N of M" display."""
        return self.index + 1


class ProgressSink(Protocol):
    """Receives progress events in stage order. Return value is ignored."""

    def __call__(self, event: StageProgress) -> None:
        ...


class Invoker(Protocol):
    """Applies one named transform to a file: path → text."""

    def invoke(self, tool_path: str | Path, input_path: str | Path, transform_name: str) -> str:
        ...


class PipelineRunner:
    """Drives stages sequentially, feeding each output to the next stage."""

    def __init__(self, invoker: Invoker | None = None, temp_dir: Path | None = None):
        self._invoker = invoker or TransformInvoker()
        self._temp_dir = temp_dir

    @property
    def invoker(self) -> Invoker:
        return self._invoker

    def run(
        self,
        input: str,
        stages: list[Stage],
        tool_path: str | Path,
        progress: ProgressSink | None = None,
    ) -> list[StageResult]:
        """Run every stage over input.

        Args:
            input: Source text (history entry -1)
            stages: Ordered stages; names are passed to the tool untouched
            tool_path: Executable implementing the transforms
            progress: Optional sink notified before each stage

        Returns:
            History of len(stages) + 1 results, original input first

        Raises:
            PipelineFailure: first failing stage; later stages are not run
        """
        history = [StageResult(ORIGINAL_INDEX, input)]
        current = input
        total = len(stages)

        for stage in stages:
            self._notify(progress, StageProgress(stage.name, stage.order, total))
            logger.debug(f"Stage {stage.order + 1}/{total}: {stage.name}")
            try:
                current = self._run_stage(stage, current, tool_path)
            except (IOFailure, TransformFailure) as e:
                logger.info(f"Pipeline aborted at stage '{stage.name}': {e}")
                raise PipelineFailure(stage.name, e) from e
            history.append(StageResult(stage.order, current))

        return history

    def _run_stage(self, stage: Stage, text: str, tool_path: str | Path) -> str:
        with temp_artifact(text, self._temp_dir) as path:
            return self._invoker.invoke(tool_path, path, stage.name)

    @staticmethod
    def _notify(progress: ProgressSink | None, event: StageProgress) -> None:
        """Deliver a progress event; sink failures never abort the run."""
        if progress is None:
            return
        try:
            progress(event)
        except Exception as e:
            logger.warning(f"Progress sink error for stage '{event.stage_name}': {e}")


def run_pipeline(
    input: str,
    stages: list[Stage],
    tool_path: str | Path,
    invoker: Invoker | None = None,
    progress: ProgressSink | None = None,
) -> list[StageResult]:
    """Run a pipeline with a default runner.

    Returns:
        Full history (see PipelineRunner.run)
    """
    return PipelineRunner(invoker).run(input, stages, tool_path, progress)
