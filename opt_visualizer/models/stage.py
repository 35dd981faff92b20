"""Stage and pipeline history models."""

from dataclasses import dataclass
from typing import Iterable


ORIGINAL_INDEX = -1  # stage_index of the untouched input


@dataclass(frozen=True)
class Stage:
    """One named transformation at a fixed pipeline position."""

    name: str
    order: int


@dataclass(frozen=True)
class StageResult:
    """Text captured after a stage (or the original input at index -1)."""

    stage_index: int
    text: str

    @property
    def is_original(self) -> bool:
        return self.stage_index == ORIGINAL_INDEX


@dataclass(frozen=True)
class PipelineRun:
    """One invocation of the runner: input text plus its ordered stages."""

    input: str
    stages: tuple[Stage, ...] = ()

    @property
    def total(self) -> int:
        return len(self.stages)


def stages_from_names(names: Iterable[str]) -> list[Stage]:
    """Build stages in list order, order = position."""
    return [Stage(name=name, order=i) for i, name in enumerate(names)]


def stage_label(result: StageResult, stages: list[Stage]) -> str:
    """Display label for a history entry."""
    if result.is_original:
        return "original"
    return stages[result.stage_index].name
