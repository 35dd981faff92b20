"""Data models for opt-visualizer."""

from .stage import (
    ORIGINAL_INDEX,
    Stage,
    StageResult,
    PipelineRun,
    stages_from_names,
)
from .diff import DiffSpan, SpanKind, reconstruct_before, reconstruct_after
from .exceptions import (
    VisualizerError,
    IOFailure,
    TransformFailure,
    PipelineFailure,
    ConfigError,
    ConfigValidationError,
)

__all__ = [
    # Stage models
    "ORIGINAL_INDEX",
    "Stage",
    "StageResult",
    "PipelineRun",
    "stages_from_names",
    # Diff models
    "DiffSpan",
    "SpanKind",
    "reconstruct_before",
    "reconstruct_after",
    # Exceptions
    "VisualizerError",
    "IOFailure",
    "TransformFailure",
    "PipelineFailure",
    "ConfigError",
    "ConfigValidationError",
]
