"""Services for opt-visualizer."""

from opt_visualizer.services.temp_artifact import temp_artifact
from opt_visualizer.services.transform import TransformInvoker, build_command
from opt_visualizer.services.pipeline import (
    PipelineRunner,
    ProgressSink,
    StageProgress,
    run_pipeline,
)
from opt_visualizer.services.diff import diff_words, pairwise_diffs, tokenize

__all__ = [
    "temp_artifact",
    "TransformInvoker",
    "build_command",
    "PipelineRunner",
    "ProgressSink",
    "StageProgress",
    "run_pipeline",
    "diff_words",
    "pairwise_diffs",
    "tokenize",
]
