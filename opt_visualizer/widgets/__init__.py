"""Widgets for opt-visualizer."""

from opt_visualizer.widgets.progress import PipelineStatus
from opt_visualizer.widgets.stage_list import StageList, StageListItem, StageRow
from opt_visualizer.widgets.diff_view import DiffView, render_spans

__all__ = [
    "PipelineStatus",
    "StageList",
    "StageListItem",
    "StageRow",
    "DiffView",
    "render_spans",
]
