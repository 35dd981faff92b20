"""Custom Textual Message events for the opt-visualizer UI.

Note: Pipeline-level events (StageStartedEvent, PipelineFailedEvent, etc.)
are in services/events.py and use the EventBus pattern.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.message import Message

if TYPE_CHECKING:
    from opt_visualizer.services.events import PipelineEvent


class StageSelected(Message):
    """Fired when a history entry is highlighted in the stage list."""

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__()


class PipelineUpdate(Message):
    """Carries a pipeline bus event onto the UI thread.

    Posted from whichever thread emitted the bus event.
    """

    def __init__(self, event: PipelineEvent) -> None:
        self.event = event
        super().__init__()
