"""EventBus: Decoupled pipeline-to-UI communication.

The runner reports progress through a plain callable; EventBusProgress
turns that callable into domain events so any screen can listen.

Usage:
    # Feed the runner
    runner.run(text, stages, tool, progress=EventBusProgress(run_id=7))

    # In screens (weak: a dropped screen stops receiving)
    bus = EventBus.get()
    bus.subscribe(StageStartedEvent, self._on_stage_started, weak=True)

    # Cleanup on unmount
    bus.unsubscribe(StageStartedEvent, self._on_stage_started)

Every pipeline event carries the run_id of the run that produced it, so a
listener can ignore a run it has already abandoned.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, TypeVar
import logging
import weakref

from .pipeline import StageProgress

logger = logging.getLogger(__name__)

# Event type variable for generic typing
E = TypeVar("E", bound="Event")


@dataclass
class Event:
    """Base class for all domain events."""

    timestamp: datetime = field(default_factory=datetime.now)


# Pipeline Events


@dataclass
class PipelineEvent(Event):
    """Base for events tied to one pipeline run."""

    run_id: int = 0


@dataclass
class PipelineStartedEvent(PipelineEvent):
    """Emitted before the first stage runs."""

    source: str = ""  # Input file name
    total: int = 0


@dataclass
class StageStartedEvent(PipelineEvent):
    """Emitted when stage `index` of `total` starts."""

    stage_name: str = ""
    index: int = 0
    total: int = 0


@dataclass
class PipelineCompletedEvent(PipelineEvent):
    """Emitted when every stage succeeded."""

    total: int = 0


@dataclass
class PipelineFailedEvent(PipelineEvent):
    """Emitted when a stage failed and the run was aborted."""

    failed_stage: str = ""
    message: str = ""
    diagnostics: str = ""


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """Central event bus for service-to-UI communication.

    Singleton pattern ensures one bus per application.
    Uses weak references for automatic cleanup when subscribers are garbage collected.
    """

    _instance: "EventBus | None" = None

    def __init__(self) -> None:
        self._subscribers: dict[type[Event], list[EventHandler]] = {}
        self._weak_subscribers: dict[type[Event], list[weakref.ref]] = {}

    @classmethod
    def get(cls) -> "EventBus":
        """Get the singleton event bus instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    def subscribe(
        self,
        event_type: type[E],
        handler: Callable[[E], None],
        weak: bool = False,
    ) -> None:
        """Subscribe to an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callback function to invoke when event is emitted
            weak: Use weak reference (auto-cleanup when handler owner is GC'd)
        """
        if weak:
            if event_type not in self._weak_subscribers:
                self._weak_subscribers[event_type] = []
            # Bound methods need WeakMethod or the ref dies immediately
            if hasattr(handler, "__self__"):
                ref = weakref.WeakMethod(handler)
            else:
                ref = weakref.ref(handler)
            if all(r() != handler for r in self._weak_subscribers[event_type]):
                self._weak_subscribers[event_type].append(ref)
        else:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []
            if handler not in self._subscribers[event_type]:
                self._subscribers[event_type].append(handler)

    def unsubscribe(
        self,
        event_type: type[E],
        handler: Callable[[E], None],
    ) -> None:
        """Unsubscribe from an event type (strong or weak subscription)."""
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(handler)
            except ValueError:
                pass  # Handler not in list
        if event_type in self._weak_subscribers:
            self._weak_subscribers[event_type] = [
                ref for ref in self._weak_subscribers[event_type]
                if ref() is not None and ref() != handler
            ]

    def emit(self, event: Event) -> None:
        """Emit an event to all subscribers.

        Logs errors but doesn't let one subscriber's failure affect others.
        """
        event_type = type(event)

        for handler in list(self._subscribers.get(event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error for {event_type.__name__}: {e}")

        # Call weak reference handlers (cleanup dead refs)
        weak_handlers = self._weak_subscribers.get(event_type, [])
        live_refs = []
        for ref in weak_handlers:
            handler = ref()
            if handler is not None:
                live_refs.append(ref)
                try:
                    handler(event)
                except Exception as e:
                    logger.error(f"Event handler error for {event_type.__name__}: {e}")
        if event_type in self._weak_subscribers:
            self._weak_subscribers[event_type] = live_refs


class EventBusProgress:
    """ProgressSink that republishes runner progress on the EventBus."""

    def __init__(self, bus: EventBus | None = None, run_id: int = 0) -> None:
        self._bus = bus or EventBus.get()
        self._run_id = run_id

    def __call__(self, event: StageProgress) -> None:
        self._bus.emit(StageStartedEvent(
            run_id=self._run_id,
            stage_name=event.stage_name,
            index=event.index,
            total=event.total,
        ))
