"""Centralized notification service for opt-visualizer."""

from dataclasses import dataclass
from enum import Enum

from textual.message import Message

from ..models.exceptions import PipelineFailure


class NotificationSeverity(Enum):
    """Notification severity levels."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class NotificationConfig:
    """Default configuration for notification behaviors."""

    success_timeout: float = 3.0
    warning_timeout: float = 4.0
    error_timeout: float = 8.0  # Tool diagnostics take a while to read


class NotificationRequest(Message):
    """Message requesting a notification be displayed."""

    def __init__(
        self,
        message: str,
        severity: NotificationSeverity = NotificationSeverity.SUCCESS,
        timeout: float = 3.0,
    ):
        self.message = message
        self.severity = severity
        self.timeout = timeout
        super().__init__()


class NotificationService:
    """Centralized notification API with consistent defaults."""

    # Longest stderr excerpt shown in a notification
    MAX_DIAGNOSTIC_CHARS = 300

    def __init__(self, config: NotificationConfig | None = None):
        self._config = config or NotificationConfig()

    def success(self, message: str, timeout: float | None = None) -> NotificationRequest:
        """Create success notification request."""
        return NotificationRequest(
            message=message,
            severity=NotificationSeverity.SUCCESS,
            timeout=timeout or self._config.success_timeout,
        )

    def warning(self, message: str, timeout: float | None = None) -> NotificationRequest:
        """Create warning notification request."""
        return NotificationRequest(
            message=message,
            severity=NotificationSeverity.WARNING,
            timeout=timeout or self._config.warning_timeout,
        )

    def error(self, message: str, timeout: float | None = None) -> NotificationRequest:
        """Create error notification request."""
        return NotificationRequest(
            message=message,
            severity=NotificationSeverity.ERROR,
            timeout=timeout or self._config.error_timeout,
        )

    def pipeline_failure(self, failure: PipelineFailure) -> NotificationRequest:
        """Error notification naming the failed stage and the tool's output."""
        diagnostics = failure.diagnostics
        if len(diagnostics) > self.MAX_DIAGNOSTIC_CHARS:
            diagnostics = diagnostics[: self.MAX_DIAGNOSTIC_CHARS] + "…"
        return self.error(f"stage '{failure.failed_stage}' failed\n{diagnostics}")
