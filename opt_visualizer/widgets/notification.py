"""Notification widget for opt-visualizer."""

from textual.containers import Container
from textual.widgets import Static

from ..services.notification import NotificationSeverity


class Notice(Static):
    """Single notification line that dismisses itself."""

    DEFAULT_CSS = """
    Notice {
        width: auto;
        max-width: 80;
        padding: 0 1;
        background: $surface;
    }

    Notice.-success {
        color: $success;
    }

    Notice.-warning {
        color: $warning;
    }

    Notice.-error {
        color: $error;
    }
    """

    def __init__(
        self,
        message: str,
        severity: NotificationSeverity = NotificationSeverity.SUCCESS,
        timeout: float = 3.0,
    ):
        super().__init__(message, markup=False)
        self._timeout = timeout
        self._severity = severity

    def on_mount(self) -> None:
        """Apply severity class and start auto-dismiss timer."""
        self.add_class(f"-{self._severity.value}")
        self.set_timer(self._timeout, self._expire)

    async def _expire(self) -> None:
        rack = self.parent
        await self.remove()
        if isinstance(rack, NoticeRack):
            rack.hide_if_empty()


class NoticeRack(Container):
    """Container managing notification display.

    Hides itself when empty to prevent layout participation.
    """

    def on_mount(self) -> None:
        """Start hidden - no notifications yet."""
        self.display = False

    def show(
        self,
        message: str,
        severity: NotificationSeverity = NotificationSeverity.SUCCESS,
        timeout: float = 3.0,
    ) -> None:
        """Display notification, replacing any current one."""
        self.remove_children()
        self.mount(Notice(message, severity, timeout))
        self.display = True

    def hide_if_empty(self) -> None:
        """Called by an expiring Notice once it is gone."""
        if not self.children:
            self.display = False
