"""Base screen classes with notification support."""

from textual.app import ComposeResult
from textual.css.query import NoMatches
from textual.screen import ModalScreen, Screen

from ..widgets.notification import NoticeRack
from ..services.notification import NotificationRequest


class VisualizerScreen(Screen):
    """Base screen with automatic notification rack.

    The rack is mounted in an overlay layer at the bottom-left.
    """

    DEFAULT_CSS = """
    VisualizerScreen {
        layers: base notification;
    }

    VisualizerScreen > NoticeRack {
        layer: notification;
        dock: bottom;
        height: auto;
        width: auto;
        margin: 0 0 1 1;
    }
    """

    def compose(self) -> ComposeResult:
        """Override in subclass - call super().compose() at END to add notification rack."""
        yield NoticeRack(id="notifications")

    def on_notification_request(self, event: NotificationRequest) -> None:
        """Handle notification requests on this screen."""
        try:
            rack = self.query_one("#notifications", NoticeRack)
        except NoMatches:
            return  # Rack not mounted yet
        rack.show(event.message, event.severity, event.timeout)


class VisualizerModalScreen(ModalScreen[None]):
    """Base modal screen: escape or q dismisses."""

    BINDINGS = [
        ("escape", "dismiss_modal", "Close"),
        ("q", "dismiss_modal", "Close"),
    ]

    def action_dismiss_modal(self) -> None:
        self.dismiss(None)
