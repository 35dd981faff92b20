"""Central CSS definitions for opt-visualizer."""

# Notification styles
NOTIFICATION_CSS = """
/* Base notification styling */
Notice {
    height: auto;
    padding: 0 2;
    margin-right: 1;
    background: $surface;
    border: round $surface-lighten-1;
}

Notice.-warning {
    border: round $warning-darken-2;
}

Notice.-error {
    border: round $error-darken-2;
}
"""

# Combined base CSS for import
BASE_CSS = NOTIFICATION_CSS
