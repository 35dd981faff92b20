"""opt-visualizer: run a chain of optimizer passes and inspect each change."""

__version__ = "0.1.0"
