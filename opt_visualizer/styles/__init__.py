"""Shared styles for opt-visualizer."""

from opt_visualizer.styles.base import BASE_CSS

__all__ = ["BASE_CSS"]
