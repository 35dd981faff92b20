"""Screens for opt-visualizer."""

from opt_visualizer.screens.help import HelpScreen
from opt_visualizer.screens.main import MainScreen

__all__ = ["HelpScreen", "MainScreen"]
