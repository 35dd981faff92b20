"""opt-visualizer: watch an optimizer pipeline pass by pass.

Main Textual application and command-line entry point.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from textual.app import App
from textual.binding import Binding

from opt_visualizer.models.exceptions import ConfigError, PipelineFailure
from opt_visualizer.screens.main import MainScreen
from opt_visualizer.services.config import (
    ConfigManager,
    PipelineSettings,
    ResolvedConfig,
    parse_stage_list,
)
from opt_visualizer.services.diff import diff_stats, pairwise_diffs
from opt_visualizer.services.notification import NotificationService
from opt_visualizer.services.pipeline import PipelineRunner, StageProgress
from opt_visualizer.services.pipeline_async import AsyncPipelineRunner
from opt_visualizer.services.transform import TransformInvoker
from opt_visualizer.styles import BASE_CSS
from opt_visualizer.widgets.diff_view import render_spans


logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Application service container for dependency injection."""

    config: ResolvedConfig
    runner: PipelineRunner
    async_runner: AsyncPipelineRunner
    notification: NotificationService

    @classmethod
    def create(
        cls,
        override: PipelineSettings | None = None,
        config_manager: ConfigManager | None = None,
    ) -> "Services":
        """Wire up all services with proper dependencies.

        Raises:
            ConfigValidationError: configured stage names are invalid
        """
        config_manager = config_manager or ConfigManager()
        config = config_manager.resolve(override)

        invoker = TransformInvoker(timeout=config.timeout)
        runner = PipelineRunner(invoker, temp_dir=config.temp_dir)

        return cls(
            config=config,
            runner=runner,
            async_runner=AsyncPipelineRunner(runner),
            notification=NotificationService(),
        )


def check_tool(config: ResolvedConfig) -> str:
    """Resolve the transform tool or exit with an error.

    Only verifies the configured path; nothing is downloaded.
    """
    tool = config.resolve_tool()
    if tool is None:
        print(f"Error: transform tool not found or not executable: {config.tool_path}\n")
        print("Set tool_path in ~/.config/opt-visualizer/config.json or pass --tool.")
        sys.exit(1)
    return tool


class OptVisualizerApp(App):
    """The main opt-visualizer application."""

    TITLE = "opt visualizer"
    CSS = BASE_CSS + """
    Screen {
        background: $background;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "screenshot", "Screenshot", show=False),
    ]

    def __init__(
        self,
        source: Path,
        services: Services | None = None,
        tool_path: str | None = None,
        **kwargs,
    ):
        """Initialize the app with injected services.

        Args:
            source: File whose text is fed to the first stage
            services: Service container (created from config if not provided)
            tool_path: Resolved tool executable (defaults to config value)
            **kwargs: Additional Textual app arguments
        """
        super().__init__(**kwargs)
        self.services = services or Services.create()
        self._source = source
        self._tool_path = tool_path

    def on_mount(self) -> None:
        self.push_screen(MainScreen(
            self._source,
            self.services.config,
            self.services.async_runner,
            self.services.notification,
            tool_path=self._tool_path,
        ))


def run_plain(source: Path, services: Services, tool_path: str, console: Console | None = None) -> int:
    """Run the pipeline without the TUI and print every stage's diff.

    Returns:
        Process exit code (1 when a stage failed)
    """
    console = console or Console()
    err = Console(stderr=True)
    stages = services.config.stages

    def progress(event: StageProgress) -> None:
        err.print(f"[dim]stage {event.position} of {event.total}: {escape(event.stage_name)}[/dim]")

    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        err.print(f"[red]cannot read {escape(str(source))}: {escape(str(e))}[/red]")
        return 1

    try:
        history = services.runner.run(text, stages, tool_path, progress)
    except PipelineFailure as e:
        err.print(f"[red]stage '{escape(e.failed_stage)}' failed[/red]")
        err.print(e.diagnostics, markup=False, highlight=False)
        return 1

    for stage, spans in zip(stages, pairwise_diffs(history)):
        stats = diff_stats(spans)
        console.print(Rule(f"{stage.order + 1}/{len(stages)}  {escape(stage.name)}  +{stats.added} -{stats.removed}"))
        console.print(render_spans(spans))
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        prog="opt-visualizer",
        description="Run optimizer passes in order and show what each one changed",
    )
    p.add_argument("source", type=Path, help="Input file fed to the first pass")
    p.add_argument("--tool", help="Transform tool executable (default: tf-opt)")
    p.add_argument(
        "--stages",
        type=parse_stage_list,
        help="Comma-separated passes, e.g. canonicalize,cse",
    )
    p.add_argument("--timeout", type=float, help="Seconds allowed per pass (0 = no limit)")
    p.add_argument("--temp-dir", type=Path, help="Directory for scratch files")
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Store --tool, --stages, --timeout and --temp-dir in the config file",
    )
    p.add_argument("--plain", action="store_true", help="Print diffs instead of opening the TUI")
    p.add_argument("--log-file", type=Path, help="Write debug logs to this file")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run opt-visualizer."""
    args = parse_args(argv)

    # Logging to the terminal would draw over the TUI
    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    override = PipelineSettings(
        tool_path=args.tool,
        stages=args.stages,
        timeout=args.timeout,
        temp_dir=args.temp_dir,
    )
    config_manager = ConfigManager()
    try:
        if args.save_config:
            config_manager.save_overrides(override)
            print(f"Saved settings to {config_manager.config_file}")
        services = Services.create(override, config_manager)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"Error: cannot write {config_manager.config_file}: {e}")
        sys.exit(1)

    tool_path = check_tool(services.config)

    if not args.source.is_file():
        print(f"Error: no such file: {args.source}")
        sys.exit(1)

    if args.plain:
        sys.exit(run_plain(args.source, services, tool_path))

    app = OptVisualizerApp(args.source, services=services, tool_path=tool_path)
    app.run()


if __name__ == "__main__":
    main()
