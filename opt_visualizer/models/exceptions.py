"""Exception hierarchy for opt-visualizer.

Failures carry enough context to tell the user which stage broke and
what the external tool had to say about it.
"""

from pathlib import Path


class VisualizerError(Exception):
    """Base exception for all opt-visualizer errors.

    All domain-specific exceptions inherit from this base class,
    enabling consistent error handling across the application.
    """

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class IOFailure(VisualizerError):
    """Scratch artifact could not be created, written or deleted."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message, suggestion)
        self.path = path


class TransformFailure(VisualizerError):
    """External transform tool failed or could not be started."""

    def __init__(
        self,
        transform_name: str,
        exit_info: str,
        stderr: str = "",
        suggestion: str | None = None,
    ) -> None:
        super().__init__(f"transform '{transform_name}' failed: {exit_info}", suggestion)
        self.transform_name = transform_name
        self.exit_info = exit_info
        self.stderr = stderr

    @property
    def diagnostics(self) -> str:
        """Tool diagnostic output, falling back to the exit description."""
        return self.stderr.strip() or self.exit_info


class PipelineFailure(VisualizerError):
    """A stage failed; the run was aborted.

    This is the only failure type the pipeline runner surfaces.
    """

    def __init__(self, failed_stage: str, cause: IOFailure | TransformFailure) -> None:
        super().__init__(f"stage '{failed_stage}' failed: {cause.message}")
        self.failed_stage = failed_stage
        self.cause = cause

    @property
    def diagnostics(self) -> str:
        if isinstance(self.cause, TransformFailure):
            return self.cause.diagnostics
        return self.cause.message


class ConfigError(VisualizerError):
    """Configuration is invalid or missing."""

    pass


class ConfigValidationError(ConfigError):
    """Configuration value failed validation."""

    pass
