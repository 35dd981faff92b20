"""TransformInvoker: runs one pass of the external transform tool."""

import logging
import subprocess
from pathlib import Path

from ..models.exceptions import TransformFailure


logger = logging.getLogger(__name__)


def build_command(tool_path: str | Path, input_path: str | Path, transform_name: str) -> list[str]:
    """Argument shape expected by the tool: <tool> <input> --<transform>."""
    return [str(tool_path), str(input_path), f"--{transform_name}"]


class TransformInvoker:
    """Low-level tool invocation. No pipeline logic."""

    DEFAULT_TIMEOUT = 60.0

    def __init__(self, timeout: float | None = DEFAULT_TIMEOUT):
        """Initialize with a per-invocation deadline in seconds (None = wait forever)."""
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def invoke(self, tool_path: str | Path, input_path: str | Path, transform_name: str) -> str:
        """Apply one named transform to the file at input_path.

        Returns:
            The tool's stdout with surrounding whitespace stripped

        Raises:
            TransformFailure: non-zero exit, spawn failure or timeout
        """
        cmd = build_command(tool_path, input_path, transform_name)
        logger.debug(f"Running {cmd}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",  # tool output is not guaranteed to be UTF-8
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
            raise TransformFailure(
                transform_name,
                f"timed out after {self._timeout}s",
                stderr=stderr,
            ) from e
        except FileNotFoundError as e:
            raise TransformFailure(
                transform_name,
                f"tool not found: {tool_path}",
                suggestion="check tool_path in config or pass --tool",
            ) from e
        except PermissionError as e:
            raise TransformFailure(
                transform_name,
                f"tool is not executable: {tool_path}",
            ) from e
        except OSError as e:
            raise TransformFailure(transform_name, str(e)) from e

        if result.returncode != 0:
            logger.debug(f"{transform_name} exited with {result.returncode}")
            raise TransformFailure(
                transform_name,
                f"exit code {result.returncode}",
                stderr=result.stderr or "",
            )

        return result.stdout.strip()
