"""Configuration management for opt-visualizer.

Single-file configuration:
- ~/.config/opt-visualizer/config.json holds the tool path, the ordered
  stage list and the invocation timeout
- Command-line overrides are applied at runtime (PipelineSettings)

Resolution order: command line > config file > defaults
"""

import json
import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path

from ..models.exceptions import ConfigValidationError
from ..models.stage import Stage, stages_from_names


logger = logging.getLogger(__name__)


DEFAULT_TOOL = "tf-opt"

# Passes shown when nothing is configured
DEFAULT_STAGES = ["canonicalize", "cse", "inline", "symbol-dce"]

DEFAULT_TIMEOUT = 60.0


def _secure_write_json(path: Path, data: dict) -> None:
    """Write JSON to file with restricted permissions (0600)."""
    content = json.dumps(data, indent=2)
    # Write to temp file first, then rename for atomicity
    temp_path = path.with_suffix(".tmp")
    try:
        fd = os.open(str(temp_path), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, content.encode())
        finally:
            os.close(fd)
        temp_path.rename(path)
    except OSError:
        # Fallback: write normally then chmod
        path.write_text(content)
        try:
            path.chmod(stat.S_IRUSR | stat.S_IWUSR)  # 0600
        except OSError:
            pass  # Best effort on systems that don't support chmod


def validate_stage_names(names: list[str]) -> list[str]:
    """Check stage names are non-empty and unique within the pipeline.

    Returns:
        The names with surrounding whitespace and leading dashes removed

    Raises:
        ConfigValidationError: on an empty or duplicate name
    """
    cleaned: list[str] = []
    for raw in names:
        name = raw.strip().lstrip("-")
        if not name:
            raise ConfigValidationError(
                f"empty stage name in {names!r}",
                suggestion="stage names look like 'canonicalize' or 'cse'",
            )
        if name in cleaned:
            raise ConfigValidationError(
                f"duplicate stage name: {name}",
                suggestion="each pass may appear once per pipeline",
            )
        cleaned.append(name)
    return cleaned


def parse_stage_list(value: str) -> list[str]:
    """Split a comma-separated stage list ("a, b,c")."""
    return [part for part in (p.strip() for p in value.split(",")) if part]


@dataclass
class PipelineSettings:
    """Settings that can be overridden from the command line.

    None means "not set at this tier".
    """

    tool_path: str | None = None
    stages: list[str] | None = None
    timeout: float | None = None
    temp_dir: Path | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.tool_path is not None:
            result["tool_path"] = self.tool_path
        if self.stages is not None:
            result["stages"] = list(self.stages)
        if self.timeout is not None:
            result["timeout"] = self.timeout
        if self.temp_dir is not None:
            result["temp_dir"] = str(self.temp_dir)
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineSettings":
        stages = data.get("stages")
        if stages is not None and not isinstance(stages, list):
            raise ConfigValidationError(f"stages must be a list, got {type(stages).__name__}")
        timeout = data.get("timeout")
        return cls(
            tool_path=data.get("tool_path"),
            stages=[str(s) for s in stages] if stages is not None else None,
            timeout=float(timeout) if timeout is not None else None,
            temp_dir=Path(data["temp_dir"]) if data.get("temp_dir") else None,
        )

    def merge_with(self, override: "PipelineSettings") -> "PipelineSettings":
        """Return new settings with override values taking precedence."""
        return PipelineSettings(
            tool_path=override.tool_path if override.tool_path is not None else self.tool_path,
            stages=override.stages if override.stages is not None else self.stages,
            timeout=override.timeout if override.timeout is not None else self.timeout,
            temp_dir=override.temp_dir if override.temp_dir is not None else self.temp_dir,
        )


@dataclass
class ResolvedConfig:
    """Fully resolved settings, ready to hand to the runner."""

    tool_path: str
    stages: list[Stage] = field(default_factory=list)
    timeout: float | None = DEFAULT_TIMEOUT
    temp_dir: Path | None = None

    @property
    def stage_names(self) -> list[str]:
        return [s.name for s in self.stages]

    def resolve_tool(self) -> str | None:
        """Absolute path of an executable tool, or None if not usable.

        Only checks; never downloads or installs anything.
        """
        path = Path(self.tool_path).expanduser()
        if path.is_file() and os.access(path, os.X_OK):
            return str(path)
        return shutil.which(self.tool_path)


class ConfigManager:
    """Loads and saves the config file and resolves overrides."""

    def __init__(self, config_dir: Path | None = None):
        if config_dir is None:
            config_dir = Path.home() / ".config" / "opt-visualizer"
        self._config_dir = config_dir
        self._config_file = config_dir / "config.json"
        self._config: PipelineSettings | None = None

    @property
    def config_file(self) -> Path:
        return self._config_file

    @property
    def config(self) -> PipelineSettings:
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> PipelineSettings:
        """Load config from disk, falling back to empty settings."""
        if self._config_file.exists():
            try:
                data = json.loads(self._config_file.read_text())
                return PipelineSettings.from_dict(data)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError, ConfigValidationError) as e:
                logger.warning(f"Ignoring unreadable config {self._config_file}: {e}")
        return PipelineSettings()

    def save_config(self, config: PipelineSettings) -> None:
        """Save config to disk with secure permissions."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        _secure_write_json(self._config_file, config.to_dict())
        self._config = config

    def save_overrides(self, override: PipelineSettings) -> PipelineSettings:
        """Merge command-line settings into the file and save it.

        Raises:
            ConfigValidationError: stage names are empty or repeated
        """
        merged = self.config.merge_with(override)
        if merged.stages is not None:
            merged.stages = validate_stage_names(merged.stages)
        self.save_config(merged)
        return merged

    def resolve(self, override: PipelineSettings | None = None) -> ResolvedConfig:
        """Resolve settings through all tiers.

        Resolution order: override > config file > defaults

        Raises:
            ConfigValidationError: stage names are empty or repeated
        """
        resolved = self.config
        if override:
            resolved = resolved.merge_with(override)

        names = resolved.stages if resolved.stages is not None else DEFAULT_STAGES
        timeout = resolved.timeout if resolved.timeout is not None else DEFAULT_TIMEOUT
        return ResolvedConfig(
            tool_path=resolved.tool_path or DEFAULT_TOOL,
            stages=stages_from_names(validate_stage_names(names)),
            timeout=timeout if timeout > 0 else None,  # <= 0 disables the deadline
            temp_dir=resolved.temp_dir,
        )
