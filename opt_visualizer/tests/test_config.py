"""Tests for configuration loading and resolution."""

import json
import stat
from pathlib import Path

import pytest

from opt_visualizer.models.exceptions import ConfigValidationError
from opt_visualizer.services.config import (
    DEFAULT_STAGES,
    DEFAULT_TIMEOUT,
    DEFAULT_TOOL,
    ConfigManager,
    PipelineSettings,
    ResolvedConfig,
    parse_stage_list,
    validate_stage_names,
)


class TestPipelineSettings:
    """Tests for PipelineSettings."""

    def test_to_dict_empty(self):
        assert PipelineSettings().to_dict() == {}

    def test_round_trip_fields(self, tmp_path: Path):
        settings = PipelineSettings(
            tool_path="/opt/bin/tf-opt",
            stages=["cse", "inline"],
            timeout=30.0,
            temp_dir=tmp_path,
        )
        data = settings.to_dict()
        assert data == {
            "tool_path": "/opt/bin/tf-opt",
            "stages": ["cse", "inline"],
            "timeout": 30.0,
            "temp_dir": str(tmp_path),
        }
        assert PipelineSettings.from_dict(data) == settings

    def test_from_dict_rejects_non_list_stages(self):
        with pytest.raises(ConfigValidationError):
            PipelineSettings.from_dict({"stages": "cse"})

    def test_merge_with_override(self):
        base = PipelineSettings(tool_path="tf-opt", stages=["cse"], timeout=10)
        override = PipelineSettings(stages=["inline"])

        merged = base.merge_with(override)

        assert merged.tool_path == "tf-opt"
        assert merged.stages == ["inline"]
        assert merged.timeout == 10

    def test_merge_keeps_explicit_empty_stage_list(self):
        merged = PipelineSettings(stages=["cse"]).merge_with(PipelineSettings(stages=[]))
        assert merged.stages == []


class TestValidateStageNames:
    """Stage names must be unique and non-empty."""

    def test_strips_dashes_and_whitespace(self):
        assert validate_stage_names([" cse ", "--inline"]) == ["cse", "inline"]

    def test_duplicate_rejected(self):
        with pytest.raises(ConfigValidationError, match="duplicate"):
            validate_stage_names(["cse", "inline", "cse"])

    def test_empty_rejected(self):
        with pytest.raises(ConfigValidationError, match="empty"):
            validate_stage_names(["cse", "  "])

    def test_parse_stage_list(self):
        assert parse_stage_list("canonicalize, cse,,inline ") == ["canonicalize", "cse", "inline"]


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults_when_no_file(self, config_manager: ConfigManager):
        resolved = config_manager.resolve()

        assert resolved.tool_path == DEFAULT_TOOL
        assert resolved.stage_names == DEFAULT_STAGES
        assert resolved.timeout == DEFAULT_TIMEOUT

    def test_resolved_stages_are_ordered(self, config_manager: ConfigManager):
        resolved = config_manager.resolve(PipelineSettings(stages=["b", "a"]))
        assert [(s.name, s.order) for s in resolved.stages] == [("b", 0), ("a", 1)]

    def test_save_and_load(self, config_manager: ConfigManager, tmp_path: Path):
        config_manager.save_config(PipelineSettings(tool_path="/x/opt", stages=["cse"]))

        reloaded = ConfigManager(config_dir=tmp_path / "config")
        resolved = reloaded.resolve()

        assert resolved.tool_path == "/x/opt"
        assert resolved.stage_names == ["cse"]

    def test_saved_file_is_private(self, config_manager: ConfigManager):
        config_manager.save_config(PipelineSettings(tool_path="tf-opt"))
        mode = config_manager.config_file.stat().st_mode
        assert stat.S_IMODE(mode) == 0o600

    def test_override_beats_file(self, config_manager: ConfigManager):
        config_manager.save_config(PipelineSettings(tool_path="file-opt", timeout=5))

        resolved = config_manager.resolve(PipelineSettings(tool_path="cli-opt"))

        assert resolved.tool_path == "cli-opt"
        assert resolved.timeout == 5

    def test_zero_timeout_disables_deadline(self, config_manager: ConfigManager):
        resolved = config_manager.resolve(PipelineSettings(timeout=0))
        assert resolved.timeout is None

    def test_corrupt_file_falls_back(self, config_manager: ConfigManager):
        config_manager.config_file.write_text("{not json")
        assert config_manager.resolve().tool_path == DEFAULT_TOOL

    def test_bad_stages_type_falls_back(self, config_manager: ConfigManager):
        config_manager.config_file.write_text(json.dumps({"stages": 3}))
        assert config_manager.resolve().stage_names == DEFAULT_STAGES

    def test_duplicate_stages_in_file_rejected(self, config_manager: ConfigManager):
        config_manager.config_file.write_text(json.dumps({"stages": ["cse", "cse"]}))
        with pytest.raises(ConfigValidationError):
            config_manager.resolve()

    def test_save_overrides_merges_into_file(self, config_manager: ConfigManager):
        config_manager.save_config(PipelineSettings(tool_path="file-opt", timeout=5))

        config_manager.save_overrides(PipelineSettings(stages=["inline", "--cse"]))

        data = json.loads(config_manager.config_file.read_text())
        assert data == {"tool_path": "file-opt", "stages": ["inline", "cse"], "timeout": 5}

    def test_save_overrides_rejects_bad_stages(self, config_manager: ConfigManager):
        with pytest.raises(ConfigValidationError):
            config_manager.save_overrides(PipelineSettings(stages=["cse", "cse"]))
        assert not config_manager.config_file.exists()


class TestResolveTool:
    """ResolvedConfig.resolve_tool only checks, never installs."""

    def test_executable_path(self, fake_tool: Path):
        assert ResolvedConfig(tool_path=str(fake_tool)).resolve_tool() == str(fake_tool)

    def test_missing_path(self, tmp_path: Path):
        assert ResolvedConfig(tool_path=str(tmp_path / "nope")).resolve_tool() is None

    def test_non_executable_file(self, tmp_path: Path, monkeypatch):
        plain = tmp_path / "plain"
        plain.write_text("")
        monkeypatch.setattr("shutil.which", lambda cmd: None)
        assert ResolvedConfig(tool_path=str(plain)).resolve_tool() is None

    def test_found_on_path(self, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda cmd: f"/usr/local/bin/{cmd}")
        assert ResolvedConfig(tool_path="tf-opt").resolve_tool() == "/usr/local/bin/tf-opt"
