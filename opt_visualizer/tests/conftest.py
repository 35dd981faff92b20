"""Shared test fixtures for opt-visualizer."""

import stat
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from opt_visualizer.models.stage import Stage, stages_from_names
from opt_visualizer.services.config import ConfigManager
from opt_visualizer.services.events import EventBus
from opt_visualizer.services.transform import TransformInvoker


# Stand-in for tf-opt: <tool> <input> --<pass>, result on stdout.
# Every input path it sees is appended to seen.log next to the script.
FAKE_TOOL = '''#!{python}
import os
import sys
import time

path, flag = sys.argv[1], sys.argv[2]
with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), "seen.log"), "a") as log:
    log.write(path + "\\n")
with open(path, encoding="utf-8") as f:
    text = f.read()
name = flag[2:]
if name == "upper":
    print(text.upper())
elif name == "reverse":
    print(text[::-1])
elif name == "fail":
    sys.stderr.write("error: pass 'fail' exploded\\n")
    sys.exit(2)
elif name == "binary":
    sys.stdout.buffer.write(b"ok \\xff\\xfe\\n")
elif name == "slow":
    time.sleep(10)
    print(text)
else:
    sys.stderr.write("unknown pass: " + name + "\\n")
    sys.exit(1)
'''


@pytest.fixture
def fake_tool(tmp_path: Path) -> Path:
    """Executable script implementing a few named passes."""
    tool_dir = tmp_path / "tool"
    tool_dir.mkdir()
    tool = tool_dir / "fake-opt"
    tool.write_text(FAKE_TOOL.format(python=sys.executable))
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return tool


@pytest.fixture
def seen_paths(fake_tool: Path):
    """Read back the input paths the fake tool was handed."""

    def read() -> list[Path]:
        log = fake_tool.parent / "seen.log"
        if not log.exists():
            return []
        return [Path(line) for line in log.read_text().splitlines() if line]

    return read


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    """Private directory for temp artifacts."""
    return tmp_path / "scratch"


@pytest.fixture
def mock_invoker() -> MagicMock:
    """Create a mock TransformInvoker that echoes '<name>(<text>)'."""
    invoker = MagicMock(spec=TransformInvoker)

    def invoke(tool_path, input_path, transform_name):
        return f"{transform_name}({Path(input_path).read_text(encoding='utf-8')})"

    invoker.invoke.side_effect = invoke
    return invoker


@pytest.fixture
def upper_reverse() -> list[Stage]:
    return stages_from_names(["upper", "reverse"])


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Create a ConfigManager with temp directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return ConfigManager(config_dir=config_dir)


@pytest.fixture
def bus():
    """Fresh event bus for each test."""
    EventBus.reset()
    yield EventBus.get()
    EventBus.reset()
