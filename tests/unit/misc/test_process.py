# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Unit tests for the subprocess wrapper."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from shiftkit._infra.utils import run_command

pytestmark = pytest.mark.unit


def test_run_command_captures_output_and_exit_code(tmp_path: Path) -> None:
    result = run_command(
        [sys.executable, "-c", "import os, sys; print(os.getcwd()); sys.stderr.write('warn'); sys.exit(3)"],
        cwd=tmp_path,
    )
    assert result.exit_code == 3
    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()
    assert result.stderr == "warn"
    assert result.duration_ms >= 0


def test_run_command_layers_environment() -> None:
    result = run_command(
        [sys.executable, "-c", "import os; print(os.environ['SHIFTKIT_PROBE'], 'PATH' in os.environ)"],
        env={"SHIFTKIT_PROBE": "ok"},
    )
    assert result.stdout.split() == ["ok", "True"]


def test_run_command_passes_empty_arguments_through() -> None:
    result = run_command([sys.executable, "-c", "import sys; print(repr(sys.argv[1]))", ""])
    assert result.stdout.strip() == "''"


def test_run_command_requires_executable() -> None:
    with pytest.raises(ValueError, match="executable"):
        _ = run_command([])
    with pytest.raises(ValueError, match="executable"):
        _ = run_command(["", "x"])


def test_run_command_raises_for_missing_binary(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        _ = run_command([str(tmp_path / "does-not-exist")])


def test_run_command_times_out() -> None:
    with pytest.raises(subprocess.TimeoutExpired):
        _ = run_command([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2)
