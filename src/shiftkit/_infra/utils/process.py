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

"""Subprocess helpers and typed command wrappers."""

from __future__ import annotations

import logging
import os
import subprocess  # noqa: S404  # JUSTIFIED: centralised wrapper for subprocess execution
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from shiftkit.core.model_types import LogComponent
from shiftkit.logging import structured_extra

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from shiftkit.core.type_aliases import Command

logger: logging.Logger = logging.getLogger("shiftkit.process")

__all__ = ["CommandOutput", "CommandRunner", "run_command"]


@dataclass(slots=True)
class CommandOutput:
    args: Command
    stdout: str
    stderr: str
    exit_code: int
    duration_ms: float


class CommandRunner(Protocol):
    """Callable shape shared by ``run_command`` and the fakes used in tests."""

    def __call__(
        self,
        args: Iterable[str],
        cwd: Path | str | None = None,
        *,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> CommandOutput: ...


def run_command(
    args: Iterable[str],
    cwd: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> CommandOutput:
    """Run a subprocess and return its captured output.

    Never uses ``shell=True``. A non-zero exit code is returned, not raised;
    callers decide what a failed command means.

    Args:
        args: Command line to execute. The first element is treated as the
            executable and must be a non-empty string. Later elements may be
            empty strings (plugins receive ``""`` when an artifact has no path).
        cwd: Optional working directory for the child process.
        env: Extra environment variables layered over the current environment.
        timeout: Optional limit in seconds for the child process.

    Returns:
        ``CommandOutput`` containing the executed argument vector along with the
        captured stdout/stderr, exit code, and duration in milliseconds.

    Raises:
        ValueError: If ``args`` is empty or the executable is blank.
        OSError: If the executable cannot be started.
        subprocess.TimeoutExpired: If ``timeout`` elapses first.
    """
    argv: Command = list(args)
    if not argv or not argv[0]:
        message = "Command must name an executable"
        raise ValueError(message)
    process_env: dict[str, str] | None = None
    if env:
        process_env = dict(os.environ)
        process_env.update(env)
    debug_details: dict[str, object] = {}
    if cwd:
        debug_details["cwd"] = str(cwd)
    if timeout is not None:
        debug_details["timeout"] = timeout
    logger.debug(
        "Executing command: %s",
        " ".join(argv),
        extra=structured_extra(LogComponent.ENVIRONMENT, details=debug_details),
    )
    start = time.perf_counter()
    completed = subprocess.run(  # noqa: S603 - command arguments provided by caller
        argv,
        check=False,
        cwd=str(cwd) if cwd else None,
        env=process_env,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    duration_ms = (time.perf_counter() - start) * 1000
    if completed.returncode != 0:
        logger.debug(
            "Command exited non-zero (exit=%s): %s",
            completed.returncode,
            " ".join(argv),
            extra=structured_extra(
                LogComponent.ENVIRONMENT,
                exit_code=completed.returncode,
                duration_ms=duration_ms,
            ),
        )
    return CommandOutput(
        args=argv,
        stdout=completed.stdout,
        stderr=completed.stderr,
        exit_code=completed.returncode,
        duration_ms=duration_ms,
    )
