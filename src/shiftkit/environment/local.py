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

"""Host execution: commands run as child processes of the current interpreter."""

from __future__ import annotations

import logging
import os
import subprocess  # noqa: S404  # JUSTIFIED: only TimeoutExpired is referenced
from pathlib import Path
from typing import TYPE_CHECKING

from shiftkit._infra.utils import run_command
from shiftkit.config.constants import QA_RPC_ADDRESS_ENV
from shiftkit.core.model_types import LogComponent
from shiftkit.core.types import ExecResult
from shiftkit.exceptions import EnvironmentNotActiveError, ExecError
from shiftkit.logging import structured_extra

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shiftkit._infra.utils import CommandRunner
    from shiftkit.environment.types import EnvInfo

logger: logging.Logger = logging.getLogger("shiftkit.environment")


class LocalInstance:
    """Run commands on the host with the transformer context as working directory.

    Paths need no translation on the host, so ``encode``, ``decode`` and
    ``download`` are identities.
    """

    def __init__(
        self,
        env_info: EnvInfo,
        qa_address: str | None = None,
        *,
        timeout: float | None = None,
        runner: CommandRunner = run_command,
    ) -> None:
        self.env_info = env_info
        self.qa_address = qa_address
        self.timeout = timeout
        self._runner = runner
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def exec(self, command: Sequence[str]) -> ExecResult:
        if not self._active:
            raise EnvironmentNotActiveError(self.env_info.name, "host environment was destroyed")
        env = {QA_RPC_ADDRESS_ENV: self.qa_address} if self.qa_address else None
        try:
            result = self._runner(command, self.env_info.context, env=env, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise ExecError(command, f"timed out after {self.timeout}s") from exc
        except (OSError, ValueError) as exc:
            raise ExecError(command, str(exc)) from exc
        return ExecResult(stdout=result.stdout, stderr=result.stderr, exit_code=result.exit_code)

    def encode(self, path: str | Path) -> str:
        return os.fspath(path)

    def decode(self, path: str) -> str:
        return path

    def download(self, path: str) -> Path:
        return Path(path)

    def destroy(self) -> None:
        if self._active:
            logger.debug(
                "Host environment released",
                extra=structured_extra(LogComponent.ENVIRONMENT, transformer=self.env_info.name),
            )
        self._active = False


__all__ = ["LocalInstance"]
