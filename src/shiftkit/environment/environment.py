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

"""Environment facade and the host-versus-container selection rule."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from shiftkit.core.model_types import LogComponent, Platform
from shiftkit.environment.container import ContainerInstance
from shiftkit.environment.local import LocalInstance
from shiftkit.exceptions import PlatformNotSupportedError, TransformerInitError
from shiftkit.logging import structured_extra

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

    from shiftkit.compat import Self
    from shiftkit.config.models import ContainerSpec
    from shiftkit.container.selection import ContainerEngineProvider
    from shiftkit.core.types import ExecResult
    from shiftkit.environment.types import EnvInfo, EnvironmentInstance

logger: logging.Logger = logging.getLogger("shiftkit.environment")


class Environment:
    """Where one transformer's commands run.

    Owns exactly one backing instance for its lifetime. Not safe for
    concurrent use; callers serialise access per transformer instance.
    """

    def __init__(self, env_info: EnvInfo, instance: EnvironmentInstance) -> None:
        self.env_info = env_info
        self._instance = instance

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()

    @property
    def name(self) -> str:
        return self.env_info.name

    @property
    def source(self) -> Path:
        return self.env_info.source

    @property
    def context(self) -> Path:
        return self.env_info.context

    @property
    def is_container(self) -> bool:
        return isinstance(self._instance, ContainerInstance)

    @property
    def active(self) -> bool:
        return self._instance.active

    def exec(self, command: Sequence[str]) -> ExecResult:
        """Run ``command`` synchronously and capture its output.

        Args:
            command: Argument vector; host paths in it must already be encoded.

        Returns:
            Captured output. A non-zero exit code is returned, not raised.

        Raises:
            EnvironmentNotActiveError: If the backing target is gone.
            ExecError: If the command could not be run at all.
        """
        start = time.perf_counter()
        result = self._instance.exec(command)
        logger.debug(
            "Executed %s",
            " ".join(self.decode(part) for part in command),
            extra=structured_extra(
                LogComponent.ENVIRONMENT,
                transformer=self.name,
                exit_code=result.exit_code,
                duration_ms=(time.perf_counter() - start) * 1000,
            ),
        )
        return result

    def encode(self, path: str | Path) -> str:
        """Translate a host path into the execution target's view."""
        return self._instance.encode(path)

    def decode(self, path: str) -> str:
        """Translate an execution-target path back to the host view, for display only."""
        return self._instance.decode(path)

    def download(self, path: str) -> Path:
        """Make an execution-target path available on the host."""
        return self._instance.download(path)

    def destroy(self) -> None:
        """Release the backing target. Safe to call more than once."""
        self._instance.destroy()


def new_environment(
    env_info: EnvInfo,
    *,
    qa_address: str | None = None,
    container: ContainerSpec | None = None,
    provider: ContainerEngineProvider | None = None,
    platforms: Iterable[Platform] = (),
    timeout: float | None = None,
) -> Environment:
    """Create the environment a transformer runs in.

    Host execution is used when the host platform is supported; otherwise a
    container is used when an image is declared.

    Args:
        env_info: Names and host-side roots of the environment.
        qa_address: Optional QA RPC address exported to commands.
        container: Container descriptor, if any.
        provider: Process-wide container engine provider.
        platforms: Host platforms the transformer supports natively.
        timeout: Optional per-command limit in seconds.

    Returns:
        A ready ``Environment``.

    Raises:
        PlatformNotSupportedError: If the host is unsupported and no image is declared.
        TransformerInitError: If a container is required but containers are disabled.
        ContainerEngineUnavailableError: If containers are allowed but no runtime responds.
        ContainerEngineError: If the container could not be prepared.
    """
    host = Platform.host()
    if host is not None and host in set(platforms):
        return Environment(env_info, LocalInstance(env_info, qa_address, timeout=timeout))
    if container is None or not container.image:
        raise PlatformNotSupportedError(env_info.name, host.value if host else "unknown")
    engine = provider.engine() if provider is not None else None
    if engine is None:
        reason = f"image {container.image} requires containers, which are disabled"
        raise TransformerInitError(env_info.name, reason)
    instance = ContainerInstance(env_info, engine, container, qa_address, timeout=timeout)
    return Environment(env_info, instance)


__all__ = ["Environment", "new_environment"]
