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

"""Container execution: one long-lived container per transformer instance.

The host source tree and the transformer context are copied into the
container at fixed roots. Host paths found in artifact data are rewritten to
those roots before they reach a command line, and rewritten back for logs.
"""

from __future__ import annotations

import logging
import os
import posixpath
import subprocess  # noqa: S404  # JUSTIFIED: only TimeoutExpired is referenced
import tempfile
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from shiftkit.config.constants import CONTAINER_CONTEXT_ROOT, CONTAINER_SOURCE_ROOT, QA_RPC_ADDRESS_ENV
from shiftkit.container.base import PathPair
from shiftkit.core.model_types import LogComponent
from shiftkit.exceptions import (
    ContainerEngineError,
    ContainerNotFoundError,
    ContainerNotRunningError,
    EnvironmentNotActiveError,
    ExecError,
    ImageNotFoundError,
)
from shiftkit.logging import structured_extra

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shiftkit.config.models import ContainerSpec
    from shiftkit.container.base import ContainerEngine
    from shiftkit.core.type_aliases import ContainerID
    from shiftkit.core.types import ExecResult
    from shiftkit.environment.types import EnvInfo

logger: logging.Logger = logging.getLogger("shiftkit.environment")


def _relative_to(path: Path, root: Path) -> PurePosixPath | None:
    try:
        return PurePosixPath(path.relative_to(root).as_posix())
    except ValueError:
        return None


class ContainerInstance:
    """Run commands inside a dedicated container.

    Construction starts the container; if any step after creation fails the
    container is removed before the error propagates.

    Raises:
        ImageNotFoundError: If the image is missing and no build is declared.
        ContainerEngineError: If building, creating or populating the container fails.
    """

    def __init__(
        self,
        env_info: EnvInfo,
        engine: ContainerEngine,
        spec: ContainerSpec,
        qa_address: str | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        self.env_info = env_info
        self.engine = engine
        self.spec = spec
        self.qa_address = qa_address
        self.timeout = timeout
        self._host_source = Path(os.path.abspath(env_info.source))
        self._host_context = Path(os.path.abspath(env_info.context))
        self._container_id: ContainerID | None = None
        self._start()

    @property
    def active(self) -> bool:
        return self._container_id is not None

    @property
    def container_id(self) -> ContainerID | None:
        return self._container_id

    def _ensure_image(self) -> None:
        try:
            self.engine.inspect_image(self.spec.image)
        except ImageNotFoundError:
            if self.spec.build is None:
                raise
            build_context = os.path.join(self._host_context, self.spec.build.context)
            self.engine.build_image(self.spec.image, build_context, self.spec.build.dockerfile)

    def _start(self) -> None:
        self._ensure_image()
        container_id = self.engine.create_container(
            self.spec.image,
            working_dir=self.spec.working_dir,
            keep_alive=self.spec.keep_alive_command,
        )
        try:
            self.engine.copy_dirs_into_container(
                container_id,
                [
                    PathPair(str(self._host_source), CONTAINER_SOURCE_ROOT),
                    PathPair(str(self._host_context), CONTAINER_CONTEXT_ROOT),
                ],
            )
        except ContainerEngineError:
            self.engine.stop_and_remove_container(container_id)
            raise
        self._container_id = container_id
        logger.info(
            "Started container environment for %s",
            self.env_info.name,
            extra=structured_extra(
                LogComponent.ENVIRONMENT,
                transformer=self.env_info.name,
                container=container_id,
                image=self.spec.image,
            ),
        )

    def exec(self, command: Sequence[str]) -> ExecResult:
        if self._container_id is None:
            raise EnvironmentNotActiveError(self.env_info.name, "container was removed")
        env = {QA_RPC_ADDRESS_ENV: self.qa_address} if self.qa_address else {}
        workdir = self.spec.working_dir or CONTAINER_CONTEXT_ROOT
        try:
            return self.engine.exec_in_container(
                self._container_id,
                command,
                workdir,
                env,
                timeout=self.timeout,
            )
        except (ContainerNotFoundError, ContainerNotRunningError) as exc:
            raise EnvironmentNotActiveError(self.env_info.name, str(exc)) from exc
        except subprocess.TimeoutExpired as exc:
            raise ExecError(command, f"timed out after {self.timeout}s") from exc
        except ContainerEngineError as exc:
            raise ExecError(command, str(exc)) from exc

    def encode(self, path: str | Path) -> str:
        """Map a host path under the source or context root to its container path.

        Paths outside both roots are returned unchanged.
        """
        host_path = Path(os.path.abspath(path))
        roots = sorted(
            ((self._host_source, CONTAINER_SOURCE_ROOT), (self._host_context, CONTAINER_CONTEXT_ROOT)),
            key=lambda item: len(item[0].parts),
            reverse=True,
        )
        for host_root, container_root in roots:
            rel = _relative_to(host_path, host_root)
            if rel is not None:
                return container_root if rel == PurePosixPath() else posixpath.join(container_root, str(rel))
        return os.fspath(path)

    def decode(self, path: str) -> str:
        """Map a container path back to the host path it was copied from."""
        container_path = PurePosixPath(path)
        for container_root, host_root in (
            (CONTAINER_SOURCE_ROOT, self._host_source),
            (CONTAINER_CONTEXT_ROOT, self._host_context),
        ):
            try:
                rel = container_path.relative_to(container_root)
            except ValueError:
                continue
            return str(host_root.joinpath(*rel.parts))
        return path

    def download(self, path: str) -> Path:
        """Copy ``path`` out of the container into a fresh host directory.

        Raises:
            EnvironmentNotActiveError: If the container was removed.
            ContainerCopyError: If the runtime could not transfer the path.
        """
        if self._container_id is None:
            raise EnvironmentNotActiveError(self.env_info.name, "container was removed")
        name = PurePosixPath(path).name or "root"
        destination = Path(tempfile.mkdtemp(prefix="shiftkit-download-")) / name
        self.engine.copy_dirs_from_container(self._container_id, [PathPair(path, str(destination))])
        return destination

    def destroy(self) -> None:
        container_id, self._container_id = self._container_id, None
        if container_id is None:
            return
        self.engine.stop_and_remove_container(container_id)
        logger.debug(
            "Removed container environment for %s",
            self.env_info.name,
            extra=structured_extra(LogComponent.ENVIRONMENT, transformer=self.env_info.name, container=container_id),
        )


__all__ = ["ContainerInstance"]
