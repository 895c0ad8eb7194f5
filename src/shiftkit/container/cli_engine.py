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

"""Container engines driven through the runtime's command-line client.

Both ``docker`` and ``podman`` accept the same subcommands used here, so the
Podman variant only swaps the executable. Commands are executed through an
injectable ``CommandRunner`` which keeps the engines testable without a
container runtime on the machine.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess  # noqa: S404  # JUSTIFIED: only TimeoutExpired is referenced
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Final, NoReturn

from shiftkit._infra.utils import run_command
from shiftkit.compat import UTC
from shiftkit.container.base import FileInfo, ImageMetadata, PathPair
from shiftkit.core.model_types import LogComponent
from shiftkit.core.type_aliases import ContainerID, ImageName
from shiftkit.core.types import ExecResult
from shiftkit.exceptions import (
    ContainerCopyError,
    ContainerEngineError,
    ContainerNotFoundError,
    ContainerNotRunningError,
    ContainerPathNotFoundError,
    ContainerRunError,
    CopyFailure,
    ImageBuildError,
    ImageNotFoundError,
)
from shiftkit.logging import structured_extra

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from shiftkit._infra.utils import CommandOutput, CommandRunner

logger: logging.Logger = logging.getLogger("shiftkit.container")

# `docker run` reserves 125 for failures of the runtime itself.
RUNTIME_FAILURE_EXIT_CODE: Final[int] = 125
_MISSING_IMAGE_MARKERS: Final[tuple[str, ...]] = ("no such image", "unable to find image", "image not known")
_MISSING_CONTAINER_MARKERS: Final[tuple[str, ...]] = ("no such container",)


def _mentions(output: str, markers: Sequence[str]) -> bool:
    lowered = output.lower()
    return any(marker in lowered for marker in markers)


def _env_args(env: Mapping[str, str]) -> list[str]:
    args: list[str] = []
    for key, value in env.items():
        args.extend(["-e", f"{key}={value}"])
    return args


class DockerEngine:
    """``ContainerEngine`` implementation backed by the ``docker`` CLI."""

    name: ClassVar[str] = "docker"

    def __init__(self, executable: str | None = None, *, runner: CommandRunner = run_command) -> None:
        self.executable = executable or self.name
        self._runner = runner

    def __repr__(self) -> str:
        return f"{type(self).__name__}(executable={self.executable!r})"

    def _run(self, *args: str, timeout: float | None = None) -> CommandOutput:
        argv = [self.executable, *args]
        try:
            return self._runner(argv, timeout=timeout)
        except OSError as exc:
            message = f"Unable to invoke {self.executable}: {exc}"
            raise ContainerEngineError(message) from exc
        except UnicodeDecodeError as exc:
            message = f"Undecodable output from {self.executable} {args[0]}: {exc}"
            raise ContainerEngineError(message) from exc

    def available(self) -> bool:
        """Return whether the runtime client and its daemon respond."""
        try:
            result = self._run("version", "--format", "{{.Server.Version}}", timeout=30)
        except (ContainerEngineError, subprocess.TimeoutExpired):
            return False
        return result.exit_code == 0

    # --- images ------------------------------------------------------------

    def inspect_image(self, image: ImageName) -> ImageMetadata:
        """Inspect ``image``, pulling it once when it is not present locally.

        Raises:
            ImageNotFoundError: If the image is neither local nor pullable.
        """
        result = self._run("image", "inspect", image)
        if result.exit_code != 0:
            pulled = self._run("pull", image)
            if pulled.exit_code != 0:
                raise ImageNotFoundError(image, pulled.stderr.strip() or result.stderr.strip())
            logger.info("Pulled image %s", image, extra=structured_extra(LogComponent.CONTAINER, image=image))
            result = self._run("image", "inspect", image)
            if result.exit_code != 0:
                raise ImageNotFoundError(image, result.stderr.strip())
        try:
            payload = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            message = f"Unreadable inspect output for image {image}: {exc}"
            raise ContainerEngineError(message) from exc
        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
            raise ImageNotFoundError(image, "empty inspect output")
        return ImageMetadata.from_inspect(payload[0])

    def build_image(self, image: ImageName, context: str, dockerfile: str) -> None:
        dockerfile_path = dockerfile if os.path.isabs(dockerfile) else os.path.join(context, dockerfile)
        logger.info(
            "Building image %s",
            image,
            extra=structured_extra(LogComponent.CONTAINER, image=image, path=context),
        )
        result = self._run("build", "-t", image, "-f", dockerfile_path, context)
        if result.exit_code != 0:
            raise ImageBuildError(image, result.stderr or result.stdout)
        logger.debug(
            "Built image %s",
            image,
            extra=structured_extra(LogComponent.CONTAINER, image=image, duration_ms=result.duration_ms),
        )

    def remove_image(self, image: ImageName) -> None:
        result = self._run("image", "rm", image)
        if result.exit_code == 0 or _mentions(result.stderr, _MISSING_IMAGE_MARKERS):
            return
        message = f"Unable to remove image {image}: {result.stderr.strip()}"
        raise ContainerEngineError(message)

    def copy_dirs_into_image(self, image: ImageName, new_image: ImageName, paths: Sequence[PathPair]) -> None:
        """Commit a derived image containing ``paths``; ``image`` itself is untouched."""
        created = self._run("create", image)
        if created.exit_code != 0:
            self._raise_create_failure(image, created)
        container_id = ContainerID(created.stdout.strip())
        try:
            self.copy_dirs_into_container(container_id, paths)
            committed = self._run("commit", container_id, new_image)
            if committed.exit_code != 0:
                message = f"Unable to commit {new_image} from {image}: {committed.stderr.strip()}"
                raise ContainerEngineError(message)
        finally:
            self._force_remove(container_id)
        logger.debug(
            "Created image %s from %s with %d path(s)",
            new_image,
            image,
            len(paths),
            extra=structured_extra(LogComponent.CONTAINER, image=new_image),
        )

    # --- file transfer -----------------------------------------------------

    def copy_dirs_into_container(self, container_id: ContainerID, paths: Sequence[PathPair]) -> None:
        """Copy each host path into the container.

        Every pair is attempted; failed pairs are reported together.

        Raises:
            ContainerCopyError: If at least one pair failed.
        """
        failures: list[CopyFailure] = []
        for pair in paths:
            source = f"{pair.source.rstrip('/')}/." if os.path.isdir(pair.source) else pair.source
            result = self._run("cp", source, f"{container_id}:{pair.destination}")
            if result.exit_code != 0:
                failures.append(CopyFailure(pair.source, pair.destination, result.stderr.strip()))
        if failures:
            raise ContainerCopyError(container_id, failures)

    def copy_dirs_from_container(self, container_id: ContainerID, paths: Sequence[PathPair]) -> None:
        """Copy each container path to the host.

        Each pair lands in a staging directory first and is only merged into
        its destination once the runtime has transferred it completely, so a
        failed pair never leaves a partial tree behind.

        Raises:
            ContainerCopyError: If at least one pair failed.
        """
        failures: list[CopyFailure] = []
        for pair in paths:
            staging = Path(tempfile.mkdtemp(prefix="shiftkit-copy-"))
            try:
                payload = staging / "payload"
                result = self._run("cp", f"{container_id}:{pair.source}", str(payload))
                if result.exit_code != 0:
                    failures.append(CopyFailure(pair.source, pair.destination, result.stderr.strip()))
                    continue
                try:
                    _merge_into(payload, Path(pair.destination))
                except OSError as exc:
                    failures.append(CopyFailure(pair.source, pair.destination, str(exc)))
            finally:
                shutil.rmtree(staging, ignore_errors=True)
        if failures:
            raise ContainerCopyError(container_id, failures)

    # --- containers --------------------------------------------------------

    def create_container(
        self,
        image: ImageName,
        *,
        working_dir: str = "",
        keep_alive: Sequence[str] = (),
    ) -> ContainerID:
        """Start a detached container running ``keep_alive`` and return its ID."""
        args = ["run", "-d"]
        if working_dir:
            args.extend(["-w", working_dir])
        keep_alive_cmd = list(keep_alive)
        if keep_alive_cmd:
            args.extend(["--entrypoint", keep_alive_cmd[0], image, *keep_alive_cmd[1:]])
        else:
            args.append(image)
        result = self._run(*args)
        if result.exit_code != 0:
            self._raise_create_failure(image, result)
        container_id = ContainerID(result.stdout.strip().splitlines()[-1])
        logger.debug(
            "Started container from %s",
            image,
            extra=structured_extra(LogComponent.CONTAINER, image=image, container=container_id),
        )
        return container_id

    def stop_and_remove_container(self, container_id: ContainerID) -> None:
        result = self._run("rm", "-f", container_id)
        if result.exit_code == 0 or _mentions(result.stderr, _MISSING_CONTAINER_MARKERS):
            logger.debug(
                "Removed container",
                extra=structured_extra(LogComponent.CONTAINER, container=container_id),
            )
            return
        message = f"Unable to remove container {container_id}: {result.stderr.strip()}"
        raise ContainerEngineError(message)

    def run_cmd_in_container(
        self,
        image: ImageName,
        cmd: Sequence[str],
        workdir: str,
        env: Mapping[str, str],
    ) -> ExecResult:
        """Run ``cmd`` in a throwaway container; it is removed even when ``cmd`` fails."""
        args = ["create"]
        if workdir:
            args.extend(["-w", workdir])
        args.extend(_env_args(env))
        created = self._run(*args, image, *cmd)
        if created.exit_code != 0:
            self._raise_create_failure(image, created)
        container_id = ContainerID(created.stdout.strip())
        try:
            started = self._run("start", "-a", container_id)
        finally:
            self._force_remove(container_id)
        return ExecResult(stdout=started.stdout, stderr=started.stderr, exit_code=started.exit_code)

    def run_container(self, image: ImageName, cmd: Sequence[str], volsrc: str, voldest: str) -> str:
        """Run ``cmd`` with ``volsrc`` bind-mounted at ``voldest``.

        Returns:
            Combined stdout and stderr of a successful run.

        Raises:
            ContainerRunError: ``started`` is false when the runtime could not
                start the container and true when the command itself failed.
        """
        args = ["run", "--rm"]
        if volsrc and voldest:
            args.extend(["-v", f"{volsrc}:{voldest}"])
        result = self._run(*args, image, *cmd)
        output = result.stdout + result.stderr
        if result.exit_code == 0:
            return output
        started = result.exit_code != RUNTIME_FAILURE_EXIT_CODE
        raise ContainerRunError(image, started=started, output=output, exit_code=result.exit_code)

    def exec_in_container(
        self,
        container_id: ContainerID,
        cmd: Sequence[str],
        workdir: str,
        env: Mapping[str, str],
        *,
        timeout: float | None = None,
    ) -> ExecResult:
        """Run ``cmd`` in a running container.

        Raises:
            ContainerNotFoundError: If the container no longer exists.
            ContainerNotRunningError: If the container exists but is stopped.
            subprocess.TimeoutExpired: If ``timeout`` elapses first.
        """
        state = self._run("container", "inspect", "--format", "{{.State.Running}}", container_id)
        if state.exit_code != 0:
            raise ContainerNotFoundError(container_id)
        if state.stdout.strip().lower() != "true":
            raise ContainerNotRunningError(container_id)
        args = ["exec"]
        if workdir:
            args.extend(["-w", workdir])
        args.extend(_env_args(env))
        result = self._run(*args, container_id, *cmd, timeout=timeout)
        return ExecResult(stdout=result.stdout, stderr=result.stderr, exit_code=result.exit_code)

    def stat(self, container_id: ContainerID, path: str) -> FileInfo:
        """Return file information for ``path`` by copying it out of the container.

        Raises:
            ContainerNotFoundError: If the container does not exist.
            ContainerPathNotFoundError: If ``path`` does not exist in it.
        """
        inspected = self._run("container", "inspect", "--format", "{{.Id}}", container_id)
        if inspected.exit_code != 0:
            raise ContainerNotFoundError(container_id)
        staging = Path(tempfile.mkdtemp(prefix="shiftkit-stat-"))
        try:
            target = staging / "entry"
            copied = self._run("cp", f"{container_id}:{path}", str(target))
            if copied.exit_code != 0:
                raise ContainerPathNotFoundError(container_id, path)
            info = target.stat()
            return FileInfo(
                name=os.path.basename(path.rstrip("/")) or path,
                size=info.st_size,
                mode=info.st_mode,
                is_dir=target.is_dir(),
                modified=datetime.fromtimestamp(info.st_mtime, tz=UTC),
            )
        finally:
            shutil.rmtree(staging, ignore_errors=True)

    # --- helpers -----------------------------------------------------------

    def _force_remove(self, container_id: ContainerID) -> None:
        result = self._run("rm", "-f", container_id)
        if result.exit_code != 0 and not _mentions(result.stderr, _MISSING_CONTAINER_MARKERS):
            logger.warning(
                "Unable to remove temporary container: %s",
                result.stderr.strip(),
                extra=structured_extra(LogComponent.CONTAINER, container=container_id),
            )

    def _raise_create_failure(self, image: ImageName, result: CommandOutput) -> NoReturn:
        if _mentions(result.stderr, _MISSING_IMAGE_MARKERS):
            raise ImageNotFoundError(image, result.stderr.strip())
        message = f"Unable to create container from image {image}: {result.stderr.strip()}"
        raise ContainerEngineError(message)


class PodmanEngine(DockerEngine):
    """``ContainerEngine`` implementation backed by the ``podman`` CLI."""

    name: ClassVar[str] = "podman"


def _merge_into(payload: Path, destination: Path) -> None:
    if payload.is_dir():
        shutil.copytree(payload, destination, dirs_exist_ok=True)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(payload, destination)


__all__ = ["RUNTIME_FAILURE_EXIT_CODE", "DockerEngine", "PodmanEngine"]
