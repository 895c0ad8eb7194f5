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

"""Container engine capability protocol and the values it exchanges.

Exactly one concrete engine is selected per process (see
``shiftkit.container.selection``); every consumer depends on this protocol
only, so additional runtimes can be added without touching callers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple, Protocol, cast

from shiftkit.exceptions import CopyFailure

if TYPE_CHECKING:
    from datetime import datetime

    from shiftkit.core.type_aliases import ContainerID, ImageName
    from shiftkit.core.types import ExecResult
    from shiftkit.json import JSONMapping


class PathPair(NamedTuple):
    """Ordered copy instruction: ``source`` is copied to ``destination``."""

    source: str
    destination: str


@dataclass(slots=True, frozen=True)
class ImageMetadata:
    """Subset of an image inspection result that callers rely on.

    Attributes:
        id: Content-addressed image ID.
        tags: Repository tags pointing at the image.
        created: Creation timestamp as reported by the runtime.
        working_dir: Default working directory of the image.
        env: Default environment entries (``KEY=VALUE``).
        entrypoint: Image entrypoint.
        cmd: Default command.
        raw: Full inspection payload.
    """

    id: str
    tags: tuple[str, ...] = ()
    created: str = ""
    working_dir: str = ""
    env: tuple[str, ...] = ()
    entrypoint: tuple[str, ...] = ()
    cmd: tuple[str, ...] = ()
    raw: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def from_inspect(cls, payload: JSONMapping) -> ImageMetadata:
        """Build metadata from one entry of ``image inspect`` JSON output."""
        config = payload.get("Config")
        config_map = cast("Mapping[str, object]", config) if isinstance(config, Mapping) else {}
        return cls(
            id=str(payload.get("Id", "")),
            tags=_str_tuple(payload.get("RepoTags")),
            created=str(payload.get("Created", "")),
            working_dir=str(config_map.get("WorkingDir") or ""),
            env=_str_tuple(config_map.get("Env")),
            entrypoint=_str_tuple(config_map.get("Entrypoint")),
            cmd=_str_tuple(config_map.get("Cmd")),
            raw=dict(payload),
        )


def _str_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        return tuple(str(item) for item in cast("Sequence[object]", value))
    return ()


@dataclass(slots=True, frozen=True)
class FileInfo:
    """Stat result for a path inside a container."""

    name: str
    size: int
    mode: int
    is_dir: bool
    modified: datetime | None = None


class ContainerEngine(Protocol):
    """Capability interface over a container runtime.

    Failures surface as ``ContainerEngineError`` subclasses; "not found"
    conditions are also ``LookupError`` so callers can match them generically.
    """

    def inspect_image(self, image: ImageName) -> ImageMetadata:
        """Return metadata for ``image`` or raise ``ImageNotFoundError``."""
        ...

    def build_image(self, image: ImageName, context: str, dockerfile: str) -> None:
        """Build and tag ``image``; retrying after success re-tags the same result."""
        ...

    def remove_image(self, image: ImageName) -> None:
        """Remove ``image``; a missing image is treated as success."""
        ...

    def copy_dirs_into_image(self, image: ImageName, new_image: ImageName, paths: Sequence[PathPair]) -> None:
        """Create ``new_image`` from ``image`` with host directories layered in."""
        ...

    def copy_dirs_into_container(self, container_id: ContainerID, paths: Sequence[PathPair]) -> None:
        """Copy host directories into a container, reporting failures per pair."""
        ...

    def copy_dirs_from_container(self, container_id: ContainerID, paths: Sequence[PathPair]) -> None:
        """Copy container directories to the host, reporting failures per pair."""
        ...

    def create_container(
        self,
        image: ImageName,
        *,
        working_dir: str = "",
        keep_alive: Sequence[str] = (),
    ) -> ContainerID:
        """Start a long-lived container and return its ID."""
        ...

    def stop_and_remove_container(self, container_id: ContainerID) -> None:
        """Stop and remove a container; an already removed container is success."""
        ...

    def run_cmd_in_container(
        self,
        image: ImageName,
        cmd: Sequence[str],
        workdir: str,
        env: Mapping[str, str],
    ) -> ExecResult:
        """Run ``cmd`` in an ephemeral container that is always cleaned up."""
        ...

    def run_container(self, image: ImageName, cmd: Sequence[str], volsrc: str, voldest: str) -> str:
        """Run a container with a bind mount and return its combined output."""
        ...

    def exec_in_container(
        self,
        container_id: ContainerID,
        cmd: Sequence[str],
        workdir: str,
        env: Mapping[str, str],
        *,
        timeout: float | None = None,
    ) -> ExecResult:
        """Run ``cmd`` inside an existing, running container."""
        ...

    def stat(self, container_id: ContainerID, path: str) -> FileInfo:
        """Return file information for ``path`` inside ``container_id``."""
        ...


__all__ = [
    "ContainerEngine",
    "CopyFailure",
    "FileInfo",
    "ImageMetadata",
    "PathPair",
]
