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

"""Common exception hierarchy for shiftkit.

Three families mirror the layers of the execution substrate:

- ``ContainerEngineError`` for the container runtime abstraction
- ``ExecutionEnvironmentError`` for host/container execution targets
- ``TransformerError`` for the plugin protocol

``EnvironmentNotActiveError`` is the only error that escapes detect/transform
calls; callers match on the class to retry, skip, or deactivate a plugin.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "ContainerCopyError",
    "ContainerEngineError",
    "ContainerEngineUnavailableError",
    "ContainerNotFoundError",
    "ContainerNotRunningError",
    "ContainerPathNotFoundError",
    "ContainerRunError",
    "CopyFailure",
    "EnvironmentNotActiveError",
    "ExecError",
    "ExecutionEnvironmentError",
    "ImageBuildError",
    "ImageNotFoundError",
    "PlatformNotSupportedError",
    "ResourceNotFoundError",
    "ShiftkitError",
    "ShiftkitTypeError",
    "ShiftkitValidationError",
    "TransformerError",
    "TransformerInitError",
    "TransformerStateError",
]


class ShiftkitError(Exception):
    """Base error for all shiftkit exceptions."""


class ShiftkitValidationError(ShiftkitError, ValueError):
    """Raised when input data fails validation checks."""


class ShiftkitTypeError(ShiftkitError, TypeError):
    """Raised when input data has an unexpected type."""


# --- container engine -------------------------------------------------------


class ContainerEngineUnavailableError(ShiftkitError):
    """Raised when containers are allowed but no container runtime responds.

    This is a process-level failure: some plugins can only run in containers,
    so startup must not continue without an engine.
    """


class ContainerEngineError(ShiftkitError):
    """Base error for failures reported by the container runtime."""


class ResourceNotFoundError(ContainerEngineError, LookupError):
    """Raised when an image, container or in-container path does not exist."""


class ImageNotFoundError(ResourceNotFoundError):
    """Raised when an image is neither present locally nor pullable."""

    def __init__(self, image: str, detail: str = "") -> None:
        self.image = image
        self.detail = detail
        suffix = f": {detail}" if detail else ""
        super().__init__(f"Image {image} not found{suffix}")


class ContainerNotFoundError(ResourceNotFoundError):
    """Raised when a container ID no longer refers to an existing container."""

    def __init__(self, container_id: str) -> None:
        self.container_id = container_id
        super().__init__(f"Container {container_id} not found")


class ContainerPathNotFoundError(ResourceNotFoundError):
    """Raised when a path does not exist inside an existing container."""

    def __init__(self, container_id: str, path: str) -> None:
        self.container_id = container_id
        self.path = path
        super().__init__(f"Path {path} not found in container {container_id}")


class ContainerNotRunningError(ContainerEngineError):
    """Raised when a command targets a container that exists but is stopped."""

    def __init__(self, container_id: str) -> None:
        self.container_id = container_id
        super().__init__(f"Container {container_id} is not running")


class ImageBuildError(ContainerEngineError):
    """Raised when building an image fails."""

    def __init__(self, image: str, output: str) -> None:
        self.image = image
        self.output = output
        super().__init__(f"Unable to build image {image}: {output.strip()}")


class ContainerRunError(ContainerEngineError):
    """Raised by ``run_container`` when the run does not succeed.

    ``started`` distinguishes a container that never started from one whose
    command ran and failed.
    """

    def __init__(self, image: str, *, started: bool, output: str, exit_code: int | None = None) -> None:
        self.image = image
        self.started = started
        self.output = output
        self.exit_code = exit_code
        if started:
            message = f"Container from image {image} exited with code {exit_code}"
        else:
            message = f"Unable to start container from image {image}: {output.strip()}"
        super().__init__(message)


class CopyFailure(NamedTuple):
    """One path pair that failed to transfer, with the runtime's explanation."""

    source: str
    destination: str
    reason: str


class ContainerCopyError(ContainerEngineError):
    """Raised when one or more path pairs failed to transfer.

    Pairs not listed in ``failures`` were copied completely.
    """

    def __init__(self, target: str, failures: Sequence[CopyFailure]) -> None:
        self.target = target
        self.failures = list(failures)
        pairs = "; ".join(f"{item.source} -> {item.destination} ({item.reason})" for item in self.failures)
        super().__init__(f"Unable to copy {len(self.failures)} path(s) for {target}: {pairs}")


# --- execution environment --------------------------------------------------


class ExecutionEnvironmentError(ShiftkitError):
    """Base error for execution environment failures."""


class EnvironmentNotActiveError(ExecutionEnvironmentError):
    """Raised when the backing target was torn down or never started.

    Recoverable: the command did not run at all. This is distinct from a
    command that ran and returned a non-zero exit code.
    """

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        self.reason = reason
        suffix = f": {reason}" if reason else ""
        super().__init__(f"Environment {name} is not active{suffix}")


class ExecError(ExecutionEnvironmentError):
    """Raised when a command could not be executed (missing binary, timeout, engine failure)."""

    def __init__(self, command: Sequence[str], reason: str) -> None:
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Unable to execute {' '.join(self.command)}: {reason}")


# --- transformer ------------------------------------------------------------


class TransformerError(ShiftkitError):
    """Base error for plugin protocol failures."""


class TransformerInitError(TransformerError):
    """Raised when a plugin instance cannot be initialised; the caller excludes it from the run."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Unable to initialise transformer {name}: {reason}")


class PlatformNotSupportedError(TransformerInitError):
    """Raised when the host platform is unsupported and no container image is declared."""

    def __init__(self, name: str, platform: str) -> None:
        self.platform = platform
        super().__init__(name, f"platform {platform} not supported")


class TransformerStateError(TransformerError):
    """Raised when an operation is invoked outside the state that permits it."""

    def __init__(self, name: str, state: str, operation: str) -> None:
        self.name = name
        self.state = state
        self.operation = operation
        super().__init__(f"Transformer {name} cannot {operation} while {state}")
