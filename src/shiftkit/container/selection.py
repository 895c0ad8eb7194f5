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

"""Process-scoped container engine selection.

``ContainerEngineProvider`` is constructed once at startup and handed to every
consumer. The first ``engine()`` call asks for operator consent, probes the
candidate runtimes in order and caches the outcome; the cached value never
changes afterwards, so later reads need no coordination.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol, cast

from shiftkit.container.cli_engine import DockerEngine, PodmanEngine
from shiftkit.core.model_types import LogComponent
from shiftkit.exceptions import ContainerEngineUnavailableError
from shiftkit.logging import structured_extra

if TYPE_CHECKING:
    from shiftkit.container.base import ContainerEngine

logger: logging.Logger = logging.getLogger("shiftkit.container")


class EngineCandidate(Protocol):
    """Engine that can report whether its runtime responds."""

    def available(self) -> bool: ...


DEFAULT_CANDIDATES: tuple[Callable[[], EngineCandidate], ...] = (DockerEngine, PodmanEngine)


class ContainerEngineProvider:
    """Select and cache the single container engine used by this process.

    Args:
        consent: Operator consent for spawning containers, or a callable that
            is asked once on first use.
        candidates: Engine factories probed in order; the first available one
            wins.
    """

    def __init__(
        self,
        consent: bool | Callable[[], bool],
        candidates: Sequence[Callable[[], EngineCandidate]] = DEFAULT_CANDIDATES,
    ) -> None:
        self._consent = consent
        self._candidates = tuple(candidates)
        self._lock = threading.Lock()
        self._resolved = False
        self._disabled = False
        self._engine: ContainerEngine | None = None

    @property
    def disabled(self) -> bool:
        """Return whether the operator declined container usage."""
        self._resolve()
        return self._disabled

    def engine(self) -> ContainerEngine | None:
        """Return the selected engine, or ``None`` when containers are disabled.

        Raises:
            ContainerEngineUnavailableError: If containers are allowed but no
                candidate runtime responds. Raised again on every call.
        """
        self._resolve()
        if self._engine is None and not self._disabled:
            message = "No working container runtime available"
            raise ContainerEngineUnavailableError(message)
        return self._engine

    def _resolve(self) -> None:
        if self._resolved:
            return
        with self._lock:
            if self._resolved:
                return
            allowed = self._consent() if callable(self._consent) else bool(self._consent)
            if not allowed:
                self._disabled = True
                logger.info(
                    "Container usage disabled; container-only transformers will be skipped",
                    extra=structured_extra(LogComponent.CONTAINER),
                )
            else:
                self._engine = self._discover()
            self._resolved = True

    def _discover(self) -> ContainerEngine | None:
        for factory in self._candidates:
            candidate = factory()
            if candidate.available():
                logger.debug(
                    "Selected container engine %r",
                    candidate,
                    extra=structured_extra(LogComponent.CONTAINER),
                )
                return cast("ContainerEngine", candidate)
        logger.error("No container runtime responded", extra=structured_extra(LogComponent.CONTAINER))
        return None


__all__ = ["DEFAULT_CANDIDATES", "ContainerEngineProvider", "EngineCandidate"]
