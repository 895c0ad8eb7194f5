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

"""Values and the instance protocol shared by host and container environments."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from shiftkit.config.constants import DEFAULT_TEMPLATES_DIRNAME
from shiftkit.core.types import ExecResult

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(slots=True, frozen=True)
class EnvInfo:
    """Identity and host-side roots of one execution environment.

    Attributes:
        name: Owning transformer name, used in logs and errors.
        source: Project source root on the host.
        context: Transformer context directory on the host.
        rel_templates_dir: Template directory relative to ``context``.
    """

    name: str
    source: Path
    context: Path
    rel_templates_dir: str = DEFAULT_TEMPLATES_DIRNAME

    @property
    def templates_dir(self) -> Path:
        return self.context / self.rel_templates_dir


class EnvironmentInstance(Protocol):
    """Backing execution target of an ``Environment``."""

    @property
    def active(self) -> bool: ...

    def exec(self, command: Sequence[str]) -> ExecResult: ...

    def encode(self, path: str | Path) -> str: ...

    def decode(self, path: str) -> str: ...

    def download(self, path: str) -> Path: ...

    def destroy(self) -> None: ...


__all__ = ["EnvInfo", "EnvironmentInstance", "ExecResult"]
