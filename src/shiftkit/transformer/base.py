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

"""Transformer protocol consumed by the transformer driver."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from shiftkit.config.models import TransformerConfig

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from shiftkit.core.type_aliases import ServiceName
    from shiftkit.core.types import Artifact
    from shiftkit.environment import EnvInfo, Environment
    from shiftkit.transformer.results import TransformResult


class Transformer(Protocol):
    """Detect services in directories and turn artifacts into path mappings.

    Errors never escape ``directory_detect`` or ``transform`` except
    ``EnvironmentNotActiveError``, which lets the caller retry, skip, or
    deactivate the transformer.
    """

    def init(self, config: TransformerConfig, env_info: EnvInfo) -> None: ...

    def get_config(self) -> tuple[TransformerConfig, Environment]: ...

    def directory_detect(self, directory: str | Path) -> dict[ServiceName, list[Artifact]]: ...

    def transform(
        self,
        new_artifacts: Sequence[Artifact],
        already_seen_artifacts: Sequence[Artifact] = (),
    ) -> TransformResult: ...

    def close(self) -> None: ...


__all__ = ["Transformer", "TransformerConfig"]
