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

"""Instantiate and initialise transformers from their declared class."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shiftkit.config.constants import EXECUTABLE_TRANSFORMER_CLASS
from shiftkit.exceptions import TransformerInitError
from shiftkit.transformer.executable import ExecutableTransformer

if TYPE_CHECKING:
    from shiftkit.config.models import TransformerConfig
    from shiftkit.container.selection import ContainerEngineProvider
    from shiftkit.environment import EnvInfo
    from shiftkit.transformer.executable import QAReceiver


def create_transformer(
    config: TransformerConfig,
    env_info: EnvInfo,
    *,
    engine_provider: ContainerEngineProvider | None = None,
    qa_receiver: QAReceiver | None = None,
) -> ExecutableTransformer:
    """Create and initialise the transformer named by ``config.class_name``.

    Raises:
        TransformerInitError: If the class is unknown or initialisation fails.
    """
    if config.class_name != EXECUTABLE_TRANSFORMER_CLASS:
        raise TransformerInitError(config.name, f"unsupported transformer class {config.class_name!r}")
    transformer = ExecutableTransformer(engine_provider, qa_receiver)
    transformer.init(config, env_info)
    return transformer


__all__ = ["create_transformer"]
