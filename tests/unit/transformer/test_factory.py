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

"""Unit tests for transformer instantiation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from shiftkit.core.model_types import TransformerState
from shiftkit.environment import EnvInfo
from shiftkit.exceptions import TransformerInitError
from shiftkit.transformer import ExecutableTransformer, create_transformer
from tests.fixtures.builders import transformer_config

pytestmark = [pytest.mark.unit, pytest.mark.transformer]


def test_create_transformer_initialises_executable(
    env_info: EnvInfo,
    environment_calls: list[dict[str, object]],
) -> None:
    transformer = create_transformer(transformer_config(env_info.context), env_info)
    assert isinstance(transformer, ExecutableTransformer)
    assert transformer.state is TransformerState.INITIALIZED
    assert len(environment_calls) == 1


def test_create_transformer_rejects_unknown_class(env_info: EnvInfo) -> None:
    config = replace(transformer_config(env_info.context), class_name="Kubernetes")
    with pytest.raises(TransformerInitError, match="unsupported transformer class"):
        _ = create_transformer(config, env_info)
