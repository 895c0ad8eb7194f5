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

"""Fixtures for transformer tests: a host environment driven by a scripted runner."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shiftkit.environment import Environment, LocalInstance
from shiftkit.transformer import executable as executable_module

if TYPE_CHECKING:
    from shiftkit.environment import EnvInfo
    from tests.fixtures.stubs import ScriptedRunner


@pytest.fixture
def environment_calls(monkeypatch: pytest.MonkeyPatch, scripted_runner: ScriptedRunner) -> list[dict[str, object]]:
    """Route every new environment through `scripted_runner` and record the selection arguments."""
    calls: list[dict[str, object]] = []

    def fake_new_environment(env_info: EnvInfo, **kwargs: object) -> Environment:
        calls.append(kwargs)
        qa_address = kwargs.get("qa_address")
        instance = LocalInstance(
            env_info,
            qa_address if isinstance(qa_address, str) else None,
            runner=scripted_runner,
        )
        return Environment(env_info, instance)

    monkeypatch.setattr(executable_module, "new_environment", fake_new_environment)
    return calls
