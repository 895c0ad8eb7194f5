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

"""Execution environments: host processes or a dedicated container."""

from __future__ import annotations

from .container import ContainerInstance
from .environment import Environment, new_environment
from .local import LocalInstance
from .types import EnvInfo, EnvironmentInstance, ExecResult

__all__ = [
    "ContainerInstance",
    "EnvInfo",
    "Environment",
    "EnvironmentInstance",
    "ExecResult",
    "LocalInstance",
    "new_environment",
]
