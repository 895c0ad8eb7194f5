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

"""Shared configuration defaults for shiftkit environments and transformers."""

from __future__ import annotations

from typing import Final

SPAWN_CONTAINERS_ENV: Final[str] = "SHIFTKIT_SPAWN_CONTAINERS"
QA_RPC_ADDRESS_ENV: Final[str] = "SHIFTKIT_QA_RPC_ADDRESS"

EXECUTABLE_TRANSFORMER_CLASS: Final[str] = "Executable"
DEFAULT_TEMPLATES_DIRNAME: Final[str] = "templates"
DEFAULT_DOCKERFILE: Final[str] = "Dockerfile"
DEFAULT_KEEP_ALIVE_COMMAND: Final[tuple[str, ...]] = ("tail", "-f", "/dev/null")

CONTAINER_SOURCE_ROOT: Final[str] = "/var/tmp/shiftkit-source"
CONTAINER_CONTEXT_ROOT: Final[str] = "/var/tmp/shiftkit-context"

__all__ = [
    "CONTAINER_CONTEXT_ROOT",
    "CONTAINER_SOURCE_ROOT",
    "DEFAULT_DOCKERFILE",
    "DEFAULT_KEEP_ALIVE_COMMAND",
    "DEFAULT_TEMPLATES_DIRNAME",
    "EXECUTABLE_TRANSFORMER_CLASS",
    "QA_RPC_ADDRESS_ENV",
    "SPAWN_CONTAINERS_ENV",
]
