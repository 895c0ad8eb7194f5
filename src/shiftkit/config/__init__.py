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

"""Configuration management for shiftkit.

This package provides validation models for executable transformer configs,
the TOML transformer definition loader, and environment-derived settings.
"""

from __future__ import annotations

from .models import (
    ConfigFieldTypeError,
    ConfigReadError,
    ConfigValidationError,
    ContainerBuild,
    ContainerSpec,
    ExecutableConfig,
    ExecutableConfigModel,
    InvalidTransformerConfigError,
    TransformerConfig,
    ensure_command,
    parse_executable_config,
)
from .loader import load_transformer_config, spawn_containers_from_env

__all__ = [
    "ConfigFieldTypeError",
    "ConfigReadError",
    "ConfigValidationError",
    "ContainerBuild",
    "ContainerSpec",
    "ExecutableConfig",
    "ExecutableConfigModel",
    "InvalidTransformerConfigError",
    "TransformerConfig",
    "ensure_command",
    "load_transformer_config",
    "parse_executable_config",
    "spawn_containers_from_env",
]
