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

"""Plugin protocol: executable transformers and result normalisation."""

from __future__ import annotations

from .base import Transformer, TransformerConfig
from .executable import ExecutableTransformer
from .factory import create_transformer
from .results import (
    TransformResult,
    inject_default_paths,
    parse_detect_output,
    parse_transform_output,
    services_to_wire,
    template_fallback_mappings,
)

__all__ = [
    "ExecutableTransformer",
    "TransformResult",
    "Transformer",
    "TransformerConfig",
    "create_transformer",
    "inject_default_paths",
    "parse_detect_output",
    "parse_transform_output",
    "services_to_wire",
    "template_fallback_mappings",
]
