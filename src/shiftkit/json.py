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

"""Canonical JSON types and helpers used across shiftkit.

This module defines the JSON value shapes exchanged with plugin commands. It
intentionally has no dependencies on logging, configuration, or CLI layers to
keep the dependency graph simple and acyclic.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import TypeAlias, cast

from pydantic import BaseModel, JsonValue

__all__ = [
    "JSONMapping",
    "JSONValue",
    "dumps_pretty",
    "normalize_enums_for_json",
    "parse_json_object",
]

JSONValue: TypeAlias = JsonValue
JSONMapping = dict[str, JsonValue]


def parse_json_object(payload: str) -> JSONMapping:
    """Parse ``payload`` and require the top-level value to be an object.

    Args:
        payload: Raw JSON text, typically a plugin's trimmed stdout.

    Returns:
        Parsed JSON object as a string-keyed mapping.

    Raises:
        ValueError: If ``payload`` is not valid JSON or is not a JSON object.
    """
    data = json.loads(payload)
    if not isinstance(data, dict):
        message = f"Expected a JSON object but received {type(data).__name__}"
        raise ValueError(message)
    return cast("JSONMapping", data)


def dumps_pretty(value: object) -> str:
    """Serialise ``value`` with stable indentation and key order for CLI output."""
    return json.dumps(normalize_enums_for_json(value), indent=2, sort_keys=True, ensure_ascii=False)


def normalize_enums_for_json(value: object) -> JSONValue:
    """Convert a log or CLI payload into plain JSON values.

    Enum keys and values become their ``.value``, paths become strings, pydantic
    models are dumped by alias, and anything else unknown is rendered with ``str``.
    """
    if isinstance(value, Enum):
        return cast("JSONValue", value.value)
    if isinstance(value, BaseModel):
        return cast("JSONValue", value.model_dump(mode="json", by_alias=True))
    if isinstance(value, os.PathLike):
        return os.fspath(cast("os.PathLike[str]", value))
    if isinstance(value, Mapping):
        return {
            str(key.value if isinstance(key, Enum) else key): normalize_enums_for_json(item)
            for key, item in cast("Mapping[object, object]", value).items()
        }
    if isinstance(value, (list, tuple)):
        return [normalize_enums_for_json(item) for item in cast("Sequence[object]", value)]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
