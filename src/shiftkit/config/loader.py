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

"""Transformer definition loading and process settings.

A transformer definition is a TOML file::

    [transformer]
    name = "python-detector"
    class = "Executable"
    templates = "templates"

    [transformer.config]
    platforms = ["linux", "darwin"]
    directoryDetectCMD = ["python3", "detect.py"]

The directory holding the file becomes the transformer context directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from shiftkit.compat import tomllib
from shiftkit.config.constants import SPAWN_CONTAINERS_ENV
from shiftkit.config.models import (
    ConfigFieldTypeError,
    ConfigReadError,
    InvalidTransformerConfigError,
    TransformerConfig,
    TransformerFileModel,
)
from shiftkit.core.model_types import LogComponent
from shiftkit.core.type_aliases import TransformerName
from shiftkit.logging import structured_extra

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger("shiftkit.config")

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off", ""})


def load_transformer_config(path: Path) -> TransformerConfig:
    """Load a transformer definition from a TOML file.

    Args:
        path: Definition file. Relative paths resolve against the current
            working directory.

    Returns:
        ``TransformerConfig`` whose context is the file's parent directory.

    Raises:
        ConfigReadError: If the file cannot be read or is not valid TOML.
        InvalidTransformerConfigError: If the content fails validation.
    """
    resolved = path if path.is_absolute() else (Path.cwd() / path).resolve()
    try:
        raw: dict[str, object] = tomllib.loads(resolved.read_text(encoding="utf-8"))
    # ignore JUSTIFIED: filesystem or parse errors depend on host configuration
    except (OSError, tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigReadError(resolved, exc) from exc
    try:
        model = TransformerFileModel.model_validate(raw)
    except ValidationError as exc:
        raise InvalidTransformerConfigError(str(resolved), exc) from exc

    section = model.transformer
    context = resolved.parent.resolve()
    logger.debug(
        "Loaded transformer definition %s",
        section.name,
        extra=structured_extra(
            LogComponent.CONFIG,
            transformer=section.name,
            path=resolved,
            details={"class": section.class_name},
        ),
    )
    return TransformerConfig(
        name=TransformerName(section.name),
        class_name=section.class_name,
        context=context,
        templates_dir=section.templates,
        spec=dict(section.config),
    )


def spawn_containers_from_env(environ: Mapping[str, str] | None = None) -> bool:
    """Read operator consent for spawning containers from the environment.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.

    Returns:
        ``True`` only when ``SHIFTKIT_SPAWN_CONTAINERS`` holds a true value.

    Raises:
        ConfigFieldTypeError: If the variable holds an unrecognised value.
    """
    source = os.environ if environ is None else environ
    raw = source.get(SPAWN_CONTAINERS_ENV, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigFieldTypeError(SPAWN_CONTAINERS_ENV, "one of true/false/1/0/yes/no/on/off")


__all__ = ["load_transformer_config", "spawn_containers_from_env"]
