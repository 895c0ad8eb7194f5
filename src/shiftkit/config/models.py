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

"""Configuration models and validation for executable transformers.

This module defines both the pydantic models used to validate a transformer's
declared configuration (from a TOML definition file or an in-memory mapping)
and the frozen dataclasses used at runtime. Validation happens once at plugin
initialisation; the runtime objects are never mutated afterwards.
"""

from __future__ import annotations

import shlex
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, cast

from pydantic import BaseModel, ConfigDict, Field, JsonValue, ValidationError, field_validator

from shiftkit.config.constants import (
    DEFAULT_DOCKERFILE,
    DEFAULT_KEEP_ALIVE_COMMAND,
    DEFAULT_TEMPLATES_DIRNAME,
)
from shiftkit.core.model_types import Platform
from shiftkit.core.type_aliases import ImageName, TransformerName
from shiftkit.exceptions import ShiftkitValidationError


class ConfigValidationError(ShiftkitValidationError):
    """Raised when configuration data contains invalid values."""


class ConfigFieldTypeError(ConfigValidationError):
    """Raised when a configuration field has an invalid type."""

    def __init__(self, field: str, expected: str) -> None:
        """Initialize the exception with the field name and the expected type.

        Args:
            field: The name of the configuration field with an invalid type.
            expected: Human readable description of the accepted type.
        """
        self.field = field
        self.expected = expected
        super().__init__(f"{field} must be {expected}")


class ConfigReadError(ConfigValidationError):
    """Raised when a transformer definition file cannot be read from disk."""

    def __init__(self, path: Path, error: Exception) -> None:
        """Initialize the exception with file path and underlying error.

        Args:
            path: The path to the definition file that could not be read.
            error: The underlying exception that caused the read failure.
        """
        self.path = path
        self.error = error
        super().__init__(f"Unable to read {path}: {error}")


class InvalidTransformerConfigError(ConfigValidationError):
    """Raised when a transformer definition or executable config fails validation."""

    def __init__(self, source: str, error: Exception) -> None:
        """Initialize the exception with the config source and validation error.

        Args:
            source: File path or transformer name the configuration came from.
            error: The underlying validation exception.
        """
        self.source = source
        self.error = error
        super().__init__(f"Invalid transformer configuration in {source}: {error}")


def ensure_command(value: object, *, field_name: str) -> list[str]:
    """Coerce a declared command into an argument vector.

    Strings are split with shell-like rules; sequences must contain only
    strings. ``None`` yields an empty command (meaning "not declared").

    Args:
        value: Raw configuration value.
        field_name: Field name used in error messages.

    Returns:
        Argument vector, possibly empty.

    Raises:
        ConfigFieldTypeError: If the value is neither a string nor a list of strings.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, Iterable) and not isinstance(value, Mapping):
        items = list(cast("Iterable[object]", value))
        if all(isinstance(item, str) for item in items):
            return cast("list[str]", items)
    raise ConfigFieldTypeError(field_name, "a string or a list of strings")


@dataclass(slots=True, frozen=True)
class ContainerBuild:
    """Instructions to build a plugin image when it is missing locally.

    Attributes:
        dockerfile: Dockerfile path relative to ``context``.
        context: Build context relative to the transformer context directory.
    """

    dockerfile: str = DEFAULT_DOCKERFILE
    context: str = "."


@dataclass(slots=True, frozen=True)
class ContainerSpec:
    """Container descriptor: the image and per-container execution parameters.

    Attributes:
        image: Image reference; empty when the plugin declares no container.
        build: Optional build instructions used when ``image`` is missing.
        working_dir: Working directory inside the container; empty selects the
            translated transformer context directory.
        keep_alive_command: Command that keeps the long-lived container running.
    """

    image: ImageName = ImageName("")
    build: ContainerBuild | None = None
    working_dir: str = ""
    keep_alive_command: tuple[str, ...] = DEFAULT_KEEP_ALIVE_COMMAND


@dataclass(slots=True, frozen=True)
class ExecutableConfig:
    """Runtime configuration of an executable transformer.

    Attributes:
        enable_qa: Whether the plugin asks questions over the QA RPC channel.
        platforms: Host platforms the plugin supports natively.
        directory_detect_cmd: Detect command; empty when detection is not offered.
        transform_cmd: Transform command; empty selects template-copy fallback.
        container: Container descriptor, or ``None`` when no image is declared.
        timeout: Optional per-command limit in seconds.
    """

    enable_qa: bool = False
    platforms: frozenset[Platform] = field(default_factory=frozenset)
    directory_detect_cmd: tuple[str, ...] = ()
    transform_cmd: tuple[str, ...] = ()
    container: ContainerSpec | None = None
    timeout: float | None = None

    @property
    def image(self) -> ImageName:
        """Return the declared image, or an empty name when none is declared."""
        return self.container.image if self.container else ImageName("")


@dataclass(slots=True, frozen=True)
class TransformerConfig:
    """Declared identity and raw spec of one transformer instance.

    Attributes:
        name: Unique transformer name.
        class_name: Implementation class (``Executable`` for command plugins).
        context: Transformer context directory on the host.
        templates_dir: Template directory relative to ``context``.
        spec: Raw class-specific configuration, validated at ``init``.
    """

    name: TransformerName
    class_name: str
    context: Path
    templates_dir: str = DEFAULT_TEMPLATES_DIRNAME
    spec: Mapping[str, JsonValue] = field(default_factory=dict)


class ContainerBuildModel(BaseModel):
    """Pydantic model for the ``container.build`` table."""

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True, extra="forbid")

    dockerfile: str = DEFAULT_DOCKERFILE
    context: str = "."


class ContainerSpecModel(BaseModel):
    """Pydantic model for the ``container`` table of an executable config.

    Attributes:
        image: Image reference.
        build: Optional build instructions.
        working_dir: In-container working directory (``workingDir``).
        keep_alive_command: Long-lived container command (``keepAliveCommand``).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True, extra="forbid")

    image: str = ""
    build: ContainerBuildModel | None = None
    working_dir: str = Field(default="", alias="workingDir")
    keep_alive_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_KEEP_ALIVE_COMMAND),
        alias="keepAliveCommand",
    )

    @field_validator("image", mode="before")
    @classmethod
    def _strip_image(cls, value: object) -> object:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    @field_validator("keep_alive_command", mode="before")
    @classmethod
    def _coerce_keep_alive(cls, value: object) -> list[str]:
        return ensure_command(value, field_name="container.keepAliveCommand") or list(DEFAULT_KEEP_ALIVE_COMMAND)


class ExecutableConfigModel(BaseModel):
    """Pydantic model validating the spec of an executable transformer.

    After validation, it is converted to an ``ExecutableConfig`` dataclass for
    runtime use.

    Attributes:
        enable_qa: ``enableQA`` flag.
        platforms: Supported host platforms.
        directory_detect_cmd: ``directoryDetectCMD`` command line.
        transform_cmd: ``transformCMD`` command line.
        container: Optional container descriptor.
        timeout: Optional per-command timeout in seconds.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True)

    enable_qa: bool = Field(default=False, alias="enableQA")
    platforms: list[Platform] = Field(default_factory=list)
    directory_detect_cmd: list[str] = Field(default_factory=list, alias="directoryDetectCMD")
    transform_cmd: list[str] = Field(default_factory=list, alias="transformCMD")
    container: ContainerSpecModel | None = None
    timeout: float | None = Field(default=None, gt=0)

    @field_validator("platforms", mode="before")
    @classmethod
    def _coerce_platforms(cls, value: object) -> list[Platform]:
        if value is None:
            return []
        raw_items: list[object] = [value] if isinstance(value, str) else list(cast("Iterable[object]", value))
        platforms: list[Platform] = []
        for item in raw_items:
            if not isinstance(item, str):
                msg = "platforms"
                raise ConfigFieldTypeError(msg, "a list of strings")
            platforms.append(Platform.from_str(item))
        return platforms

    @field_validator("directory_detect_cmd", mode="before")
    @classmethod
    def _coerce_detect_cmd(cls, value: object) -> list[str]:
        return ensure_command(value, field_name="directoryDetectCMD")

    @field_validator("transform_cmd", mode="before")
    @classmethod
    def _coerce_transform_cmd(cls, value: object) -> list[str]:
        return ensure_command(value, field_name="transformCMD")


class TransformerSectionModel(BaseModel):
    """Pydantic model for the ``[transformer]`` table of a definition file."""

    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = Field(min_length=1)
    class_name: str = Field(alias="class", min_length=1)
    templates: str = DEFAULT_TEMPLATES_DIRNAME
    config: dict[str, JsonValue] = Field(default_factory=dict)


class TransformerFileModel(BaseModel):
    """Pydantic model for a whole transformer definition file."""

    transformer: TransformerSectionModel


def _container_from_model(model: ContainerSpecModel | None) -> ContainerSpec | None:
    if model is None or not model.image:
        return None
    build = ContainerBuild(dockerfile=model.build.dockerfile, context=model.build.context) if model.build else None
    return ContainerSpec(
        image=ImageName(model.image),
        build=build,
        working_dir=model.working_dir,
        keep_alive_command=tuple(model.keep_alive_command),
    )


def executable_config_from_model(model: ExecutableConfigModel) -> ExecutableConfig:
    """Convert an ``ExecutableConfigModel`` to an ``ExecutableConfig`` dataclass.

    Args:
        model: The validated model.

    Returns:
        Frozen runtime configuration.
    """
    return ExecutableConfig(
        enable_qa=model.enable_qa,
        platforms=frozenset(model.platforms),
        directory_detect_cmd=tuple(model.directory_detect_cmd),
        transform_cmd=tuple(model.transform_cmd),
        container=_container_from_model(model.container),
        timeout=model.timeout,
    )


def parse_executable_config(spec: Mapping[str, object], *, source: str) -> ExecutableConfig:
    """Validate a raw executable config mapping.

    Args:
        spec: Raw mapping, usually the ``[transformer.config]`` table.
        source: Name used in error messages (file path or transformer name).

    Returns:
        Frozen runtime configuration.

    Raises:
        InvalidTransformerConfigError: If the mapping does not validate.
    """
    try:
        model = ExecutableConfigModel.model_validate(dict(spec))
    except (ValidationError, ConfigValidationError, ValueError) as exc:
        raise InvalidTransformerConfigError(source, exc) from exc
    return executable_config_from_model(model)


__all__ = [
    "ConfigFieldTypeError",
    "ConfigReadError",
    "ConfigValidationError",
    "ContainerBuild",
    "ContainerBuildModel",
    "ContainerSpec",
    "ContainerSpecModel",
    "ExecutableConfig",
    "ExecutableConfigModel",
    "InvalidTransformerConfigError",
    "TransformerConfig",
    "TransformerFileModel",
    "TransformerSectionModel",
    "ensure_command",
    "executable_config_from_model",
    "parse_executable_config",
]
