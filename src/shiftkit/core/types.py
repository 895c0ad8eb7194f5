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

"""Wire models exchanged with plugin commands.

Artifacts flow from detect output into transform input and back out as
created artifacts; path mappings describe file placement work for a later
materialisation stage. All models are frozen: re-emitting an artifact with
different paths produces a new value via ``model_copy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Final

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

from shiftkit.core.model_types import PathMappingType
from shiftkit.core.type_aliases import ConfigType, PathType

SERVICE_DIR_PATH_TYPE: Final[PathType] = "ServiceDirectories"
TEMPLATE_CONFIG_TYPE: Final[ConfigType] = "TemplateConfig"
DEFAULT_SOURCE_DIR: Final[str] = "source"


def _none_to_empty_dict(value: object) -> object:
    return {} if value is None else value


def _none_to_empty_list(value: object) -> object:
    return [] if value is None else value


class Artifact(BaseModel):
    """Unit of data passed between the detect and transform phases.

    Attributes:
        name: Optional artifact name.
        type: Optional artifact type tag.
        paths: Path role (for example ``ServiceDirectories``) to filesystem paths.
        configs: Config type (for example ``TemplateConfig``) to opaque data.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    type: str = ""
    paths: dict[PathType, list[str]] = Field(default_factory=dict)
    configs: dict[ConfigType, JsonValue] = Field(default_factory=dict)

    @field_validator("paths", "configs", mode="before")
    @classmethod
    def _null_mapping(cls, value: object) -> object:
        return _none_to_empty_dict(value)

    def service_dir(self) -> str | None:
        """Return the primary service directory, or ``None`` when absent."""
        dirs = self.paths.get(SERVICE_DIR_PATH_TYPE)
        return dirs[0] if dirs else None


class PathMapping(BaseModel):
    """Declarative instruction describing how a path is materialised in the output.

    Attributes:
        type: Kind of placement work. Values outside ``PathMappingType`` are
            kept as lower-cased strings for the materialisation stage to judge.
        src_path: Source path (``srcPath`` on the wire).
        dest_path: Destination path (``destPath`` on the wire).
        template_config: Data rendered into templates (``templateConfig``).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, populate_by_name=True)

    type: PathMappingType | str = PathMappingType.DEFAULT
    src_path: str = Field(default="", alias="srcPath")
    dest_path: str = Field(default="", alias="destPath")
    template_config: JsonValue = Field(default=None, alias="templateConfig")

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return PathMappingType.DEFAULT
        if isinstance(value, str) and not isinstance(value, PathMappingType):
            try:
                return PathMappingType.from_str(value)
            except ValueError:
                return value.strip().lower()
        return value


class TransformOutput(BaseModel):
    """Stdout contract of a transform command."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, populate_by_name=True)

    path_mappings: list[PathMapping] = Field(default_factory=list, alias="pathMappings")
    created_artifacts: list[Artifact] = Field(default_factory=list, alias="createdArtifacts")

    @field_validator("path_mappings", "created_artifacts", mode="before")
    @classmethod
    def _null_list(cls, value: object) -> object:
        return _none_to_empty_list(value)


@dataclass(slots=True, frozen=True)
class ExecResult:
    """Captured result of a command that ran to completion.

    A non-zero ``exit_code`` is data: the command ran and reported failure.
    """

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


__all__ = [
    "DEFAULT_SOURCE_DIR",
    "SERVICE_DIR_PATH_TYPE",
    "TEMPLATE_CONFIG_TYPE",
    "Artifact",
    "ExecResult",
    "PathMapping",
    "TransformOutput",
]
