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

"""Parsing and normalisation of plugin output.

Detect output is parsed with an explicit two-stage chain: the full
``{service: [artifact, ...]}`` shape first, then any JSON object wrapped as
the template config of a single unnamed-service artifact. Transform output is
parsed strictly. Results from several artifacts are appended, never merged.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from pydantic import TypeAdapter, ValidationError

from shiftkit.core.model_types import LogComponent, PathMappingType
from shiftkit.core.types import (
    DEFAULT_SOURCE_DIR,
    SERVICE_DIR_PATH_TYPE,
    TEMPLATE_CONFIG_TYPE,
    Artifact,
    PathMapping,
    TransformOutput,
)
from shiftkit.json import JSONMapping, JSONValue, parse_json_object
from shiftkit.logging import structured_extra

logger: logging.Logger = logging.getLogger("shiftkit.transformer")

ServicesMap = dict[str, list[Artifact]]

_SERVICES_ADAPTER: Final[TypeAdapter[dict[str, list[Artifact] | None]]] = TypeAdapter(
    dict[str, list[Artifact] | None],
)


def _parse_full_detect_output(payload: str) -> ServicesMap:
    if payload == "null":
        return {}
    parsed = _SERVICES_ADAPTER.validate_json(payload)
    return {name: list(artifacts or []) for name, artifacts in parsed.items()}


def _parse_template_config(payload: str) -> JSONMapping | None:
    if not payload:
        return None
    try:
        return parse_json_object(payload)
    except ValueError:
        logger.debug(
            "Detect output is not a JSON object; using an empty template config",
            extra=structured_extra(LogComponent.TRANSFORMER),
        )
        return {}


def parse_detect_output(stdout: str, directory: str) -> ServicesMap:
    """Parse the stdout of a detect command.

    Args:
        stdout: Raw command output; surrounding whitespace is ignored.
        directory: Directory that was passed to the command.

    Returns:
        Services keyed by name. When the output is not the full services
        shape, a single ``""`` service holds one artifact whose service
        directory is ``directory`` and whose ``TemplateConfig`` is the parsed
        object (``None`` for empty output, ``{}`` for a non-object payload).
    """
    payload = stdout.strip()
    try:
        return _parse_full_detect_output(payload)
    except ValidationError as exc:
        logger.debug(
            "Detect output is not the full services shape: %s",
            exc.errors(include_url=False)[:1],
            extra=structured_extra(LogComponent.TRANSFORMER, path=directory),
        )
    config: JSONValue = _parse_template_config(payload)
    artifact = Artifact(
        paths={SERVICE_DIR_PATH_TYPE: [directory]},
        configs={TEMPLATE_CONFIG_TYPE: config},
    )
    return {"": [artifact]}


def inject_default_paths(services: Mapping[str, Sequence[Artifact]], directory: str) -> ServicesMap:
    """Give every artifact without paths the service directory ``directory``.

    Returns:
        New services mapping; input artifacts are not modified.
    """
    result: ServicesMap = {}
    for name, artifacts in services.items():
        result[name] = [
            artifact if artifact.paths else artifact.model_copy(update={"paths": {SERVICE_DIR_PATH_TYPE: [directory]}})
            for artifact in artifacts
        ]
    return result


def template_fallback_mappings(artifact: Artifact, *, source_root: Path, templates_dir: Path) -> list[PathMapping]:
    """Synthesize the template and source mappings used when no transform command exists.

    Args:
        artifact: Artifact whose service directory locates the output.
        source_root: Host project source root.
        templates_dir: Host template directory of the transformer.

    Returns:
        A ``template`` mapping followed by a ``source`` mapping.

    Raises:
        ValueError: If the artifact has no service directory or it lies
            outside ``source_root``.
    """
    service_dir = artifact.service_dir()
    if not service_dir:
        msg = "artifact has no service directory"
        raise ValueError(msg)
    absolute = Path(os.path.abspath(service_dir))
    root = Path(os.path.abspath(source_root))
    try:
        relative = absolute.relative_to(root)
    except ValueError as exc:
        msg = f"service directory {service_dir} is outside source root {source_root}"
        raise ValueError(msg) from exc
    destination = Path(DEFAULT_SOURCE_DIR, relative)
    return [
        PathMapping(
            type=PathMappingType.TEMPLATE,
            src_path=str(templates_dir),
            dest_path=str(destination),
            template_config=artifact.configs.get(TEMPLATE_CONFIG_TYPE),
        ),
        PathMapping(type=PathMappingType.SOURCE, src_path="", dest_path=DEFAULT_SOURCE_DIR),
    ]


def parse_transform_output(stdout: str) -> TransformOutput:
    """Parse the stdout of a transform command strictly.

    Raises:
        ValueError: If the output is not a valid transform output object.
    """
    output = TransformOutput.model_validate_json(stdout.strip())
    for mapping in output.path_mappings:
        if not isinstance(mapping.type, PathMappingType):
            logger.debug(
                "Keeping path mapping with unrecognised type %r",
                mapping.type,
                extra=structured_extra(LogComponent.TRANSFORMER, path=mapping.dest_path),
            )
    return output


@dataclass(slots=True)
class TransformResult:
    """Aggregate transform output; unpacks as ``(path_mappings, created_artifacts)``."""

    path_mappings: list[PathMapping] = field(default_factory=list)
    created_artifacts: list[Artifact] = field(default_factory=list)

    def __iter__(self) -> Iterator[list[PathMapping] | list[Artifact]]:
        yield self.path_mappings
        yield self.created_artifacts

    def extend(self, other: TransformOutput | TransformResult) -> None:
        self.path_mappings.extend(other.path_mappings)
        self.created_artifacts.extend(other.created_artifacts)

    def to_wire(self) -> dict[str, list[dict[str, object]]]:
        return {
            "pathMappings": [item.model_dump(mode="json", by_alias=True) for item in self.path_mappings],
            "createdArtifacts": [item.model_dump(mode="json", by_alias=True) for item in self.created_artifacts],
        }


def services_to_wire(services: Mapping[str, Sequence[Artifact]]) -> dict[str, list[dict[str, object]]]:
    """Render detected services in the detect wire shape."""
    return {
        name: [artifact.model_dump(mode="json", by_alias=True) for artifact in artifacts]
        for name, artifacts in services.items()
    }


__all__ = [
    "ServicesMap",
    "TransformResult",
    "inject_default_paths",
    "parse_detect_output",
    "parse_transform_output",
    "services_to_wire",
    "template_fallback_mappings",
]
