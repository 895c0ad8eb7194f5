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

"""`shiftkit transform`: run one transformer over a set of artifacts."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter, ValidationError

from shiftkit.cli.helpers import build_transformer, echo, register_argument
from shiftkit.core.types import Artifact
from shiftkit.exceptions import ShiftkitValidationError
from shiftkit.json import dumps_pretty

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shiftkit.cli.helpers import SubparserCollection

_ARTIFACTS_ADAPTER: Final[TypeAdapter[list[Artifact] | dict[str, list[Artifact]]]] = TypeAdapter(
    list[Artifact] | dict[str, list[Artifact]],
)


class ArtifactsInputError(ShiftkitValidationError):
    """Raised when the artifacts input is neither an artifact list nor detect output."""

    def __init__(self, source: str, error: Exception) -> None:
        self.source = source
        self.error = error
        super().__init__(f"Invalid artifacts in {source}: {error}")


def register_transform_command(
    subparsers: SubparserCollection,
    *,
    parents: Sequence[argparse.ArgumentParser] | None = None,
) -> None:
    """Attach the `shiftkit transform` command to the CLI.

    Args:
        subparsers: Top-level argparse subparser collection to register commands on.
        parents: Shared parent parsers carrying global options.
    """
    transform = subparsers.add_parser(
        "transform",
        help="Transform artifacts with a transformer",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=parents or [],
    )
    register_argument(transform, "transformer_file", help="Transformer definition file (TOML).")
    register_argument(transform, "source", help="Project source root.")
    register_argument(
        transform,
        "artifacts",
        help="JSON file with an artifact list or `shiftkit detect` output; `-` reads stdin.",
    )


def load_artifacts(source: str) -> list[Artifact]:
    """Read artifacts from a file path or ``-`` for stdin.

    Detect output (services keyed by name) is flattened in service order.

    Raises:
        ArtifactsInputError: If the input cannot be read or validated.
    """
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise ArtifactsInputError(source, exc) from exc
    try:
        parsed = _ARTIFACTS_ADAPTER.validate_json(text)
    except ValidationError as exc:
        raise ArtifactsInputError(source, exc) from exc
    if isinstance(parsed, dict):
        return [artifact for artifacts in parsed.values() for artifact in artifacts]
    return parsed


def execute_transform(args: argparse.Namespace) -> int:
    """Transform the given artifacts and print the aggregate output as JSON."""
    artifacts = load_artifacts(args.artifacts)
    with build_transformer(args) as transformer:
        result = transformer.transform(artifacts, [])
    echo(dumps_pretty(result.to_wire()))
    return 0


__all__ = ["ArtifactsInputError", "execute_transform", "load_artifacts", "register_transform_command"]
