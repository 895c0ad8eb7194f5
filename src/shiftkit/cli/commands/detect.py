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

"""`shiftkit detect`: run one transformer's detect command over directories."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from shiftkit.cli.helpers import build_transformer, echo, register_argument
from shiftkit.json import dumps_pretty
from shiftkit.transformer.results import ServicesMap, services_to_wire

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shiftkit.cli.helpers import SubparserCollection


def register_detect_command(
    subparsers: SubparserCollection,
    *,
    parents: Sequence[argparse.ArgumentParser] | None = None,
) -> None:
    """Attach the `shiftkit detect` command to the CLI.

    Args:
        subparsers: Top-level argparse subparser collection to register commands on.
        parents: Shared parent parsers carrying global options.
    """
    detect = subparsers.add_parser(
        "detect",
        help="Detect services with a transformer",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=parents or [],
    )
    register_argument(detect, "transformer_file", help="Transformer definition file (TOML).")
    register_argument(detect, "source", help="Project source root.")
    register_argument(
        detect,
        "directories",
        nargs="*",
        help="Directories to run detect in; defaults to the source root.",
    )


def execute_detect(args: argparse.Namespace) -> int:
    """Run detect over each directory and print the merged services as JSON.

    Services with the same name across directories are concatenated.
    """
    directories = [str(Path(item).resolve()) for item in (args.directories or [args.source])]
    merged: ServicesMap = {}
    with build_transformer(args) as transformer:
        for directory in directories:
            for name, artifacts in transformer.directory_detect(directory).items():
                merged.setdefault(name, []).extend(artifacts)
    echo(dumps_pretty(services_to_wire(merged)))
    return 0


__all__ = ["execute_detect", "register_detect_command"]
