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

"""Container engine discovery for the shiftkit CLI."""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING

from shiftkit.cli.helpers import echo, register_argument
from shiftkit.container.cli_engine import DockerEngine, PodmanEngine
from shiftkit.json import dumps_pretty

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shiftkit.cli.helpers import SubparserCollection


def register_engines_command(
    subparsers: SubparserCollection,
    *,
    parents: Sequence[argparse.ArgumentParser] | None = None,
) -> None:
    """Attach the `shiftkit engines` command to the CLI.

    Args:
        subparsers: Top-level argparse subparser collection to register commands on.
        parents: Shared parent parsers carrying global options.
    """
    engines = subparsers.add_parser(
        "engines",
        help="Report which container engines respond",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        parents=parents or [],
    )
    register_argument(engines, "--json", action="store_true", help="Print the report as JSON.")


def execute_engines(args: argparse.Namespace) -> int:
    """Probe each known engine.

    Returns:
        `0` when at least one engine is available, `1` otherwise.
    """
    report = {engine.name: engine.available() for engine in (DockerEngine(), PodmanEngine())}
    if args.json:
        echo(dumps_pretty(report))
    else:
        for name, available in report.items():
            echo(f"{name}: {'available' if available else 'unavailable'}")
    return 0 if any(report.values()) else 1


__all__ = ["execute_engines", "register_engines_command"]
