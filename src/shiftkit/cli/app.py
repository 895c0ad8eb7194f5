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

"""CLI entry point and orchestration for shiftkit commands."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable, Sequence
from typing import Final

from shiftkit import __version__
from shiftkit._infra.error_codes import error_code_for
from shiftkit.cli.commands import detect as detect_command
from shiftkit.cli.commands import engines as engines_command
from shiftkit.cli.commands import transform as transform_command
from shiftkit.cli.helpers import echo, register_argument
from shiftkit.core.model_types import LogComponent
from shiftkit.exceptions import (
    ContainerEngineUnavailableError,
    ShiftkitError,
    ShiftkitValidationError,
    TransformerInitError,
)
from shiftkit.logging import LOG_FORMATS, LOG_LEVELS, configure_logging, structured_extra

logger: logging.Logger = logging.getLogger("shiftkit.cli")

SHIFTKIT_VERSION: Final[str] = __version__
EXIT_FAILURE: Final[int] = 1
EXIT_CONFIG_ERROR: Final[int] = 2
EXIT_ENGINE_UNAVAILABLE: Final[int] = 3

CommandHandler = Callable[[argparse.Namespace], int]


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point for the shiftkit command-line interface.

    Args:
        argv: Command-line arguments to parse. If None, uses sys.argv.

    Returns:
        int: ``0`` on success, ``1`` for runtime failures, ``2`` for configuration
        or initialisation errors and ``3`` when no container engine responds.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.version:
        echo(f"shiftkit {SHIFTKIT_VERSION}")
        return 0
    if args.command is None:
        parser.error("No command provided.")
    _ = configure_logging(args.log_format, log_level=args.log_level)
    handler = _command_handlers().get(args.command)
    if handler is None:
        parser.error(f"Unknown command {args.command}")
    try:
        return handler(args)
    except ContainerEngineUnavailableError as exc:
        return _report(exc, EXIT_ENGINE_UNAVAILABLE)
    except (ShiftkitValidationError, TransformerInitError) as exc:
        return _report(exc, EXIT_CONFIG_ERROR)
    except ShiftkitError as exc:
        return _report(exc, EXIT_FAILURE)


def _report(exc: ShiftkitError, exit_code: int) -> int:
    code = error_code_for(exc)
    logger.debug("Command failed", exc_info=exc, extra=structured_extra(LogComponent.CLI, exit_code=exit_code))
    echo(f"[{code}] {exc}", err=True)
    return exit_code


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    register_argument(
        common,
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Select logging output format; defaults to SHIFTKIT_LOG_FORMAT or text.",
    )
    register_argument(
        common,
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Set verbosity of logged events; defaults to SHIFTKIT_LOG_LEVEL or info.",
    )
    containers = common.add_mutually_exclusive_group()
    register_argument(
        containers,
        "--allow-containers",
        dest="allow_containers",
        action="store_true",
        default=None,
        help="Allow spawning containers; defaults to SHIFTKIT_SPAWN_CONTAINERS.",
    )
    register_argument(
        containers,
        "--no-containers",
        dest="allow_containers",
        action="store_false",
        default=None,
        help="Never spawn containers; container-only transformers are skipped.",
    )
    parser = argparse.ArgumentParser(
        prog="shiftkit",
        description="Run transformer plugins on the host or in containers.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    register_argument(parser, "--version", action="store_true", help="Print the shiftkit version and exit.")
    subparsers = parser.add_subparsers(dest="command")

    parents = [common]
    detect_command.register_detect_command(subparsers, parents=parents)
    transform_command.register_transform_command(subparsers, parents=parents)
    engines_command.register_engines_command(subparsers, parents=parents)
    return parser


def _command_handlers() -> dict[str, CommandHandler]:
    return {
        "detect": detect_command.execute_detect,
        "transform": transform_command.execute_transform,
        "engines": engines_command.execute_engines,
    }


__all__ = ["main"]
