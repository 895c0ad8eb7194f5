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

# ignore JUSTIFIED: argument helpers mirror argparse signatures and allow passthrough
# typing without constraining caller kwargs
# ruff: noqa: ANN401

"""IO and setup helpers shared by CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from shiftkit.config.loader import load_transformer_config, spawn_containers_from_env
from shiftkit.container.selection import ContainerEngineProvider
from shiftkit.environment.types import EnvInfo
from shiftkit.transformer.factory import create_transformer

if TYPE_CHECKING:
    import argparse

    from shiftkit.transformer.executable import ExecutableTransformer


class _TextStream(Protocol):
    def write(self, s: str, /) -> int: ...


class ArgumentRegistrar(Protocol):
    """Subset of ``argparse.ArgumentParser`` used to register options."""

    def add_argument(self, *args: Any, **kwargs: Any) -> argparse.Action: ...


class SubparserCollection(Protocol):
    """Subset of ``argparse._SubParsersAction`` used to register commands."""

    def add_parser(self, name: str, **kwargs: Any) -> argparse.ArgumentParser: ...


def _select_stream(*, err: bool = False) -> _TextStream:
    return sys.stderr if err else sys.stdout


def echo(message: str, *, newline: bool = True, err: bool = False) -> None:
    """Write a message to stdout/stderr."""
    stream = _select_stream(err=err)
    _ = stream.write(message)
    if newline:
        _ = stream.write("\n")


def register_argument(registrar: ArgumentRegistrar, *args: Any, **kwargs: Any) -> None:
    """Register an argument on a parser, discarding the action handle."""
    _ = registrar.add_argument(*args, **kwargs)


def containers_allowed(args: argparse.Namespace) -> bool:
    """Return operator consent: the CLI flag when given, else ``SHIFTKIT_SPAWN_CONTAINERS``."""
    flag = getattr(args, "allow_containers", None)
    if flag is not None:
        return bool(flag)
    return spawn_containers_from_env()


def build_transformer(args: argparse.Namespace) -> ExecutableTransformer:
    """Load the transformer definition named on the command line and initialise it.

    Raises:
        ConfigValidationError: If the definition cannot be loaded.
        TransformerInitError: If the transformer cannot be initialised.
        ContainerEngineUnavailableError: If containers are allowed but no runtime responds.
    """
    config = load_transformer_config(Path(args.transformer_file))
    env_info = EnvInfo(
        name=config.name,
        source=Path(args.source).resolve(),
        context=config.context,
        rel_templates_dir=config.templates_dir,
    )
    provider = ContainerEngineProvider(lambda: containers_allowed(args))
    return create_transformer(config, env_info, engine_provider=provider)


__all__ = [
    "ArgumentRegistrar",
    "SubparserCollection",
    "build_transformer",
    "containers_allowed",
    "echo",
    "register_argument",
]
