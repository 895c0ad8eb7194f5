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

"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from shiftkit._internal.logging_utils import CHILD_LOGGERS, ROOT_LOGGER_NAME
from shiftkit.environment import EnvInfo
from tests.fixtures.stubs import FakeContainerEngine, ScriptedRunner

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _restore_shiftkit_logging() -> Iterator[None]:
    """Undo `configure_logging` side effects so caplog keeps seeing shiftkit records."""
    saved = {
        name: (logging.getLogger(name).handlers[:], logging.getLogger(name).level, logging.getLogger(name).propagate)
        for name in (ROOT_LOGGER_NAME, *CHILD_LOGGERS)
    }
    yield
    for name, (handlers, level, propagate) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """Project source tree with one service directory."""
    root = tmp_path / "project"
    (root / "svc").mkdir(parents=True)
    return root


@pytest.fixture
def context_dir(tmp_path: Path) -> Path:
    """Transformer context directory with an empty templates folder."""
    context = tmp_path / "plugin"
    (context / "templates").mkdir(parents=True)
    return context


@pytest.fixture
def env_info(source_root: Path, context_dir: Path) -> EnvInfo:
    return EnvInfo(name="demo", source=source_root, context=context_dir)


@pytest.fixture
def scripted_runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def fake_engine() -> FakeContainerEngine:
    return FakeContainerEngine(images={"example/plugin:latest"})
