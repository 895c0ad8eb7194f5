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

"""Unit tests for `shiftkit engines`."""

from __future__ import annotations

import json

import pytest

from shiftkit.cli import app
from shiftkit.container.cli_engine import DockerEngine, PodmanEngine

pytestmark = [pytest.mark.unit, pytest.mark.cli, pytest.mark.container]


def _stub_availability(monkeypatch: pytest.MonkeyPatch, *, docker: bool, podman: bool) -> None:
    monkeypatch.setattr(DockerEngine, "available", lambda _: docker)
    monkeypatch.setattr(PodmanEngine, "available", lambda _: podman)


def test_engines_reports_text(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _stub_availability(monkeypatch, docker=False, podman=True)
    assert app.main(["engines"]) == 0
    assert capsys.readouterr().out.splitlines() == ["docker: unavailable", "podman: available"]


def test_engines_reports_json_and_fails_without_runtime(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _stub_availability(monkeypatch, docker=False, podman=False)
    assert app.main(["engines", "--json"]) == 1
    assert json.loads(capsys.readouterr().out) == {"docker": False, "podman": False}
