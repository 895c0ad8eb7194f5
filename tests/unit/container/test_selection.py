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

"""Unit tests for process-scoped container engine selection."""

from __future__ import annotations

import threading

import pytest

from shiftkit.container.selection import ContainerEngineProvider
from shiftkit.exceptions import ContainerEngineUnavailableError

pytestmark = [pytest.mark.unit, pytest.mark.container]


class _Candidate:
    def __init__(self, name: str, *, available: bool) -> None:
        self.name = name
        self._available = available
        self.probes = 0

    def available(self) -> bool:
        self.probes += 1
        return self._available


class _Factory:
    def __init__(self, candidate: _Candidate) -> None:
        self.candidate = candidate
        self.calls = 0

    def __call__(self) -> _Candidate:
        self.calls += 1
        return self.candidate


def test_disabled_provider_returns_none_without_probing() -> None:
    factory = _Factory(_Candidate("docker", available=True))
    provider = ContainerEngineProvider(consent=False, candidates=[factory])
    assert provider.engine() is None
    assert provider.disabled is True
    assert factory.calls == 0


def test_first_available_candidate_wins() -> None:
    docker = _Factory(_Candidate("docker", available=False))
    podman = _Factory(_Candidate("podman", available=True))
    provider = ContainerEngineProvider(consent=True, candidates=[docker, podman])
    engine = provider.engine()
    assert engine is podman.candidate
    assert provider.disabled is False


def test_selection_is_cached() -> None:
    docker = _Factory(_Candidate("docker", available=True))
    provider = ContainerEngineProvider(consent=True, candidates=[docker])
    first = provider.engine()
    second = provider.engine()
    assert first is second
    assert docker.calls == 1
    assert docker.candidate.probes == 1


def test_missing_runtime_raises_on_every_call() -> None:
    docker = _Factory(_Candidate("docker", available=False))
    provider = ContainerEngineProvider(consent=True, candidates=[docker])
    with pytest.raises(ContainerEngineUnavailableError):
        _ = provider.engine()
    with pytest.raises(ContainerEngineUnavailableError):
        _ = provider.engine()
    assert docker.calls == 1


def test_consent_callable_is_asked_once_across_threads() -> None:
    asked: list[int] = []
    gate = threading.Barrier(8)

    def consent() -> bool:
        asked.append(1)
        return True

    docker = _Factory(_Candidate("docker", available=True))
    provider = ContainerEngineProvider(consent=consent, candidates=[docker])
    seen: list[object] = []

    def worker() -> None:
        gate.wait()
        seen.append(provider.engine())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(asked) == 1
    assert docker.calls == 1
    assert all(item is docker.candidate for item in seen)
