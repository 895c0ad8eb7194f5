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

"""Unit tests for executable transformer configuration models."""

from __future__ import annotations

import pytest

from shiftkit.config.constants import DEFAULT_KEEP_ALIVE_COMMAND
from shiftkit.config.models import (
    ConfigFieldTypeError,
    ContainerBuild,
    ExecutableConfig,
    InvalidTransformerConfigError,
    ensure_command,
    parse_executable_config,
)
from shiftkit.core.model_types import Platform

pytestmark = pytest.mark.unit


def test_ensure_command_splits_strings_like_a_shell() -> None:
    assert ensure_command("python3 detect.py --mode 'a b'", field_name="cmd") == [
        "python3",
        "detect.py",
        "--mode",
        "a b",
    ]


def test_ensure_command_keeps_lists_and_maps_none_to_empty() -> None:
    assert ensure_command(["a", "b"], field_name="cmd") == ["a", "b"]
    assert ensure_command(None, field_name="cmd") == []


@pytest.mark.parametrize("value", [42, ["a", 1], {"a": "b"}])
def test_ensure_command_rejects_other_types(value: object) -> None:
    with pytest.raises(ConfigFieldTypeError, match="cmd must be a string or a list of strings"):
        _ = ensure_command(value, field_name="cmd")


def test_parse_executable_config_reads_wire_aliases() -> None:
    config = parse_executable_config(
        {
            "enableQA": True,
            "platforms": ["linux", "win32"],
            "directoryDetectCMD": "python3 detect.py",
            "transformCMD": ["python3", "transform.py"],
            "timeout": 30,
        },
        source="demo",
    )
    assert config == ExecutableConfig(
        enable_qa=True,
        platforms=frozenset({Platform.LINUX, Platform.WINDOWS}),
        directory_detect_cmd=("python3", "detect.py"),
        transform_cmd=("python3", "transform.py"),
        container=None,
        timeout=30.0,
    )


def test_parse_executable_config_defaults() -> None:
    config = parse_executable_config({}, source="demo")
    assert config.enable_qa is False
    assert config.platforms == frozenset()
    assert config.directory_detect_cmd == ()
    assert config.transform_cmd == ()
    assert config.container is None
    assert config.image == ""


def test_parse_executable_config_builds_container_spec() -> None:
    config = parse_executable_config(
        {
            "container": {
                "image": " example/plugin:latest ",
                "workingDir": "/work",
                "build": {"dockerfile": "Dockerfile.plugin"},
            },
        },
        source="demo",
    )
    assert config.container is not None
    assert config.image == "example/plugin:latest"
    assert config.container.working_dir == "/work"
    assert config.container.build == ContainerBuild(dockerfile="Dockerfile.plugin", context=".")
    assert config.container.keep_alive_command == DEFAULT_KEEP_ALIVE_COMMAND


def test_container_without_image_is_dropped() -> None:
    config = parse_executable_config({"container": {"workingDir": "/work"}}, source="demo")
    assert config.container is None


def test_keep_alive_command_accepts_string() -> None:
    config = parse_executable_config(
        {"container": {"image": "img", "keepAliveCommand": "sleep infinity"}},
        source="demo",
    )
    assert config.container is not None
    assert config.container.keep_alive_command == ("sleep", "infinity")


@pytest.mark.parametrize(
    "spec",
    [
        {"platforms": ["beos"]},
        {"platforms": [1]},
        {"transformCMD": 12},
        {"timeout": 0},
        {"container": {"image": "img", "unknown": True}},
    ],
)
def test_parse_executable_config_rejects_invalid_values(spec: dict[str, object]) -> None:
    with pytest.raises(InvalidTransformerConfigError) as info:
        _ = parse_executable_config(spec, source="demo")
    assert info.value.source == "demo"
