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

"""Unit tests for enumerations in `shiftkit.core.model_types`."""

from __future__ import annotations

import sys

import pytest

from shiftkit.core.model_types import LogComponent, LogFormat, PathMappingType, Platform

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("linux", Platform.LINUX),
        ("linux2", Platform.LINUX),
        ("Darwin", Platform.DARWIN),
        ("win32", Platform.WINDOWS),
        ("windows", Platform.WINDOWS),
    ],
)
def test_platform_from_str_accepts_sys_platform_spellings(raw: str, expected: Platform) -> None:
    assert Platform.from_str(raw) is expected


def test_platform_from_str_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown platform"):
        _ = Platform.from_str("plan9")


def test_platform_host_matches_interpreter(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "platform", "darwin")
    assert Platform.host() is Platform.DARWIN
    monkeypatch.setattr(sys, "platform", "plan9")
    assert Platform.host() is None


def test_path_mapping_type_values_cover_wire_names() -> None:
    assert {member.value for member in PathMappingType} == {
        "default",
        "template",
        "source",
        "delete",
        "sourcediff",
        "pathtemplate",
        "specialtemplate",
    }


@pytest.mark.parametrize("enum_cls", [LogComponent, LogFormat, PathMappingType])
def test_from_str_rejects_unknown_values(enum_cls: type[LogComponent | LogFormat | PathMappingType]) -> None:
    with pytest.raises(ValueError, match="Unknown"):
        _ = enum_cls.from_str("nope")


def test_log_format_from_str_strips_and_lowercases() -> None:
    assert LogFormat.from_str("  JSON ") is LogFormat.JSON
