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

"""Enumerations shared by the container, environment and transformer layers.

- Log components and formats for structured logging
- Path mapping types carried on the transform wire contract
- Host platform identifiers declared by plugins
- Transformer lifecycle states
"""

from __future__ import annotations

import sys

from shiftkit.compat import StrEnum


class LogComponent(StrEnum):
    """Enumeration of loggable system components.

    Attributes:
        CONTAINER: Container engine component.
        ENVIRONMENT: Execution environment component.
        TRANSFORMER: Plugin protocol component.
        CONFIG: Configuration loading component.
        CLI: Command-line interface component.
    """

    CONTAINER = "container"
    ENVIRONMENT = "environment"
    TRANSFORMER = "transformer"
    CONFIG = "config"
    CLI = "cli"

    @classmethod
    def from_str(cls, raw: str) -> LogComponent:
        """Create a LogComponent enum from a string value.

        Args:
            raw: String representation of the log component.

        Returns:
            LogComponent enum value.

        Raises:
            ValueError: If the string does not match any LogComponent value.
        """
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            msg = f"Unknown log component '{raw}'"
            raise ValueError(msg) from exc


class LogFormat(StrEnum):
    """Enumeration of log output formats.

    Attributes:
        TEXT: Human-readable text format.
        JSON: Machine-readable JSON format.
    """

    TEXT = "text"
    JSON = "json"

    @classmethod
    def from_str(cls, raw: str) -> LogFormat:
        """Create a LogFormat enum from a string value.

        Args:
            raw: String representation of the log format.

        Returns:
            LogFormat enum value.

        Raises:
            ValueError: If the string does not match any LogFormat value.
        """
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            msg = f"Unknown log format '{raw}'"
            raise ValueError(msg) from exc


class PathMappingType(StrEnum):
    """Kinds of file placement work a path mapping describes.

    Attributes:
        DEFAULT: Plain copy of ``srcPath`` to ``destPath``.
        TEMPLATE: Render the template directory at ``srcPath`` with ``templateConfig``.
        SOURCE: Copy the project source tree into ``destPath``.
        DELETE: Remove ``destPath`` from the output.
        SOURCE_DIFF: Apply changes relative to the original source.
        PATH_TEMPLATE: Destination path is itself a template.
        SPECIAL_TEMPLATE: Template rendered with alternate delimiters.
    """

    DEFAULT = "default"
    TEMPLATE = "template"
    SOURCE = "source"
    DELETE = "delete"
    SOURCE_DIFF = "sourcediff"
    PATH_TEMPLATE = "pathtemplate"
    SPECIAL_TEMPLATE = "specialtemplate"

    @classmethod
    def from_str(cls, raw: str) -> PathMappingType:
        """Parse a path mapping type case-insensitively.

        Args:
            raw: Wire value such as ``"Template"`` or ``"source"``.

        Returns:
            PathMappingType enum value.

        Raises:
            ValueError: If the string does not match any PathMappingType value.
        """
        value = raw.strip().lower()
        try:
            return cls(value)
        except ValueError as exc:
            msg = f"Unknown path mapping type '{raw}'"
            raise ValueError(msg) from exc


class Platform(StrEnum):
    """Operating system identifiers a plugin may declare support for."""

    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"

    @classmethod
    def from_str(cls, raw: str) -> Platform:
        """Parse a platform identifier, accepting ``sys.platform`` spellings.

        Args:
            raw: Identifier such as ``"linux"``, ``"darwin"`` or ``"win32"``.

        Returns:
            Platform enum value.

        Raises:
            ValueError: If the identifier names no supported platform.
        """
        value = raw.strip().lower()
        if value.startswith("linux"):
            return cls.LINUX
        if value in {"win32", "cygwin", "msys"}:
            return cls.WINDOWS
        try:
            return cls(value)
        except ValueError as exc:
            msg = f"Unknown platform '{raw}'"
            raise ValueError(msg) from exc

    @classmethod
    def host(cls) -> Platform | None:
        """Return the platform of the running interpreter, if recognised."""
        try:
            return cls.from_str(sys.platform)
        except ValueError:
            return None


class TransformerState(StrEnum):
    """Lifecycle of a plugin instance.

    ``init`` is the only transition into ``INITIALIZED``; detect and transform
    calls keep the instance there until ``close`` moves it to ``DONE``.
    """

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    DONE = "done"


__all__ = [
    "LogComponent",
    "LogFormat",
    "PathMappingType",
    "Platform",
    "TransformerState",
]
