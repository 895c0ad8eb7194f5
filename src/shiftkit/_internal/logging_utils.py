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

"""Logging setup and structured ``extra`` payloads for shiftkit loggers.

Every module logs through a named child of the ``shiftkit`` logger and attaches
a ``structured_extra`` payload. The payload names the component and, where
known, the transformer, container, image or path involved. The text formatter
appends that context to each line; the JSON formatter emits it as fields.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Final, SupportsFloat, SupportsInt, cast

from shiftkit.compat import UTC, TypedDict, Unpack, override
from shiftkit.core.model_types import LogComponent, LogFormat
from shiftkit.json import normalize_enums_for_json

if TYPE_CHECKING:
    from shiftkit.core.type_aliases import ContainerID, ImageName, TransformerName

ROOT_LOGGER_NAME: Final[str] = "shiftkit"
LOG_FORMAT_ENV: Final[str] = "SHIFTKIT_LOG_FORMAT"
LOG_LEVEL_ENV: Final[str] = "SHIFTKIT_LOG_LEVEL"

_LEVELS: Final[Mapping[str, int]] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
LOG_LEVELS: Final[tuple[str, ...]] = tuple(_LEVELS)
LOG_FORMATS: Final[tuple[str, ...]] = tuple(item.value for item in LogFormat)

CHILD_LOGGERS: Final[tuple[str, ...]] = (
    "shiftkit.cli",
    "shiftkit.config",
    "shiftkit.container",
    "shiftkit.environment",
    "shiftkit.process",
    "shiftkit.transformer",
)

# Context shown after the message by the text formatter, in this order.
_TEXT_CONTEXT: Final[tuple[str, ...]] = ("transformer", "container", "image", "exit_code")


def _as_path(value: object) -> str:
    return os.fspath(cast("str | os.PathLike[str]", value))


def _as_int(value: object) -> int:
    return int(cast("SupportsInt | str", value))


def _as_float(value: object) -> float:
    return float(cast("SupportsFloat | str", value))


_FIELD_CONVERTERS: Final[Mapping[str, Callable[[object], object]]] = {
    "transformer": str,
    "container": str,
    "image": str,
    "path": _as_path,
    "exit_code": _as_int,
    "duration_ms": _as_float,
}
STRUCTURED_FIELDS: Final[tuple[str, ...]] = ("component", *_FIELD_CONVERTERS, "details")


@dataclass(slots=True, frozen=True)
class LogConfig:
    """Logging configuration applied by ``configure_logging``."""

    format: LogFormat
    level: int
    level_name: str


class JSONLogFormatter(logging.Formatter):
    """One JSON object per record, carrying the structured fields that were set."""

    @override
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({name: getattr(record, name) for name in STRUCTURED_FIELDS if hasattr(record, name)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(normalize_enums_for_json(payload), ensure_ascii=False)


class TextLogFormatter(logging.Formatter):
    """``[LEVEL] message (transformer=... container=...)`` lines for terminals."""

    def __init__(self) -> None:
        super().__init__("[%(levelname)s] %(message)s")

    @override
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{name}={getattr(record, name)}" for name in _TEXT_CONTEXT if getattr(record, name, None) is not None
        )
        if not context:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} ({context}){sep}{tail}"


def _resolve(explicit: str | int | None, env_name: str, default: str) -> str | int:
    if explicit is not None:
        return explicit
    return os.getenv(env_name, "").strip() or default


def _level(value: str | int) -> tuple[int, str]:
    if isinstance(value, int):
        return value, logging.getLevelName(value).lower()
    name = value.strip().lower()
    if name not in _LEVELS:
        name = "info"
    return _LEVELS[name], name


def configure_logging(
    log_format: LogFormat | str | None = None,
    *,
    log_level: str | int | None = None,
) -> LogConfig:
    """Install a single handler on the ``shiftkit`` logger.

    Args:
        log_format: ``text`` or ``json``; ``None`` reads ``SHIFTKIT_LOG_FORMAT``
            and falls back to ``text``.
        log_level: Level name or number; ``None`` reads ``SHIFTKIT_LOG_LEVEL``
            and falls back to ``info``. Unknown names select ``info``.

    Returns:
        The applied configuration.
    """
    raw_format = _resolve(log_format, LOG_FORMAT_ENV, LogFormat.TEXT.value)
    selected = raw_format if isinstance(raw_format, LogFormat) else LogFormat.from_str(str(raw_format))
    level, level_name = _level(_resolve(log_level, LOG_LEVEL_ENV, "info"))

    handler = logging.StreamHandler()
    handler.setFormatter(JSONLogFormatter() if selected is LogFormat.JSON else TextLogFormatter())
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    for child in CHILD_LOGGERS:
        logging.getLogger(child).setLevel(level)
    return LogConfig(format=selected, level=level, level_name=level_name)


class _StructuredLogBase(TypedDict):
    component: LogComponent


class StructuredLogExtra(_StructuredLogBase, total=False):
    """Keys shiftkit attaches to log records through ``extra``."""

    transformer: str
    container: str
    image: str
    path: str
    exit_code: int
    duration_ms: float
    details: Mapping[str, object]


class _StructuredLogKwargs(TypedDict, total=False):
    transformer: TransformerName | str
    container: ContainerID | str
    image: ImageName | str
    path: str | os.PathLike[str]
    exit_code: int
    duration_ms: float
    details: Mapping[str, object]


def structured_extra(
    component: LogComponent,
    **kwargs: Unpack[_StructuredLogKwargs],
) -> StructuredLogExtra:
    """Build the ``extra`` mapping for a log call.

    ``None`` values and empty ``details`` are dropped; paths are rendered with
    ``os.fspath`` and numeric fields are coerced.
    """
    fields = cast("Mapping[str, object]", kwargs)
    extra = cast("dict[str, object]", {"component": component})
    for name, convert in _FIELD_CONVERTERS.items():
        value = fields.get(name)
        if value is not None:
            extra[name] = convert(value)
    details = fields.get("details")
    if isinstance(details, Mapping) and details:
        extra["details"] = dict(cast("Mapping[str, object]", details))
    return cast("StructuredLogExtra", extra)


__all__ = [
    "CHILD_LOGGERS",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "ROOT_LOGGER_NAME",
    "JSONLogFormatter",
    "LogConfig",
    "StructuredLogExtra",
    "TextLogFormatter",
    "configure_logging",
    "structured_extra",
]
