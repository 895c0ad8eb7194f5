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

"""Stable error code registry used across shiftkit."""

from __future__ import annotations

from typing import TYPE_CHECKING, NewType

from shiftkit.config.models import (
    ConfigFieldTypeError,
    ConfigReadError,
    ConfigValidationError,
    InvalidTransformerConfigError,
)
from shiftkit.exceptions import (
    ContainerCopyError,
    ContainerEngineError,
    ContainerEngineUnavailableError,
    ContainerNotFoundError,
    ContainerNotRunningError,
    ContainerPathNotFoundError,
    ContainerRunError,
    EnvironmentNotActiveError,
    ExecError,
    ExecutionEnvironmentError,
    ImageBuildError,
    ImageNotFoundError,
    PlatformNotSupportedError,
    ResourceNotFoundError,
    ShiftkitError,
    ShiftkitTypeError,
    ShiftkitValidationError,
    TransformerError,
    TransformerInitError,
    TransformerStateError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

ErrorCode = NewType("ErrorCode", str)

_ERROR_CODES: dict[type[BaseException], ErrorCode] = {
    ShiftkitError: ErrorCode("SK000"),
    ShiftkitValidationError: ErrorCode("SK100"),
    ShiftkitTypeError: ErrorCode("SK101"),
    ConfigValidationError: ErrorCode("SK110"),
    ConfigFieldTypeError: ErrorCode("SK111"),
    ConfigReadError: ErrorCode("SK112"),
    InvalidTransformerConfigError: ErrorCode("SK113"),
    ContainerEngineUnavailableError: ErrorCode("SK200"),
    ContainerEngineError: ErrorCode("SK201"),
    ResourceNotFoundError: ErrorCode("SK202"),
    ImageNotFoundError: ErrorCode("SK203"),
    ContainerNotFoundError: ErrorCode("SK204"),
    ContainerPathNotFoundError: ErrorCode("SK205"),
    ContainerNotRunningError: ErrorCode("SK206"),
    ImageBuildError: ErrorCode("SK207"),
    ContainerRunError: ErrorCode("SK208"),
    ContainerCopyError: ErrorCode("SK209"),
    ExecutionEnvironmentError: ErrorCode("SK300"),
    EnvironmentNotActiveError: ErrorCode("SK301"),
    ExecError: ErrorCode("SK302"),
    TransformerError: ErrorCode("SK400"),
    TransformerInitError: ErrorCode("SK401"),
    PlatformNotSupportedError: ErrorCode("SK402"),
    TransformerStateError: ErrorCode("SK403"),
}


def error_code_for(exc: BaseException) -> ErrorCode:
    """Return a stable error code for a structured shiftkit exception.

    Args:
        exc: Exception instance raised by shiftkit code paths.

    Returns:
        Error code mapped from the exception's class hierarchy.
    """
    for cls in type(exc).__mro__:
        code = _ERROR_CODES.get(cls)
        if code:
            return code
    return ErrorCode("SK000")


def error_code_catalog() -> Mapping[str, ErrorCode]:
    """Return a stable mapping of fully-qualified exception names to error codes.

    Intended for diagnostics, tests, and documentation generation - avoids
    exposing the private mapping while keeping a single source of truth.

    Returns:
        Mapping of `<module>.<ExceptionName>` strings to error codes.
    """
    result: dict[str, ErrorCode] = {}
    for exc_type, code in _ERROR_CODES.items():
        key = f"{exc_type.__module__}.{exc_type.__name__}"
        result[key] = code
    return result


__all__ = ["ErrorCode", "error_code_catalog", "error_code_for"]
