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

"""Interpreter-version shims.

shiftkit supports Python 3.10 onwards. Names that moved into the standard
library later (``StrEnum``, ``tomllib``, ``UTC``, ``Self``, ``override`` and
friends) are imported from here so version branches live in one place.
"""

from __future__ import annotations

import sys
from datetime import timezone

if sys.version_info >= (3, 12):
    from typing import TypedDict, override
else:
    from typing_extensions import TypedDict, override

if sys.version_info >= (3, 11):
    import tomllib
    from enum import StrEnum
    from typing import Self, Unpack
else:
    from enum import Enum

    import tomli as tomllib
    from typing_extensions import Self, Unpack

    class StrEnum(str, Enum):
        """String-valued enum whose ``str()`` is the member value."""

        @override
        def __str__(self) -> str:
            return str(self.value)


UTC = timezone.utc

__all__ = [
    "UTC",
    "Self",
    "StrEnum",
    "TypedDict",
    "Unpack",
    "override",
    "tomllib",
]
