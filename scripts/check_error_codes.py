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

"""Check that docs/EXCEPTIONS.md documents every registered error code.

Each table row in the guide pairs a code with an exception class name. The
script compares those rows against ``shiftkit._infra.error_codes`` and reports
codes that are undocumented, documented but unregistered, registered twice, or
documented under a different class name. It runs from a source checkout
without installing the package.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
DOC_PATH = REPO_ROOT / "docs" / "EXCEPTIONS.md"

_ROW = re.compile(r"^\|\s*(SK\d{3})\s*\|\s*`([A-Za-z_][A-Za-z0-9_]*)`")


def _report(message: str, *, error: bool = False) -> None:
    stream = sys.stderr if error else sys.stdout
    _ = stream.write(f"[shiftkit] {message}\n")


def registered_codes() -> dict[str, list[str]]:
    """Return registered codes mapped to the class names that use them."""
    src = str(REPO_ROOT / "src")
    if src not in sys.path:
        sys.path.insert(0, src)
    from shiftkit._infra.error_codes import error_code_catalog  # noqa: PLC0415

    by_code: dict[str, list[str]] = {}
    for qualified, code in error_code_catalog().items():
        by_code.setdefault(str(code), []).append(qualified.rsplit(".", 1)[-1])
    return by_code


def documented_codes(text: str) -> dict[str, str]:
    """Return ``{code: exception name}`` for every table row in ``text``."""
    rows: dict[str, str] = {}
    for line in text.splitlines():
        match = _ROW.match(line.strip())
        if match:
            rows[match.group(1)] = match.group(2)
    return rows


def compare(registry: Mapping[str, Sequence[str]], documented: Mapping[str, str]) -> list[str]:
    """Return one problem description per inconsistency, sorted by code."""
    problems: list[str] = []
    for code in sorted(registry.keys() | documented.keys()):
        names = registry.get(code, ())
        doc_name = documented.get(code)
        if len(names) > 1:
            problems.append(f"{code} is registered for several classes: {', '.join(sorted(names))}")
        if doc_name is None:
            problems.append(f"{code} ({', '.join(names)}) is not documented")
        elif not names:
            problems.append(f"{code} is documented for {doc_name} but not registered")
        elif doc_name not in names:
            problems.append(f"{code} is documented for {doc_name} but registered for {names[0]}")
    return problems


def main(argv: Sequence[str] | None = None) -> int:
    """Return ``0`` when the registry and the guide agree, ``1`` otherwise."""
    if argv:
        _report("arguments are ignored")
    try:
        text = DOC_PATH.read_text(encoding="utf-8")
    except OSError as exc:
        _report(f"cannot read {DOC_PATH}: {exc}", error=True)
        return 1
    problems = compare(registered_codes(), documented_codes(text))
    for problem in problems:
        _report(problem, error=True)
    if problems:
        return 1
    _report("error code registry and documentation are in sync")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
