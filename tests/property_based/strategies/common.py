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

"""Hypothesis strategies shared by the property-based tests."""

from __future__ import annotations

import hypothesis.strategies as st

from shiftkit.core.types import Artifact

__all__ = ["loose_detect_objects", "path_segments", "relative_dirs", "services_maps"]

_ALPHABET = tuple("abcdefghijklmnopqrstuvwxyz0123456789-_")

_json_scalars = st.one_of(
    st.integers(min_value=-(2**53), max_value=2**53),
    st.booleans(),
    st.floats(allow_nan=False, allow_infinity=False, width=32),
    st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=12),
)


def path_segments() -> st.SearchStrategy[str]:
    return st.text(alphabet=_ALPHABET, min_size=1, max_size=8).filter(lambda value: value not in {".", ".."})


def relative_dirs() -> st.SearchStrategy[tuple[str, ...]]:
    return st.lists(path_segments(), min_size=1, max_size=3).map(tuple)


def loose_detect_objects() -> st.SearchStrategy[dict[str, object]]:
    """JSON objects that can never validate as a services mapping.

    Every value is a scalar or a flat object, so no entry can be read as a
    list of artifacts.
    """
    values = st.one_of(
        _json_scalars,
        st.dictionaries(st.text(alphabet=_ALPHABET, max_size=6), _json_scalars, max_size=3),
    )
    return st.dictionaries(st.text(alphabet=_ALPHABET, max_size=8), values, min_size=1, max_size=5)


def _artifacts(*, with_paths: st.SearchStrategy[bool]) -> st.SearchStrategy[Artifact]:
    return st.builds(
        lambda name, has_paths, rel: Artifact(
            name=name,
            paths={"Other": ["/".join(rel)]} if has_paths else {},
        ),
        st.text(alphabet=_ALPHABET, max_size=6),
        with_paths,
        relative_dirs(),
    )


def services_maps() -> st.SearchStrategy[dict[str, list[Artifact]]]:
    return st.dictionaries(
        st.text(alphabet=_ALPHABET, max_size=6),
        st.lists(_artifacts(with_paths=st.booleans()), max_size=4),
        max_size=4,
    )
