# Copyright 2025 TIER IV, INC. All rights reserved.
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
"""The canonical order of archive entries.

This is mostly an ordinal order of the entry names, with the exception that
    the pinned leading entries are placed first (if they exist), in the order
    they are pinned. Some consumers of JAR files require `META-INF/MANIFEST.MF`
    and `META-INF/` to be the first 2 entries.

Names compare by unicode code point, which is independent of locale and of the
    enumeration order of the source filesystem.
"""

from __future__ import annotations

from typing import Iterable

from reproducible_strip.archive import MANIFEST_FNAME, META_INF_DIR

PINNED_LEADING_ENTRIES: tuple[str, ...] = (MANIFEST_FNAME, META_INF_DIR)


def canonical_sort_key(
    name: str, *, pinned: tuple[str, ...] = PINNED_LEADING_ENTRIES
) -> tuple[int, str]:
    try:
        return pinned.index(name), name
    except ValueError:
        return len(pinned), name


def sort_entry_names(
    names: Iterable[str], *, pinned: tuple[str, ...] = PINNED_LEADING_ENTRIES
) -> list[str]:
    return sorted(names, key=lambda _name: canonical_sort_key(_name, pinned=pinned))
