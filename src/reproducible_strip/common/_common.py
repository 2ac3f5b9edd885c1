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

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

StrOrPath = Union[str, Path]

DEFAULT_TMP_FNAME_PREFIX = "tmp"


def tmp_fname(
    hint: str = "",
    prefix: str = DEFAULT_TMP_FNAME_PREFIX,
    suffix: str = "",
    sep: str = "_",
    *,
    random_bytes: int = 4,
) -> str:
    return f"{prefix}{sep}{hint}{sep}{os.urandom(random_bytes).hex()}{suffix}"


def entry_suffix(name: str) -> str:
    """Get the last file extension of an archive entry name, with the leading dot.

    Only the last path component is considered, so `a.d/b` has no suffix.
    """
    _basename = name.rstrip("/").rsplit("/", maxsplit=1)[-1]
    _, _dot, _ext = _basename.rpartition(".")
    if not _dot or not _ext:
        return ""
    return f".{_ext}"
