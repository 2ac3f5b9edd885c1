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
"""The content stripper capability shared by all strippers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from tempfile import TemporaryDirectory

from reproducible_strip.common import StrOrPath, tmp_fname


class ContentStripper(ABC):
    """Normalize a byte stream of one content type into a canonical byte stream.

    Implementations must be deterministic: the same input bytes always yield the
        same output bytes, on any host, in any timezone or locale.

    Raises:
        FormatError: if the input is not parseable as the content type.
        ArchiveIOError: if the input or output cannot be accessed.
    """

    tmp_dir: StrOrPath | None = None

    @abstractmethod
    def strip(self, src: StrOrPath, dst: StrOrPath) -> None:
        """Strip the content of file <src> and write the result to file <dst>."""
        raise NotImplementedError

    def strip_bytes(
        self, data: bytes, *, suffix: str = "", tmp_dir: StrOrPath | None = None
    ) -> bytes:
        """Strip in-memory <data>.

        The default implementation goes through the file form with a pair of temporary
            files named with <suffix>, placed under <tmp_dir> if set, else under
            `self.tmp_dir`. The temporary files are always removed on return.
        """
        if tmp_dir is None:
            tmp_dir = self.tmp_dir

        with TemporaryDirectory(prefix="strip_", dir=tmp_dir) as _tmp:
            _tmp_dir = Path(_tmp)
            _src = _tmp_dir / tmp_fname("src", suffix=suffix)
            _dst = _tmp_dir / tmp_fname("dst", suffix=suffix)

            _src.write_bytes(data)
            self.strip(_src, _dst)
            return _dst.read_bytes()
