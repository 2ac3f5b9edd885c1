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
"""Strip the generation date comment from Java properties files.

Build tools like maven write a comment line holding the capture date when
    generating properties files, i.e., `META-INF/maven/<g>/<a>/pom.properties`:

    #Generated by Maven
    #Mon Jan 01 00:00:00 UTC 2024
    version=1.0
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from reproducible_strip.common import StrOrPath
from reproducible_strip.errors import ArchiveIOError
from reproducible_strip.stripper import ContentStripper

logger = logging.getLogger(__name__)

# the `java.util.Date.toString` rendering
DATE_COMMENT_PATTERN = re.compile(
    rb"[#!]\s*[A-Z][a-z]{2} [A-Z][a-z]{2} [ \d]\d "
    rb"\d{2}:\d{2}:\d{2}( [\w+\-:/]+)? \d{4}\s*"
)
_LINE_WITH_SEP = re.compile(rb"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+$")


class PropertiesStripper(ContentStripper):
    """Remove date comment lines, all other lines are kept byte for byte."""

    def strip_bytes(
        self, data: bytes, *, suffix: str = "", tmp_dir: StrOrPath | None = None
    ) -> bytes:
        _res = bytearray()
        for _match in _LINE_WITH_SEP.finditer(data):
            _line = _match.group()
            if DATE_COMMENT_PATTERN.fullmatch(_line.rstrip(b"\r\n")):
                logger.debug(f"drop date comment: {_line!r}")
                continue
            _res += _line
        return bytes(_res)

    def strip(self, src: StrOrPath, dst: StrOrPath) -> None:
        try:
            _data = Path(src).read_bytes()
            Path(dst).write_bytes(self.strip_bytes(_data))
        except OSError as e:
            raise ArchiveIOError(f"failed to strip {src} to {dst}: {e!r}") from e
