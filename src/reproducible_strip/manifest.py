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
"""Strip volatile headers from JAR manifest files.

Manifest format in short:
1. a header line is `<name>: <value>`, no line is longer than 72 bytes.
2. a line starting with a single space continues the value of the previous header.
3. blank lines separate sections, the first section is the main section, others
    are per-entry sections.

See https://docs.oracle.com/en/java/javase/21/docs/specs/jar/jar.html#jar-manifest
    for more details.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import NamedTuple, Optional

from reproducible_strip.common import StrOrPath
from reproducible_strip.config import (
    DEFAULT_MANIFEST_POLICY,
    HEADER_NAME_PATTERN,
    HeaderAction,
    ManifestPolicy,
)
from reproducible_strip.errors import ArchiveIOError, FormatError
from reproducible_strip.stripper import ContentStripper

logger = logging.getLogger(__name__)

MAX_LINE_BYTES = 72
LINE_SEP = b"\r\n"

_LINE_SPLIT = re.compile(rb"\r\n|\r|\n")
_HEADER_NAME_BYTES = re.compile(HEADER_NAME_PATTERN.pattern.encode())


class Header(NamedTuple):
    name: str
    value: str


class Manifest(NamedTuple):
    main: list[Header]
    sections: list[list[Header]]


def _decode_header(name: bytes, value: bytes, lineno: int) -> Header:
    try:
        return Header(name.decode("ascii"), value.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise FormatError(f"line {lineno}: header is not valid UTF-8: {e}") from None


def parse_manifest(data: bytes) -> Manifest:
    """Parse manifest <data>.

    Continuation lines are joined as bytes before decoding, as some tools split
        the lines in the middle of a multi-byte character.

    Raises:
        FormatError: on invalid header line or encoding.
    """
    # a list of [name, value, first lineno] of each section
    main: list[list] = []
    sections: list[list[list]] = []
    _current = main
    for lineno, line in enumerate(_LINE_SPLIT.split(data), start=1):
        if not line:
            _current = []
            sections.append(_current)
            continue

        if line.startswith(b" "):
            if not _current:
                raise FormatError(f"line {lineno}: continuation line without header")
            _current[-1][1] += line[1:]
            continue

        _name, _sep, _value = line.partition(b":")
        if not _sep or not _HEADER_NAME_BYTES.fullmatch(_name):
            raise FormatError(f"line {lineno}: invalid header line: {line[:80]!r}")
        if _value.startswith(b" "):
            _value = _value[1:]
        elif _value:
            raise FormatError(f"line {lineno}: missing space after header name")
        _current.append([_name, _value, lineno])

    def _decode(_section: list[list]) -> list[Header]:
        return [_decode_header(*_raw) for _raw in _section]

    return Manifest(
        main=_decode(main),
        sections=[_decode(_section) for _section in sections if _section],
    )


def fold_header(header: Header) -> bytes:
    """Serialize <header>, folding it into lines no longer than 72 bytes."""
    _line = f"{header.name}: {header.value}".encode("utf-8")
    _res, _limit = bytearray(), MAX_LINE_BYTES
    while True:
        _cut = min(_limit, len(_line))
        # never split a multi-byte character
        while 0 < _cut < len(_line) and _line[_cut] & 0xC0 == 0x80:
            _cut -= 1
        _res += _line[:_cut] + LINE_SEP
        _line = _line[_cut:]
        if not _line:
            return bytes(_res)
        _res += b" "
        _limit = MAX_LINE_BYTES - 1


def serialize_manifest(manifest: Manifest) -> bytes:
    _res = bytearray()
    for _section in (manifest.main, *manifest.sections):
        for _header in _section:
            _res += fold_header(_header)
        _res += LINE_SEP
    return bytes(_res)


def apply_policy(headers: list[Header], policy: ManifestPolicy) -> list[Header]:
    _res: list[Header] = []
    for _header in headers:
        _action, _constant = policy.action_for(_header.name)
        if _action is HeaderAction.DROP:
            logger.debug(f"drop manifest header {_header.name}")
            continue
        if _action is HeaderAction.REPLACE:
            assert _constant is not None
            logger.debug(f"replace value of manifest header {_header.name}")
            _header = Header(_header.name, _constant)
        _res.append(_header)
    return _res


class ManifestStripper(ContentStripper):
    """Remove or rewrite the volatile headers of a manifest.

    Non-volatile headers are kept in their original relative order. The output
        always uses CRLF line ending and 72 bytes line folding.
    """

    def __init__(self, policy: Optional[ManifestPolicy] = None) -> None:
        self.policy = DEFAULT_MANIFEST_POLICY if policy is None else policy

    def strip_bytes(
        self, data: bytes, *, suffix: str = "", tmp_dir: StrOrPath | None = None
    ) -> bytes:
        if not data.strip(b"\r\n"):
            return data  # no manifest content, pass through

        _manifest = parse_manifest(data)
        return serialize_manifest(
            Manifest(
                main=apply_policy(_manifest.main, self.policy),
                sections=[
                    _stripped
                    for _section in _manifest.sections
                    if (_stripped := apply_policy(_section, self.policy))
                ],
            )
        )

    def strip(self, src: StrOrPath, dst: StrOrPath) -> None:
        src, dst = Path(src), Path(dst)
        if not src.is_file():
            logger.debug(f"{src} not found, skip stripping manifest")
            return

        try:
            _data = src.read_bytes()
        except OSError as e:
            raise ArchiveIOError(f"failed to read manifest {src}: {e!r}") from e

        _stripped = self.strip_bytes(_data)
        try:
            dst.write_bytes(_stripped)
        except OSError as e:
            raise ArchiveIOError(f"failed to write manifest {dst}: {e!r}") from e
