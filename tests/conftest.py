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
"""Shared test fixtures for reproducible-strip tests."""

from __future__ import annotations

import io
import struct
from pathlib import Path
from typing import Optional
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

import pytest

MANIFEST_CONTENT = (
    b"Manifest-Version: 1.0\r\n"
    b"Built-By: alice\r\n"
    b"Build-Jdk: 11\r\n"
    b"Main-Class: org.example.Main\r\n"
    b"\r\n"
)

# entries of a typical small jar: (name, content), None content for directory
JAR_ENTRIES: list[tuple[str, Optional[bytes]]] = [
    ("b/c.txt", b"content of c\n" * 16),
    ("a.txt", b"content of a\n" * 16),
    ("META-INF/", None),
    ("META-INF/MANIFEST.MF", MANIFEST_CONTENT),
    ("b/", None),
]

ENTRY_DEFAULTS = dict(
    date_time=(2021, 3, 14, 15, 9, 26),
    file_mode=0o664,
    dir_mode=0o775,
    extra=b"",
    compress_type=ZIP_DEFLATED,
    create_version=20,
    extract_version=20,
)


def extended_timestamp_extra(mtime: int) -> bytes:
    """Build an `UT` extended timestamp extra record with mtime only."""
    return struct.pack("<HHBl", 0x5455, 5, 1, mtime)


def make_archive(
    fpath: Path, entries: list[tuple[str, Optional[bytes]]], **kwargs
) -> Path:
    """Create an archive at <fpath> with <entries> in the given order.

    See ENTRY_DEFAULTS for the accepted <kwargs>.
    """
    fpath.write_bytes(archive_bytes(entries, **kwargs))
    return fpath


def write_entries(
    zipf: ZipFile,
    entries: list[tuple[str, Optional[bytes]]],
    *,
    date_time: tuple[int, int, int, int, int, int],
    file_mode: int,
    dir_mode: int,
    extra: bytes,
    compress_type: int,
    create_version: int,
    extract_version: int,
) -> None:
    for _name, _content in entries:
        _zinfo = ZipInfo(_name, date_time=date_time)
        _zinfo.extra = extra
        _zinfo.create_system = 3
        _zinfo.create_version = create_version
        _zinfo.extract_version = extract_version
        if _content is None:
            _zinfo.external_attr = ((0o040000 | dir_mode) << 16) | 0x10
            zipf.writestr(_zinfo, b"")
        else:
            _zinfo.compress_type = compress_type
            _zinfo.external_attr = (0o100000 | file_mode) << 16
            zipf.writestr(_zinfo, _content)


def archive_bytes(entries: list[tuple[str, Optional[bytes]]], **kwargs) -> bytes:
    """Same as make_archive, but build the archive in memory."""
    _buffer = io.BytesIO()
    with ZipFile(_buffer, mode="w") as zipf:
        write_entries(zipf, entries, **{**ENTRY_DEFAULTS, **kwargs})
    return _buffer.getvalue()


@pytest.fixture
def jar_file(tmp_path: Path) -> Path:
    """A small jar with unordered entries, volatile timestamps and permissions."""
    return make_archive(
        tmp_path / "input.jar", JAR_ENTRIES, extra=extended_timestamp_extra(1615734566)
    )
