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
"""Parsing and normalizing the extra field records of ZIP entries.

See https://pkware.cachefly.net/webdocs/casestudies/APPNOTE.TXT chapter 4.5
    for more details about the extra field.
"""

from __future__ import annotations

import struct
from typing import Iterable, NamedTuple

ZIP64_EXTRA_ID = 0x0001
NTFS_EXTRA_ID = 0x000A
EXTENDED_TIMESTAMP_EXTRA_ID = 0x5455

STRIPPED_EXTRA_IDS = frozenset([EXTENDED_TIMESTAMP_EXTRA_ID, ZIP64_EXTRA_ID])
"""Records that are removed entirely.

Zip64 record is structural, the writer adds it back when the entry requires it.
"""

_EXTRA_HEADER = struct.Struct("<HH")
_NTFS_ATTR_TIMESTAMPS_TAG = 1
_NTFS_TIMESTAMPS = struct.Struct("<QQQ")  # mtime, atime, ctime


class ExtraRecord(NamedTuple):
    header_id: int
    payload: bytes

    def pack(self) -> bytes:
        return _EXTRA_HEADER.pack(self.header_id, len(self.payload)) + self.payload


def parse_extra(extra: bytes) -> tuple[list[ExtraRecord], bytes]:
    """Parse the extra field into records.

    Returns:
        A tuple of (records, trailing), trailing holds the bytes at the end
            that are too short to be parsed as a record, kept as is.
    """
    records: list[ExtraRecord] = []
    _offset, _total = 0, len(extra)
    while _offset + _EXTRA_HEADER.size <= _total:
        _header_id, _size = _EXTRA_HEADER.unpack_from(extra, _offset)
        _start = _offset + _EXTRA_HEADER.size
        if _start + _size > _total:
            break
        records.append(ExtraRecord(_header_id, extra[_start : _start + _size]))
        _offset = _start + _size
    return records, extra[_offset:]


def pack_extra(records: Iterable[ExtraRecord], trailing: bytes = b"") -> bytes:
    return b"".join(_record.pack() for _record in records) + trailing


def rewrite_ntfs_timestamps(payload: bytes, filetime: int) -> bytes:
    """Set mtime, atime and ctime of the NTFS record to <filetime>.

    Layout: 4 bytes reserved, then attributes of (tag: u16, size: u16, data).
    Attributes other than the timestamps one are kept as is.
    """
    _res = bytearray(payload[:4])
    _offset, _total = 4, len(payload)
    while _offset + _EXTRA_HEADER.size <= _total:
        _tag, _size = _EXTRA_HEADER.unpack_from(payload, _offset)
        _start = _offset + _EXTRA_HEADER.size
        if _start + _size > _total:
            break
        _data = payload[_start : _start + _size]
        if _tag == _NTFS_ATTR_TIMESTAMPS_TAG and len(_data) == _NTFS_TIMESTAMPS.size:
            _data = _NTFS_TIMESTAMPS.pack(filetime, filetime, filetime)
        _res += _EXTRA_HEADER.pack(_tag, _size) + _data
        _offset = _start + _size
    _res += payload[_offset:]
    return bytes(_res)


def normalize_extra(extra: bytes, *, filetime: int) -> bytes:
    """Strip extended timestamp records, and fix the timestamps in NTFS records.

    All other records are kept as is, in the original order.
    """
    if not extra:
        return extra

    records, trailing = parse_extra(extra)
    _res: list[ExtraRecord] = []
    for _record in records:
        if _record.header_id in STRIPPED_EXTRA_IDS:
            continue
        if _record.header_id == NTFS_EXTRA_ID:
            _record = ExtraRecord(
                NTFS_EXTRA_ID, rewrite_ntfs_timestamps(_record.payload, filetime)
            )
        _res.append(_record)
    return pack_extra(_res, trailing)
