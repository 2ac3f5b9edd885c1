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
"""Timestamp encodings used by the ZIP format.

The DOS datetime field of a ZIP entry is a plain wall-clock value, the writing
    process's timezone is part of how a datetime becomes those fields. To get the
    same bytes on every host, the configured wall-clock date and time is written as is,
    as if the local timezone were UTC, and never converted through the host timezone.
"""

from __future__ import annotations

from datetime import datetime, timezone

DOS_MIN_YEAR = 1980
DOS_MAX_YEAR = 2107

NTFS_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)
NTFS_TICKS_PER_SECOND = 10_000_000

DosDateTime = tuple[int, int, int, int, int, int]


def wall_clock(dt: datetime) -> datetime:
    """Get the naive wall-clock fields of <dt>, tzinfo is dropped without conversion."""
    return dt.replace(tzinfo=None)


def to_dos_date_time(dt: datetime) -> DosDateTime:
    """Convert <dt> to the `ZipInfo.date_time` tuple.

    Seconds are truncated to the 2-second resolution of the DOS format.

    Raises:
        ValueError: if <dt> is out of the range DOS datetime can represent.
    """
    _dt = wall_clock(dt)
    if not DOS_MIN_YEAR <= _dt.year <= DOS_MAX_YEAR:
        raise ValueError(
            f"{dt} is not representable as DOS datetime({DOS_MIN_YEAR}~{DOS_MAX_YEAR})"
        )
    return (_dt.year, _dt.month, _dt.day, _dt.hour, _dt.minute, _dt.second // 2 * 2)


def to_ntfs_filetime(dt: datetime) -> int:
    """Convert <dt> to NTFS FILETIME, 100ns ticks since 1601-01-01.

    Seconds are truncated the same way as `to_dos_date_time`, so both timestamps
        of an entry hold the same instant.
    """
    _dt = wall_clock(dt)
    _dt = _dt.replace(second=_dt.second // 2 * 2, microsecond=0, tzinfo=timezone.utc)
    return int((_dt - NTFS_EPOCH).total_seconds()) * NTFS_TICKS_PER_SECOND
