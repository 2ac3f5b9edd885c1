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

from datetime import datetime, timedelta, timezone

import pytest

from reproducible_strip.archive.timestamps import (
    to_dos_date_time,
    to_ntfs_filetime,
    wall_clock,
)


class TestDosDateTime:
    @pytest.mark.parametrize(
        "dt, expected",
        [
            (datetime(2000, 1, 1), (2000, 1, 1, 0, 0, 0)),
            (datetime(2024, 2, 29, 23, 59, 59, 999999), (2024, 2, 29, 23, 59, 58)),
            (datetime(1980, 1, 1), (1980, 1, 1, 0, 0, 0)),
            (datetime(2107, 12, 31, 23, 59, 58), (2107, 12, 31, 23, 59, 58)),
            # wall-clock fields are used as is, no conversion to UTC
            (
                datetime(2010, 6, 15, 1, 2, 3, tzinfo=timezone(timedelta(hours=-8))),
                (2010, 6, 15, 1, 2, 2),
            ),
        ],
    )
    def test_to_dos_date_time(self, dt: datetime, expected):
        assert to_dos_date_time(dt) == expected

    @pytest.mark.parametrize(
        "dt", [datetime(1979, 12, 31, 23, 59, 59), datetime(2108, 1, 1)]
    )
    def test_out_of_range(self, dt: datetime):
        with pytest.raises(ValueError, match="not representable"):
            to_dos_date_time(dt)

    def test_wall_clock(self):
        _aware = datetime(2010, 6, 15, 1, 2, 3, tzinfo=timezone.utc)
        assert wall_clock(_aware) == datetime(2010, 6, 15, 1, 2, 3)
        assert wall_clock(_aware).tzinfo is None


class TestNtfsFiletime:
    @pytest.mark.parametrize(
        "dt, expected",
        [
            (datetime(1601, 1, 1), 0),
            (datetime(1970, 1, 1), 116444736000000000),
            (datetime(2000, 1, 1, microsecond=500), 125911584000000000),
            # same 2-second resolution as the DOS datetime
            (datetime(2000, 1, 1, 0, 0, 1), 125911584000000000),
            (datetime(2000, 1, 1, 0, 0, 3), 125911584020000000),
            (
                datetime(2000, 1, 1, tzinfo=timezone(timedelta(hours=9))),
                125911584000000000,
            ),
        ],
    )
    def test_to_ntfs_filetime(self, dt: datetime, expected: int):
        assert to_ntfs_filetime(dt) == expected

    def test_same_instant_as_dos_date_time(self):
        _dt = datetime(2010, 6, 15, 12, 30, 45)
        _filetime_of_dos = to_ntfs_filetime(datetime(*to_dos_date_time(_dt)))
        assert to_ntfs_filetime(_dt) == _filetime_of_dos
