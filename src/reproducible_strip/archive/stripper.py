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
"""The archive stripper, rebuilds an archive into a reproducible form.

Entries are normalized concurrently by a pool of worker threads, while the
    archive is written sequentially by the calling thread in the canonical order.
"""

from __future__ import annotations

import logging
import re
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union
from zipfile import DEFAULT_VERSION, ZipInfo

from typing_extensions import Self

from reproducible_strip.archive import (
    CREATE_SYSTEM_UNIX,
    FIXED_DIR_EXTERNAL_ATTR,
    FIXED_FILE_EXTERNAL_ATTR,
)
from reproducible_strip.archive.codec import ArchiveReader, ArchiveWriter
from reproducible_strip.archive.extra_fields import normalize_extra
from reproducible_strip.archive.ordering import sort_entry_names
from reproducible_strip.archive.timestamps import (
    DosDateTime,
    to_dos_date_time,
    to_ntfs_filetime,
)
from reproducible_strip.common import StrOrPath, entry_suffix
from reproducible_strip.config import ArchiveStripperConfig, build_config
from reproducible_strip.errors import ArchiveIOError, ConfigurationError, FormatError
from reproducible_strip.stripper import ContentStripper

logger = logging.getLogger(__name__)

NamePattern = Union[str, re.Pattern[str]]
SubStripper = Tuple[re.Pattern[str], ContentStripper]

# other general purpose flags are either recomputed by the writer or tool specific
ENCRYPTED_FLAG = 0x01


def normalized_zipinfo(
    src: ZipInfo, *, date_time: DosDateTime, filetime: int
) -> ZipInfo:
    """Create a new ZipInfo for <src>, with only the reproducible fields carried over."""
    _zinfo = ZipInfo(src.filename, date_time=date_time)
    _zinfo.compress_type = src.compress_type
    _zinfo.comment = src.comment
    _zinfo.extra = normalize_extra(src.extra, filetime=filetime)
    _zinfo.create_system = src.create_system
    # version fields are recomputed by the writer from the method and zip64 needs
    _zinfo.create_version = DEFAULT_VERSION
    _zinfo.flag_bits = src.flag_bits & ENCRYPTED_FLAG
    _zinfo.internal_attr = src.internal_attr
    _zinfo.external_attr = src.external_attr
    _zinfo.CRC = src.CRC
    _zinfo.file_size = src.file_size
    _zinfo.compress_size = src.compress_size
    return _zinfo


def fix_external_attributes(zinfo: ZipInfo) -> None:
    """Overwrite the permission bits, the result only depends on the entry type.

    ZIP external file attributes:
        TTTTsstrwxrwxrwx0000000000ADVSHR
        ^^^^____________________________ file type(file: 1000, dir: 0100)
            ^^^_________________________ setuid, setgid, sticky
               ^^^^^^^^^________________ unix permissions
                                  ^^^^^^ DOS attributes
    """
    if zinfo.is_dir():
        zinfo.external_attr = FIXED_DIR_EXTERNAL_ATTR  # rwxr_xr_x
    else:
        zinfo.external_attr = FIXED_FILE_EXTERNAL_ATTR  # rw_r__r__
    zinfo.create_system = CREATE_SYSTEM_UNIX


@dataclass
class NormalizedEntry:
    zinfo: ZipInfo
    payload: bytes
    raw: bool
    """If True, payload is the raw compressed bytes copied from the input."""

    def write_to(self, writer: ArchiveWriter) -> None:
        if self.raw:
            writer.write_raw_entry(self.zinfo, self.payload)
        else:
            writer.write_entry(self.zinfo, self.payload)


class ArchiveStripper(ContentStripper):
    """Strip non-reproducible data from a ZIP-family archive.

    The archive is rebuilt with the entries in canonical order, entry timestamps set
        to the reference timestamp, extended timestamp extra records removed, and
        optionally with fixed permission bits.

    Content of entries whose name fully matches a registered pattern is stripped
        with the stripper registered for that pattern, the first match wins. A stripper
        can register itself to recursively strip nested archives.
    """

    def __init__(
        self,
        config: Optional[ArchiveStripperConfig] = None,
        sub_strippers: Iterable[tuple[NamePattern, ContentStripper]] = (),
        **kwargs,
    ) -> None:
        if config is None:
            config = build_config(ArchiveStripperConfig, **kwargs)
        elif kwargs:
            raise ConfigurationError(f"{config=} is set, but also get {kwargs=}")

        self.config = config
        self.tmp_dir = config.tmp_dir

        # NOTE: convert once here, every entry gets exactly the same encoded timestamp
        self._date_time = to_dos_date_time(config.reference_timestamp)
        self._filetime = to_ntfs_filetime(config.reference_timestamp)

        self._sub_strippers: list[SubStripper] = []
        for _pattern, _stripper in sub_strippers:
            self.add_stripper(_pattern, _stripper)

    def add_stripper(self, pattern: NamePattern, stripper: ContentStripper) -> Self:
        """Register <stripper> for the entries which names fully match <pattern>.

        Raises:
            ConfigurationError: if <pattern> is not a valid regex, or <stripper> is
                not a ContentStripper.
        """
        if not isinstance(stripper, ContentStripper):
            raise ConfigurationError(f"{stripper!r} is not a ContentStripper")

        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as e:
                raise ConfigurationError(f"invalid pattern {pattern!r}: {e}") from e
        elif not (isinstance(pattern, re.Pattern) and isinstance(pattern.pattern, str)):
            raise ConfigurationError(f"invalid pattern {pattern!r}")

        self._sub_strippers.append((pattern, stripper))
        return self

    @property
    def sub_strippers(self) -> tuple[SubStripper, ...]:
        return tuple(self._sub_strippers)

    def find_stripper(self, name: str) -> ContentStripper | None:
        for _pattern, _stripper in self._sub_strippers:
            if _pattern.fullmatch(name):
                return _stripper

    def is_executable_archive(self, fpath: StrOrPath) -> bool:
        return Path(fpath).suffix.lower() in self.config.executable_suffixes

    def strip(self, src: StrOrPath, dst: StrOrPath) -> None:
        """Strip archive <src> into a new archive at <dst>.

        On failure, <dst> might be left partially written and must be discarded.

        Raises:
            ArchiveIOError: failed to read <src> or write <dst>.
            FormatError: a sub-stripper rejected an entry, or <src> has duplicated entries.
        """
        _StripJob(self, Path(src), Path(dst)).process()


class _StripJob:
    """States of one ArchiveStripper.strip call."""

    def __init__(self, stripper: ArchiveStripper, src: Path, dst: Path) -> None:
        self._stripper = stripper
        self._config = stripper.config
        self.src = src
        self.dst = dst

        self._fix_attributes = (
            self._config.fix_external_attributes
            and stripper.is_executable_archive(src)
        )

        self._thread_local = threading.local()
        self._readers_lock = threading.Lock()
        self._readers: list[ArchiveReader] = []

    def _reader_at_thread(self) -> ArchiveReader:
        _reader: ArchiveReader | None = getattr(self._thread_local, "reader", None)
        if _reader is None:
            _reader = ArchiveReader(self.src)
            with self._readers_lock:
                self._readers.append(_reader)
            self._thread_local.reader = _reader
        return _reader

    def _close_readers(self) -> None:
        with self._readers_lock:
            for _reader in self._readers:
                _reader.close()
            self._readers.clear()

    def _list_entries_in_order(self) -> list[ZipInfo]:
        _entries: dict[str, ZipInfo] = {}
        with ArchiveReader(self.src) as _reader:
            for _zinfo in _reader.list_entries():
                if _zinfo.filename in _entries:
                    raise FormatError(
                        f"{self.src}: duplicated entry {_zinfo.filename!r}"
                    )
                _entries[_zinfo.filename] = _zinfo
        return [_entries[_name] for _name in sort_entry_names(_entries)]

    def _normalize_entry_at_thread(self, src_zinfo: ZipInfo) -> NormalizedEntry:
        _name = src_zinfo.filename
        _zinfo = normalized_zipinfo(
            src_zinfo,
            date_time=self._stripper._date_time,
            filetime=self._stripper._filetime,
        )
        if self._fix_attributes:
            fix_external_attributes(_zinfo)

        _reader = self._reader_at_thread()
        _sub_stripper = None
        if not src_zinfo.is_dir():
            _sub_stripper = self._stripper.find_stripper(_name)

        if _sub_stripper is None:
            return NormalizedEntry(_zinfo, _reader.read_raw_entry(src_zinfo), raw=True)

        logger.debug(f"{self.src}: strip {_name} with {type(_sub_stripper).__name__}")
        _stripped = _sub_stripper.strip_bytes(
            _reader.read_entry(src_zinfo),
            suffix=entry_suffix(_name),
            tmp_dir=self._config.tmp_dir,
        )
        return NormalizedEntry(_zinfo, _stripped, raw=False)

    def process(self) -> int:
        """Strip the archive, return the number of entries written."""
        if self.src.resolve() == self.dst.resolve():
            raise ArchiveIOError(f"cannot strip {self.src} in place")

        logger.info(f"strip {self.src} to {self.dst} ...")
        _entries = self._list_entries_in_order()
        try:
            with ArchiveWriter(self.dst) as _writer, ThreadPoolExecutor(
                max_workers=self._config.max_workers,
                thread_name_prefix="archive_stripper",
            ) as pool:
                _pending: deque[Future[NormalizedEntry]] = deque()
                try:
                    for _zinfo in _entries:
                        _pending.append(
                            pool.submit(self._normalize_entry_at_thread, _zinfo)
                        )
                        if len(_pending) >= self._config.max_pending:
                            _pending.popleft().result().write_to(_writer)

                    while _pending:
                        _pending.popleft().result().write_to(_writer)
                except BaseException:
                    for _fut in _pending:
                        _fut.cancel()
                    raise
        finally:
            self._close_readers()

        logger.info(f"finish stripping {self.src}: {len(_entries)} entries written")
        return len(_entries)
