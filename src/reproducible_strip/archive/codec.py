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
"""Thin adapters over `zipfile` exposing the operations needed by the stripper.

Besides the normal decompressed read/write, entries can be read and written as
    raw compressed bytes, so that entries without content change are copied without
    recompression.
"""

from __future__ import annotations

import logging
import os
import struct
import zlib
from pathlib import Path
from zipfile import BadZipFile, ZipFile, ZipInfo

from reproducible_strip.common import StrOrPath
from reproducible_strip.errors import ArchiveIOError

logger = logging.getLogger(__name__)

# see https://pkware.cachefly.net/webdocs/casestudies/APPNOTE.TXT chapter 4.3.7
LOCAL_FILE_HEADER = struct.Struct("<4s2B4HL2L2H")
LOCAL_FILE_HEADER_MAGIC = b"PK\003\004"
_LFH_FILENAME_LENGTH = 10
_LFH_EXTRA_FIELD_LENGTH = 11

DATA_DESCRIPTOR_FLAG = 0x08

CODEC_ERRORS = (
    OSError,
    BadZipFile,
    EOFError,
    NotImplementedError,
    RuntimeError,
    zlib.error,
)


class ArchiveReader:
    """Helper class for reading the entries of an archive.

    This class is NOT safe for multi-thread, create separated instance
        for each worker thread if used in multi-threaded environment.
    """

    def __init__(self, fpath: StrOrPath) -> None:
        self.fpath = Path(fpath)
        try:
            self._f = ZipFile(fpath, mode="r")
        except (OSError, BadZipFile) as e:
            raise ArchiveIOError(f"failed to open archive {fpath}: {e!r}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        self._f.close()

    def list_entries(self) -> list[ZipInfo]:
        """List entries in the order of the central directory."""
        return self._f.infolist()

    def read_entry(self, zinfo: ZipInfo) -> bytes:
        """Read the decompressed content of the entry, CRC is verified."""
        try:
            with self._f.open(zinfo) as _src:
                return _src.read()
        except CODEC_ERRORS as e:
            raise ArchiveIOError(f"failed to read {zinfo.filename}: {e!r}") from e

    def read_raw_entry(self, zinfo: ZipInfo) -> bytes:
        """Read the raw(maybe compressed) bytes of the entry."""
        _fp = self._f.fp
        if _fp is None:
            raise ArchiveIOError("archive is already closed")

        try:
            with self._f._lock:
                _fp.seek(zinfo.header_offset)
                _header = _fp.read(LOCAL_FILE_HEADER.size)
                if len(_header) != LOCAL_FILE_HEADER.size:
                    raise BadZipFile("truncated local file header")

                _fields = LOCAL_FILE_HEADER.unpack(_header)
                if _fields[0] != LOCAL_FILE_HEADER_MAGIC:
                    raise BadZipFile("bad magic number for local file header")

                _fp.seek(
                    _fields[_LFH_FILENAME_LENGTH] + _fields[_LFH_EXTRA_FIELD_LENGTH],
                    os.SEEK_CUR,
                )
                _raw = _fp.read(zinfo.compress_size)
        except (OSError, BadZipFile) as e:
            raise ArchiveIOError(f"failed to read {zinfo.filename}: {e!r}") from e

        if len(_raw) != zinfo.compress_size:
            raise ArchiveIOError(f"truncated entry data for {zinfo.filename}")
        return _raw


class ArchiveWriter:
    """Helper class for sequentially appending entries to a new archive.

    The archive is finalized(central directory written) on close.
    """

    def __init__(self, fpath: StrOrPath) -> None:
        self.fpath = Path(fpath)
        try:
            self._f = ZipFile(fpath, mode="w")
        except OSError as e:
            raise ArchiveIOError(f"failed to create archive {fpath}: {e!r}") from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        try:
            self._f.close()
        except OSError as e:
            raise ArchiveIOError(f"failed to finalize {self.fpath}: {e!r}") from e

    def write_raw_entry(self, zinfo: ZipInfo, raw: bytes) -> None:
        """Append an entry with pre-compressed <raw> bytes.

        `zinfo` must have CRC, file_size and compress_type set matching <raw>.
        Basically a copy of how ZipFile.open(mode="w") writes an entry, without
            compressing the input and without data descriptor.
        """
        zinfo.flag_bits &= ~DATA_DESCRIPTOR_FLAG
        zinfo.compress_size = len(raw)

        _zipf = self._f
        try:
            with _zipf._lock:
                _fp = _zipf.fp
                zinfo.header_offset = _fp.tell()
                _fp.write(zinfo.FileHeader())
                _fp.write(raw)
                _zipf.start_dir = _fp.tell()
                _zipf.filelist.append(zinfo)
                _zipf.NameToInfo[zinfo.filename] = zinfo
        except OSError as e:
            raise ArchiveIOError(f"failed to write {zinfo.filename}: {e!r}") from e

    def write_entry(self, zinfo: ZipInfo, data: bytes) -> None:
        """Append an entry, <data> is compressed with `zinfo.compress_type`."""
        zinfo.file_size = len(data)
        try:
            with self._f.open(zinfo, mode="w") as _dst:
                _dst.write(data)
        except CODEC_ERRORS as e:
            raise ArchiveIOError(f"failed to write {zinfo.filename}: {e!r}") from e
