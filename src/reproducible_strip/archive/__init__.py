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
"""Rewriting ZIP-family archives into a reproducible form.

A stripped archive has the following constraints:

1. entries are arranged in the canonical order, see `ordering`.
2. all entries have the same fixed DOS datetime, NTFS timestamps are rewritten to
    the same instant, and no extended timestamp extra record is kept.
3. optionally, all entries have fixed permission bits, selected only by entry type.
4. entries content is copied as raw compressed bytes, unless a sub-stripper is
    registered for the entry.
"""

# some constants that required for making a reproducible archive
DEFAULT_TIMESTAMP = (2000, 1, 1, 0, 0, 0)
FILE_PERMISSION = 0o644
DIR_PERMISSION = 0o755

S_IFREG = 0o100000
S_IFDIR = 0o040000
DOS_DIRECTORY_FLAG = 0x10
CREATE_SYSTEM_UNIX = 3

FIXED_FILE_EXTERNAL_ATTR = (S_IFREG | FILE_PERMISSION) << 16  # rw_r__r__
FIXED_DIR_EXTERNAL_ATTR = ((S_IFDIR | DIR_PERMISSION) << 16) | DOS_DIRECTORY_FLAG

EXECUTABLE_ARCHIVE_SUFFIXES = (".jar", ".war")
NESTED_ARCHIVE_SUFFIXES = (".jar", ".war", ".ear", ".zip")

MANIFEST_FNAME = "META-INF/MANIFEST.MF"
META_INF_DIR = "META-INF/"
