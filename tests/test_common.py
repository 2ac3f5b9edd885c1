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

from pathlib import Path

import pytest

from reproducible_strip.common import entry_suffix, remove_file, tmp_fname


class TestTmpFname:
    def test_tmp_fname_all_parameters(self):
        """Test tmp_fname with all parameters."""
        _fname = tmp_fname("hint", prefix="pre", suffix=".jar", sep="-", random_bytes=2)
        assert _fname.startswith("pre-hint-")
        assert _fname.endswith(".jar")
        assert len(_fname) == len("pre-hint-") + 4 + len(".jar")

    def test_tmp_fname_unique(self):
        assert len({tmp_fname("src") for _ in range(16)}) == 16


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a/b/lib.jar", ".jar"),
        ("archive.tar.gz", ".gz"),
        ("META-INF/MANIFEST.MF", ".MF"),
        ("a.d/b", ""),
        ("noext", ""),
        ("trailing.", ""),
        ("dir.d/", ".d"),
    ],
)
def test_entry_suffix(name: str, expected: str):
    assert entry_suffix(name) == expected


class TestRemoveFile:
    def test_remove_file(self, tmp_path: Path):
        _fpath = tmp_path / "file"
        _fpath.write_bytes(b"data")
        remove_file(_fpath)
        assert not _fpath.exists()

    def test_remove_dir(self, tmp_path: Path):
        _dpath = tmp_path / "dir"
        (_dpath / "sub").mkdir(parents=True)
        (_dpath / "sub" / "file").write_bytes(b"data")
        remove_file(_dpath)
        assert not _dpath.exists()

    def test_remove_not_exist(self, tmp_path: Path):
        remove_file(tmp_path / "not_exist")
