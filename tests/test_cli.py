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
"""Tests for the strip-archive and strip-manifest commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from zipfile import ZipFile

import pytest

from reproducible_strip import version
from reproducible_strip_tools.__main__ import main
from reproducible_strip_tools.cmds import (
    strip_archive_cmd_args,
    strip_manifest_cmd_args,
)
from tests.conftest import JAR_ENTRIES, MANIFEST_CONTENT, make_archive


def _parse_args(argv: list[str]) -> argparse.Namespace:
    arg_parser = argparse.ArgumentParser()
    sub_parser = arg_parser.add_subparsers()
    strip_archive_cmd_args(sub_parser)
    strip_manifest_cmd_args(sub_parser)
    return arg_parser.parse_args(argv)


def _run(argv: list[str]) -> None:
    args = _parse_args(argv)
    args.handler(args)


class TestStripArchiveCmdArgs:
    """Tests for argument parser configuration."""

    def test_args_registration(self):
        args = _parse_args(["strip-archive", "-o", "out.jar", "in.jar"])
        assert args.output == "out.jar"
        assert args.input == "in.jar"
        assert args.config is None
        assert args.timestamp is None
        assert args.fix_attributes is False
        assert args.workers is None
        assert hasattr(args, "handler")

    def test_args_with_options(self):
        args = _parse_args(
            [
                "strip-archive",
                "--output",
                "out.jar",
                "--config",
                "config.yaml",
                "--timestamp",
                "2010-01-01T00:00:00",
                "--fix-attributes",
                "--workers",
                "2",
                "in.jar",
            ]
        )
        assert args.config == "config.yaml"
        assert args.timestamp == "2010-01-01T00:00:00"
        assert args.fix_attributes is True
        assert args.workers == 2

    def test_output_required(self):
        with pytest.raises(SystemExit):
            _parse_args(["strip-archive", "in.jar"])


class TestStripArchiveCmd:
    def test_strip_archive(self, jar_file: Path, tmp_path: Path, capsys):
        _output = tmp_path / "output.jar"
        _run(["strip-archive", "-o", str(_output), "--fix-attributes", str(jar_file)])

        assert f"saved to {_output}" in capsys.readouterr().out
        with ZipFile(_output) as zipf:
            assert zipf.namelist()[:2] == ["META-INF/MANIFEST.MF", "META-INF/"]
            assert b"Built-By" not in zipf.read("META-INF/MANIFEST.MF")
            assert zipf.getinfo("a.txt").external_attr == 0o100644 << 16

    def test_options_override_config_file(self, jar_file: Path, tmp_path: Path):
        _config = tmp_path / "config.yaml"
        _config.write_text(
            "archive:\n"
            "  reference_timestamp: '2010-01-01T00:00:00'\n"
            "  max_workers: 1\n"
            "manifest:\n"
            "  drop: [Main-Class]\n"
        )
        _output = tmp_path / "output.jar"
        _run(
            [
                "strip-archive",
                "-o",
                str(_output),
                "--config",
                str(_config),
                "--timestamp",
                "2020-02-02T02:02:02",
                str(jar_file),
            ]
        )

        with ZipFile(_output) as zipf:
            assert zipf.getinfo("a.txt").date_time == (2020, 2, 2, 2, 2, 2)
            _manifest = zipf.read("META-INF/MANIFEST.MF")
            assert b"Main-Class" not in _manifest
            # the manifest section of config file replaces the default policy
            assert b"Built-By: alice" in _manifest

    def test_input_not_found(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(["strip-archive", "-o", str(tmp_path / "o.jar"), "not_exist.jar"])
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().out

    def test_output_same_as_input(self, jar_file: Path):
        _origin = jar_file.read_bytes()
        with pytest.raises(SystemExit):
            _run(["strip-archive", "-o", str(jar_file), str(jar_file)])
        assert jar_file.read_bytes() == _origin

    def test_invalid_config(self, jar_file: Path, tmp_path: Path, capsys):
        _output = tmp_path / "output.jar"
        with pytest.raises(SystemExit):
            _run(["strip-archive", "-o", str(_output), "--workers", "0", str(jar_file)])
        assert "invalid configuration" in capsys.readouterr().out
        assert not _output.exists()

    def test_failed_output_removed(self, tmp_path: Path, capsys):
        """Test partially written output is removed when stripping failed."""
        _input = make_archive(
            tmp_path / "input.jar",
            [("a.txt", b"a"), ("META-INF/MANIFEST.MF", b"not a manifest\r\n")],
        )
        _output = tmp_path / "output.jar"
        with pytest.raises(SystemExit):
            _run(["strip-archive", "-o", str(_output), str(_input)])

        assert "failed to strip" in capsys.readouterr().out
        assert not _output.exists()


class TestStripManifestCmd:
    def test_strip_manifest(self, tmp_path: Path, capsys):
        _input, _output = tmp_path / "MANIFEST.MF", tmp_path / "STRIPPED.MF"
        _input.write_bytes(MANIFEST_CONTENT)

        _run(["strip-manifest", "-o", str(_output), str(_input)])
        assert _output.read_bytes() == (
            b"Manifest-Version: 1.0\r\nMain-Class: org.example.Main\r\n\r\n"
        )
        assert "saved to" in capsys.readouterr().out

    def test_input_not_found(self, tmp_path: Path, capsys):
        _output = tmp_path / "STRIPPED.MF"
        _run(["strip-manifest", "-o", str(_output), str(tmp_path / "MANIFEST.MF")])
        assert "nothing to strip" in capsys.readouterr().out
        assert not _output.exists()

    def test_invalid_manifest(self, tmp_path: Path, capsys):
        _input, _output = tmp_path / "MANIFEST.MF", tmp_path / "STRIPPED.MF"
        _input.write_bytes(b"invalid manifest line\r\n")

        with pytest.raises(SystemExit):
            _run(["strip-manifest", "-o", str(_output), str(_input)])
        assert "failed to strip" in capsys.readouterr().out
        assert not _output.exists()


class TestMain:
    def test_version(self, monkeypatch: pytest.MonkeyPatch, capsys):
        monkeypatch.setattr(sys, "argv", ["reproducible-strip", "version"])
        main()
        assert f"v{version}" in capsys.readouterr().out

    def test_missing_subcmd(self, monkeypatch: pytest.MonkeyPatch, capsys):
        monkeypatch.setattr(sys, "argv", ["reproducible-strip"])
        main()
        assert "Please specify subcommand" in capsys.readouterr().out

    def test_debug_strip_archive(
        self, jar_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        _output = tmp_path / "output.jar"
        monkeypatch.setattr(
            sys,
            "argv",
            [
                "reproducible-strip",
                "-d",
                "strip-archive",
                "-o",
                str(_output),
                str(jar_file),
            ],
        )
        main()
        with ZipFile(_output) as zipf:
            assert sorted(zipf.namelist()) == sorted(_name for _name, _ in JAR_ENTRIES)
