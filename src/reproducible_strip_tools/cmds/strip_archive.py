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

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from reproducible_strip.config import (
    ArchiveStripperConfig,
    StripperConfigFile,
    build_config,
    load_config_file,
)
from reproducible_strip.defaults import default_archive_stripper
from reproducible_strip.errors import ConfigurationError, StripperError
from reproducible_strip_tools._utils import discard_output_and_exit, exit_with_err_msg

if TYPE_CHECKING:
    from argparse import ArgumentParser, Namespace, _SubParsersAction

logger = logging.getLogger(__name__)


def strip_archive_cmd_args(
    sub_arg_parser: _SubParsersAction[ArgumentParser], *parent_parser: ArgumentParser
) -> None:
    strip_archive_arg_parser = sub_arg_parser.add_parser(
        name="strip-archive",
        help=(_help_txt := "Rebuild a jar/war/zip archive into a reproducible form"),
        description=_help_txt,
        parents=parent_parser,
    )
    strip_archive_arg_parser.add_argument(
        "--output",
        "-o",
        help="Where to save the stripped archive.",
        required=True,
    )
    strip_archive_arg_parser.add_argument(
        "--config",
        help="YAML config file, the other options override the config file.",
    )
    strip_archive_arg_parser.add_argument(
        "--timestamp",
        help="The datetime set to all entries, in ISO format, i.e., 2000-01-01T00:00:00.",
    )
    strip_archive_arg_parser.add_argument(
        "--fix-attributes",
        action="store_true",
        help="Fix the permission bits of the entries of jar/war archives.",
    )
    strip_archive_arg_parser.add_argument(
        "--workers",
        type=int,
        help="Number of worker threads for processing the entries.",
    )
    strip_archive_arg_parser.add_argument(
        "input",
        help="The archive to strip.",
    )
    strip_archive_arg_parser.set_defaults(handler=strip_archive_cmd)


def _load_config(args: Namespace) -> StripperConfigFile:
    _config_file = StripperConfigFile()
    if args.config:
        _config_file = load_config_file(args.config)

    _overrides = {}
    if args.timestamp:
        _overrides["reference_timestamp"] = args.timestamp
    if args.fix_attributes:
        _overrides["fix_external_attributes"] = True
    if args.workers is not None:
        _overrides["max_workers"] = args.workers
    if not _overrides:
        return _config_file

    _archive_config = build_config(
        ArchiveStripperConfig, {**_config_file.archive.model_dump(), **_overrides}
    )
    return _config_file.model_copy(update={"archive": _archive_config})


def strip_archive_cmd(args: Namespace) -> None:
    logger.debug(f"calling {strip_archive_cmd.__name__} with {args}")
    _input, _output = Path(args.input), Path(args.output)
    if not _input.is_file():
        exit_with_err_msg(f"{_input} not found!")
    if _input.resolve() == _output.resolve():
        exit_with_err_msg("output must not be the same file as input!")

    try:
        _config = _load_config(args)
    except ConfigurationError as e:
        exit_with_err_msg(f"invalid configuration: {e}")

    stripper = default_archive_stripper(
        _config.archive, manifest_policy=_config.manifest
    )
    try:
        stripper.strip(_input, _output)
    except (StripperError, OSError) as e:
        logger.debug(f"failed to strip {_input}: {e!r}", exc_info=e)
        discard_output_and_exit(_output, f"failed to strip {_input}: {e!r}")
    print(f"Stripped archive saved to {_output}.")
