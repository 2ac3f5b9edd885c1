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

from reproducible_strip.config import StripperConfigFile, load_config_file
from reproducible_strip.errors import ConfigurationError, StripperError
from reproducible_strip.manifest import ManifestStripper
from reproducible_strip_tools._utils import discard_output_and_exit, exit_with_err_msg

if TYPE_CHECKING:
    from argparse import ArgumentParser, Namespace, _SubParsersAction

logger = logging.getLogger(__name__)


def strip_manifest_cmd_args(
    sub_arg_parser: _SubParsersAction[ArgumentParser], *parent_parser: ArgumentParser
) -> None:
    strip_manifest_arg_parser = sub_arg_parser.add_parser(
        name="strip-manifest",
        help=(_help_txt := "Remove volatile headers from a MANIFEST.MF file"),
        description=_help_txt,
        parents=parent_parser,
    )
    strip_manifest_arg_parser.add_argument(
        "--output",
        "-o",
        help="Where to save the stripped manifest.",
        required=True,
    )
    strip_manifest_arg_parser.add_argument(
        "--config",
        help="YAML config file, only the `manifest` section is used.",
    )
    strip_manifest_arg_parser.add_argument(
        "input",
        help="The manifest file to strip.",
    )
    strip_manifest_arg_parser.set_defaults(handler=strip_manifest_cmd)


def strip_manifest_cmd(args: Namespace) -> None:
    logger.debug(f"calling {strip_manifest_cmd.__name__} with {args}")
    _input, _output = Path(args.input), Path(args.output)
    if _input.resolve() == _output.resolve():
        exit_with_err_msg("output must not be the same file as input!")

    try:
        _config = load_config_file(args.config) if args.config else StripperConfigFile()
    except ConfigurationError as e:
        exit_with_err_msg(f"invalid configuration: {e}")

    if not _input.is_file():
        print(f"{_input} not found, nothing to strip.")
        return

    try:
        ManifestStripper(_config.manifest).strip(_input, _output)
    except (StripperError, OSError) as e:
        discard_output_and_exit(_output, f"failed to strip {_input}: {e!r}")

    print(f"Stripped manifest saved to {_output}.")
