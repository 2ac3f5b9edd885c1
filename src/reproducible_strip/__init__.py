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
"""Strip non-reproducible data from build artifacts.

Provides strippers that normalize ZIP-family archives(jar, war, zip, ...) and the
    manifest files embedded in them, so that the same logical content always gives
    byte-identical output, regardless of timezone, filesystem ordering or umask.
"""

from reproducible_strip.archive.stripper import ArchiveStripper
from reproducible_strip.config import (
    DEFAULT_MANIFEST_POLICY,
    ArchiveStripperConfig,
    ManifestPolicy,
)
from reproducible_strip.defaults import default_archive_stripper
from reproducible_strip.errors import (
    ArchiveIOError,
    ConfigurationError,
    FormatError,
    StripperError,
)
from reproducible_strip.manifest import ManifestStripper
from reproducible_strip.properties import PropertiesStripper
from reproducible_strip.stripper import ContentStripper

version = "0.1.0"

__all__ = [
    "ArchiveIOError",
    "ArchiveStripper",
    "ArchiveStripperConfig",
    "ConfigurationError",
    "ContentStripper",
    "DEFAULT_MANIFEST_POLICY",
    "FormatError",
    "ManifestPolicy",
    "ManifestStripper",
    "PropertiesStripper",
    "StripperError",
    "default_archive_stripper",
    "version",
]
