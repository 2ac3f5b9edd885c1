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
"""Pre-configured strippers for the typical JVM build artifacts."""

from __future__ import annotations

import re
from typing import Optional

from reproducible_strip.archive import MANIFEST_FNAME, NESTED_ARCHIVE_SUFFIXES
from reproducible_strip.archive.stripper import ArchiveStripper
from reproducible_strip.config import ArchiveStripperConfig, ManifestPolicy
from reproducible_strip.manifest import ManifestStripper
from reproducible_strip.properties import PropertiesStripper

MANIFEST_PATTERN = re.escape(MANIFEST_FNAME)
POM_PROPERTIES_PATTERN = r"META-INF/maven/.+/pom\.properties"
NESTED_ARCHIVE_PATTERN = (
    rf".+({'|'.join(re.escape(_suffix) for _suffix in NESTED_ARCHIVE_SUFFIXES)})"
)


def default_archive_stripper(
    config: Optional[ArchiveStripperConfig] = None,
    *,
    manifest_policy: Optional[ManifestPolicy] = None,
) -> ArchiveStripper:
    """Create an ArchiveStripper that also strips the manifest, the pom.properties
        and, recursively, all the nested archives.
    """
    stripper = ArchiveStripper(config)
    return (
        stripper.add_stripper(MANIFEST_PATTERN, ManifestStripper(manifest_policy))
        .add_stripper(POM_PROPERTIES_PATTERN, PropertiesStripper())
        .add_stripper(NESTED_ARCHIVE_PATTERN, stripper)
    )
