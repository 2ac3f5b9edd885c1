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
"""Exceptions raised by the strippers.

Every failure aborts the current strip and propagates to the caller,
    there is no internal recovery or retry.
"""


class StripperError(Exception): ...


class ArchiveIOError(StripperError, OSError):
    """Failed to access the container or the filesystem, or the container is corrupted."""


class FormatError(StripperError, ValueError):
    """Content failed to parse as its declared type."""


class ConfigurationError(StripperError, ValueError):
    """Invalid stripper configuration, detected at construction time."""
