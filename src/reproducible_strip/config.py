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
"""Configuration models for the strippers.

Configurations are immutable once built, invalid input is reported as
    ConfigurationError when the configuration is built, never at strip time.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from typing_extensions import Self

from reproducible_strip.archive import DEFAULT_TIMESTAMP, EXECUTABLE_ARCHIVE_SUFFIXES
from reproducible_strip.archive.timestamps import to_dos_date_time
from reproducible_strip.common import StrOrPath
from reproducible_strip.errors import ConfigurationError

Config_T = TypeVar("Config_T", bound=BaseModel)

HEADER_NAME_MAX_LEN = 70
HEADER_NAME_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9_\-]*")

DEFAULT_REFERENCE_TIMESTAMP = datetime(*DEFAULT_TIMESTAMP)
DEFAULT_MAX_WORKERS = 4
DEFAULT_MAX_PENDING = 32


def check_header_name(name: str) -> str:
    if len(name) > HEADER_NAME_MAX_LEN or not HEADER_NAME_PATTERN.fullmatch(name):
        raise ValueError(f"invalid manifest header name: {name!r}")
    return name


class HeaderAction(str, Enum):
    KEEP = "keep"
    DROP = "drop"
    REPLACE = "replace"


class ManifestPolicy(BaseModel):
    """The volatile manifest headers table.

    Headers listed in `drop` are removed, headers in `replace` have their value
        replaced with the configured constant. Header names are case-insensitive.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    drop: Tuple[str, ...] = ()
    replace: Dict[str, str] = Field(default_factory=dict)

    @field_validator("drop")
    @classmethod
    def _validate_drop(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        for _name in value:
            check_header_name(_name)
        return value

    @field_validator("replace")
    @classmethod
    def _validate_replace(cls, value: Dict[str, str]) -> Dict[str, str]:
        for _name, _constant in value.items():
            check_header_name(_name)
            if "\r" in _constant or "\n" in _constant:
                raise ValueError(f"replacement for {_name} must be a single line")
        return value

    @model_validator(mode="after")
    def _validate_no_conflict(self) -> Self:
        _dropped = {_name.lower() for _name in self.drop}
        if _conflicts := [_n for _n in self.replace if _n.lower() in _dropped]:
            raise ValueError(f"headers both dropped and replaced: {_conflicts}")
        return self

    def action_for(self, name: str) -> tuple[HeaderAction, str | None]:
        _lower_name = name.lower()
        for _dropped in self.drop:
            if _dropped.lower() == _lower_name:
                return HeaderAction.DROP, None
        for _replaced, _constant in self.replace.items():
            if _replaced.lower() == _lower_name:
                return HeaderAction.REPLACE, _constant
        return HeaderAction.KEEP, None


DEFAULT_MANIFEST_POLICY = ManifestPolicy(
    drop=(
        "Built-By",
        "Build-Jdk",
        "Build-Jdk-Spec",
        "Created-By",
        "Build-Date",
        "Build-Time",
        "Build-Timestamp",
        "Bnd-LastModified",
        "Originally-Created-By",
        "Tool",
    )
)


class ArchiveStripperConfig(BaseModel):
    """Configuration of the ArchiveStripper.

    Attributes:
        reference_timestamp: the wall-clock datetime set to all entries.
        fix_external_attributes: whether to fix the permission bits of entries of
            executable archives, making the output insensitive to umask.
        executable_suffixes: archive file suffixes considered as executable archive.
        max_workers: worker threads for normalizing entries.
        max_pending: max normalized entries held in memory waiting to be written.
        tmp_dir: where to place temporary files, default to system tmp dir.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    reference_timestamp: datetime = DEFAULT_REFERENCE_TIMESTAMP
    fix_external_attributes: bool = False
    executable_suffixes: Tuple[str, ...] = EXECUTABLE_ARCHIVE_SUFFIXES
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    max_pending: int = Field(default=DEFAULT_MAX_PENDING, ge=1)
    tmp_dir: Optional[Path] = None

    @field_validator("reference_timestamp")
    @classmethod
    def _validate_reference_timestamp(cls, value: datetime) -> datetime:
        to_dos_date_time(value)
        return value

    @field_validator("executable_suffixes")
    @classmethod
    def _validate_suffixes(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        for _suffix in value:
            if not _suffix.startswith("."):
                raise ValueError(f"suffix must start with a dot: {_suffix!r}")
        return tuple(_suffix.lower() for _suffix in value)


class StripperConfigFile(BaseModel):
    """Schema of the config file used by the command line tools."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    archive: ArchiveStripperConfig = Field(default_factory=ArchiveStripperConfig)
    manifest: ManifestPolicy = DEFAULT_MANIFEST_POLICY


def build_config(_model: Type[Config_T], _data: Any = None, **kwargs) -> Config_T:
    """Validate <_data> or <kwargs> into <_model>.

    Raises:
        ConfigurationError: if validation failed.
    """
    try:
        if _data is None:
            return _model.model_validate(kwargs)
        return _model.model_validate(_data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid {_model.__name__}: {e}") from e


def load_config_file(fpath: StrOrPath) -> StripperConfigFile:
    """Load the YAML config file at <fpath>."""
    try:
        _raw = yaml.safe_load(Path(fpath).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to load config file {fpath}: {e!r}") from e

    if _raw is None:
        _raw = {}
    if not isinstance(_raw, dict):
        raise ConfigurationError(f"config file {fpath} must hold a mapping")
    return build_config(StripperConfigFile, _raw)
