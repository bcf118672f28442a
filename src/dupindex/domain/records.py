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

import stat
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

# Serialized as "0001-01-01T00:00:00Z"; the value of an unset timestamp.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def datetime_from_ns(ns: int) -> datetime:
    """UTC datetime for a nanosecond unix timestamp, truncated to microseconds."""
    return _EPOCH + timedelta(microseconds=int(ns) // 1000)


@dataclass(frozen=True)
class FileRecord:
    """
    Point-in-time snapshot of one file's metadata.

    `path` is the full path captured during the walk and doubles as the
    record's name; there is no separate identity field.
    """

    path: str
    size: int = 0
    mode: int = 0
    mod_time: datetime = ZERO_TIME
    is_dir: bool = False

    def __post_init__(self) -> None:
        # Stored timestamps carry whole-minute offsets only; normalize anything
        # else to UTC so the stored text reads back as an equal value.
        offset = self.mod_time.utcoffset()
        if offset is None:
            object.__setattr__(self, "mod_time", self.mod_time.replace(tzinfo=timezone.utc))
        elif offset.seconds % 60 or offset.microseconds:
            object.__setattr__(self, "mod_time", self.mod_time.astimezone(timezone.utc))

    @classmethod
    def from_stat(cls, path: str, st: Any) -> FileRecord:
        """
        Build a record from anything shaped like `os.stat_result`
        (needs `st_mode`, `st_size` and `st_mtime_ns`).
        """
        mtime_ns = getattr(st, "st_mtime_ns", None)
        if mtime_ns is None:
            mtime_ns = int(st.st_mtime * 1e9)
        return cls(
            path=str(path),
            size=int(st.st_size),
            mode=int(st.st_mode),
            mod_time=datetime_from_ns(mtime_ns),
            is_dir=stat.S_ISDIR(st.st_mode),
        )
