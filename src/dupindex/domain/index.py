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

from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .errors import ConfigurationError
from .records import FileRecord

KeyFunc = Callable[[FileRecord], str]


class ContentIndex:
    """
    Groups FileRecords by content key (hex digest of the file contents).

    The backing container is private so the on-disk encoding can change
    without touching callers. Records are only ever appended; there is no
    removal. Within a group, order is insertion (scan) order.
    """

    def __init__(self, key_func: Optional[KeyFunc] = None) -> None:
        self._key_func = key_func
        self._groups: Dict[str, List[FileRecord]] = {}

    # --- mutation -----------------------------------------------------------

    def insert(self, record: FileRecord) -> str:
        """
        Compute the record's key and append it to that key's group.

        Returns:
            The key the record was filed under.

        Raises:
            ConfigurationError: if the index was built without a key function.
            Whatever the key function raises; the index is left untouched then.
        """
        if self._key_func is None:
            raise ConfigurationError("ContentIndex has no key function; use add(key, record)")
        key = self._key_func(record)
        self.add(key, record)
        return key

    def add(self, key: str, record: FileRecord) -> None:
        self._groups.setdefault(key, []).append(record)

    def ensure_key(self, key: str) -> None:
        # Decoded payloads may carry a key with no records.
        self._groups.setdefault(key, [])

    # --- queries ------------------------------------------------------------

    def get(self, key: str) -> Tuple[FileRecord, ...]:
        return tuple(self._groups.get(key, ()))

    def all(self) -> Iterator[Tuple[str, Tuple[FileRecord, ...]]]:
        for key, records in self._groups.items():
            yield key, tuple(records)

    def keys(self) -> List[str]:
        return list(self._groups)

    def duplicates(self) -> Iterator[Tuple[str, Tuple[FileRecord, ...]]]:
        """Only the groups holding more than one record."""
        for key, records in self.all():
            if len(records) > 1:
                yield key, records

    def record_count(self) -> int:
        return sum(len(v) for v in self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, key: object) -> bool:
        return key in self._groups

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentIndex):
            return NotImplemented
        return self._groups == other._groups

    def __repr__(self) -> str:
        return f"ContentIndex(keys={len(self)}, records={self.record_count()})"
