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

import logging
from typing import Iterable

from ..domain.errors import HashingError
from ..domain.index import ContentIndex
from ..domain.records import FileRecord
from ..ports.filesystem import FilesystemPort
from ..ports.hasher import HasherPort

logger = logging.getLogger(__name__)


class IndexService:
    """
    Files records into a ContentIndex under the hash of their contents.

    Note:
      * Each key is computed from a fresh read of the file at indexing time.
        If the file changed after the walk, the key reflects the new content
        while size/mod_time still reflect the walk's snapshot.
      * Hash collisions are not disambiguated; colliding files share a group.
    """

    def __init__(self, fs: FilesystemPort, hasher: HasherPort) -> None:
        self._fs = fs
        self._hasher = hasher

    def key_for(self, record: FileRecord) -> str:
        """
        Hash the full contents of `record.path`.

        Raises:
            HashingError: if the file cannot be opened or fully read.
        """
        try:
            with self._fs.open_binary(record.path) as fh:
                return self._hasher.hash_stream(fh)
        except OSError as e:
            raise HashingError(f"cannot hash {record.path}: {e}") from e

    def new_index(self) -> ContentIndex:
        return ContentIndex(key_func=self.key_for)

    def insert(self, index: ContentIndex, record: FileRecord) -> str:
        return index.insert(record)

    def build(self, records: Iterable[FileRecord]) -> ContentIndex:
        """
        Index every record in order. The first failure propagates and no
        index is returned.
        """
        index = self.new_index()
        for record in records:
            self.insert(index, record)
        logger.debug(
            "IndexService.build: %d records under %d %s keys",
            index.record_count(),
            len(index),
            self._hasher.name,
        )
        return index
