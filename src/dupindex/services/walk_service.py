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
import os
import stat
from pathlib import Path
from typing import Iterator, Union

from ..domain.errors import ConfigurationError, FilesystemError
from ..domain.records import FileRecord
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_EVERY = 1000


class WalkService:
    """
    Turns a directory tree into a lazy stream of FileRecords.

    - Directories are descended into but never emitted.
    - Each record's `path` is the entry's full absolute path.
    - Traversal is all-or-nothing: the first OSError ends the stream with
      FilesystemError. Unreadable entries are never skipped.
    - The stream is single-pass; call walk() again for a fresh scan.
    """

    def __init__(self, fs: FilesystemPort, *, progress_every: int = DEFAULT_PROGRESS_EVERY) -> None:
        if int(progress_every) < 0:
            raise ConfigurationError(f"progress_every must be >= 0, got {progress_every}")
        self._fs = fs
        self._progress_every = int(progress_every)
        self._scanned = 0

    @property
    def scanned(self) -> int:
        """Records produced by the most recent walk so far."""
        return self._scanned

    def walk(self, root: Union[str, Path]) -> Iterator[FileRecord]:
        try:
            root = Path(os.path.abspath(root))
        except OSError as e:
            raise FilesystemError(f"cannot resolve scan root {root}: {e}") from e

        self._scanned = 0
        logger.debug("WalkService.walk: scanning %s", root)
        try:
            for path in self._fs.walk(root):
                st = self._fs.stat(path)
                if stat.S_ISDIR(st.st_mode):
                    continue
                record = FileRecord.from_stat(str(path), st)
                self._scanned += 1
                if self._progress_every and self._scanned % self._progress_every == 0:
                    logger.info("scanned %d files", self._scanned)
                yield record
        except OSError as e:
            raise FilesystemError(f"scan of {root} failed: {e}") from e
