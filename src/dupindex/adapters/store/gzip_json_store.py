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
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from ...domain.errors import PersistenceError
from ...domain.index import ContentIndex
from ...domain.provenance import Provenance
from ...ports.store import IndexStorePort
from . import gzip_container
from .json_codec import decode_index, encode_index, format_timestamp

logger = logging.getLogger(__name__)

CONTAINER_NAME = "cache.json"
CONTAINER_COMMENT = "A content index file for dupindex"
FILE_MODE = 0o600


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GzipJSONStore(IndexStorePort):
    """
    Stores a ContentIndex as gzip-compressed JSON.

    - The whole artifact is built in memory before the destination is opened,
      so an encoding failure never leaves a truncated file behind.
    - Files are created owner read/write only (0600, subject to umask).
    - Every failure surfaces as PersistenceError (CodecError for bad data).
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or _utcnow

    # --- write --------------------------------------------------------------

    def write(self, index: ContentIndex, path: Union[str, Path]) -> None:
        payload = encode_index(index)
        header = Provenance(name=CONTAINER_NAME, comment=CONTAINER_COMMENT, mtime=self._clock())
        blob = gzip_container.compress(payload, header)

        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "wb") as fh:
                fh.write(blob)
        except OSError as e:
            raise PersistenceError(f"cannot write index to {path}: {e}") from e

        logger.debug(
            "Wrote index to %s (%d keys, %d bytes compressed)", path, len(index), len(blob)
        )

    # --- read ---------------------------------------------------------------

    def provenance(self, path: Union[str, Path]) -> Provenance:
        return gzip_container.read_header(self._read_bytes(path))

    def read(self, path: Union[str, Path]) -> ContentIndex:
        header, index = self.read_with_provenance(path)
        self._log_provenance(header)
        return index

    def read_with_provenance(self, path: Union[str, Path]) -> Tuple[Provenance, ContentIndex]:
        """Read the artifact once, returning its header and index without logging."""
        blob = self._read_bytes(path)
        header = gzip_container.read_header(blob)
        return header, decode_index(gzip_container.decompress(blob))

    # --- helpers ------------------------------------------------------------

    @staticmethod
    def _read_bytes(path: Union[str, Path]) -> bytes:
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as e:
            raise PersistenceError(f"cannot read index from {path}: {e}") from e

    @staticmethod
    def _log_provenance(header: Provenance) -> None:
        # Informational only; never affects decoding.
        mtime = format_timestamp(header.mtime) if header.mtime else "unset"
        logger.info("Name: %s", header.name)
        logger.info("Comment: %s", header.comment)
        logger.info("ModTime: %s", mtime)
