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

import os
from pathlib import Path
from typing import BinaryIO, Iterator

from ...ports.filesystem import FilesystemPort


class LocalFS(FilesystemPort):
    """
    Local filesystem adapter.

    Walks in lexical order, depth-first, without following symlinks.
    Errors from os.scandir/os.lstat are not caught here; the caller decides.
    """

    def walk(self, root: Path) -> Iterator[Path]:
        root = Path(root)
        yield root
        if root.is_dir() and not root.is_symlink():
            yield from self._walk_dir(root)

    def _walk_dir(self, directory: Path) -> Iterator[Path]:
        # Materialize the listing so the scandir handle is closed before recursing.
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            p = Path(entry.path)
            yield p
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk_dir(p)

    def stat(self, path: Path) -> os.stat_result:
        return os.lstat(path)

    def open_binary(self, path: Path) -> BinaryIO:
        return open(path, "rb")
