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

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, Iterator


class FilesystemPort(ABC):
    """Abstract interface for filesystem access."""

    @abstractmethod
    def walk(self, root: Path) -> Iterator[Path]:
        """
        Yield every entry under root (root first, directories included),
        depth-first. Traversal errors must propagate, not be skipped.
        """
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: Path) -> Any:
        """Return an `os.stat_result`-like object without following symlinks."""
        raise NotImplementedError

    @abstractmethod
    def open_binary(self, path: Path) -> BinaryIO:
        """Open a file for reading raw bytes; callers close it."""
        raise NotImplementedError
