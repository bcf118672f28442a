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

from ..domain.index import ContentIndex
from ..domain.provenance import Provenance


class IndexStorePort(ABC):
    """Abstract interface for persisting a ContentIndex."""

    @abstractmethod
    def write(self, index: ContentIndex, path: Path) -> None:
        raise NotImplementedError

    @abstractmethod
    def read(self, path: Path) -> ContentIndex:
        raise NotImplementedError

    @abstractmethod
    def provenance(self, path: Path) -> Provenance:
        """Return the descriptive metadata embedded in a stored artifact."""
        raise NotImplementedError
