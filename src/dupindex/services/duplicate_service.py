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

from typing import Any, Dict, Iterable, List

from ..adapters.store.json_codec import format_timestamp
from ..domain.index import ContentIndex


class DuplicateService:
    """
    Produces exact-duplicate clusters from a ContentIndex.
    Read-only: nothing is deleted or linked.
    """

    def __init__(self, index: ContentIndex) -> None:
        self._index = index

    def clusters(self) -> Iterable[List[Dict[str, Any]]]:
        """
        Yield one cluster per key shared by more than one file.
        Each cluster is a list of row dicts (key + record metadata).

        Notes:
          * Clusters come out ordered by key, members by path, so reports
            are deterministic regardless of scan order.
        """
        for key, records in sorted(self._index.duplicates()):
            rows = [
                {
                    "key": key,
                    "path": r.path,
                    "size": r.size,
                    "mode": r.mode,
                    "mod_time": format_timestamp(r.mod_time),
                }
                for r in records
            ]
            yield sorted(rows, key=lambda row: row["path"])
