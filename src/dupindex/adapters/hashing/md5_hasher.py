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

import hashlib
from typing import BinaryIO

from ...ports.hasher import HasherPort


class MD5Hasher(HasherPort):
    """
    Full-file MD5. Fast and stable across runs; not meant to resist
    deliberate collisions.
    """

    def __init__(self, chunk_size: int = 65536):
        self._chunk_size = int(chunk_size)

    @property
    def name(self) -> str:
        return "md5"

    def hash_stream(self, stream: BinaryIO) -> str:
        h = hashlib.md5(usedforsecurity=False)
        while True:
            chunk = stream.read(self._chunk_size)
            if not chunk:
                break
            h.update(chunk)
        return h.hexdigest()
