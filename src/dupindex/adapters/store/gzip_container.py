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

"""
Minimal RFC 1952 (gzip) member writer/header reader.

The stdlib `gzip` module writes FNAME but not FCOMMENT and never exposes
either on read, so the header is handled here and the deflate body is left
to `zlib`. Output is a plain single-member gzip file (`gzip -dc` reads it).
"""

from __future__ import annotations

import gzip
import struct
import zlib
from datetime import datetime, timezone
from typing import Optional, Tuple

from ...domain.errors import CodecError
from ...domain.provenance import Provenance

MAGIC = b"\x1f\x8b"
CM_DEFLATE = 8
OS_UNKNOWN = 255

FHCRC = 0x02
FEXTRA = 0x04
FNAME = 0x08
FCOMMENT = 0x10
_RESERVED = 0xE0


def _latin1_field(value: str, what: str) -> bytes:
    try:
        raw = value.encode("latin-1")
    except UnicodeEncodeError as e:
        raise CodecError(f"gzip {what} must be ISO-8859-1: {value!r}") from e
    if b"\x00" in raw:
        raise CodecError(f"gzip {what} must not contain NUL: {value!r}")
    return raw + b"\x00"


def _unix_seconds(mtime: Optional[datetime]) -> int:
    if mtime is None:
        return 0
    if mtime.tzinfo is None:
        mtime = mtime.replace(tzinfo=timezone.utc)
    seconds = int(mtime.timestamp())
    # MTIME is an unsigned 32-bit field; 0 means "not available".
    if seconds <= 0 or seconds > 0xFFFFFFFF:
        return 0
    return seconds


def compress(payload: bytes, header: Provenance, level: int = 9) -> bytes:
    """Wrap `payload` in one gzip member carrying `header` as FNAME/FCOMMENT/MTIME."""
    flags = 0
    fields = b""
    if header.name:
        flags |= FNAME
        fields += _latin1_field(header.name, "name")
    if header.comment:
        flags |= FCOMMENT
        fields += _latin1_field(header.comment, "comment")

    xfl = 2 if level == 9 else (4 if level == 1 else 0)
    head = MAGIC + struct.pack(
        "<BBIBB", CM_DEFLATE, flags, _unix_seconds(header.mtime), xfl, OS_UNKNOWN
    )

    try:
        deflater = zlib.compressobj(level, zlib.DEFLATED, -zlib.MAX_WBITS)
        body = deflater.compress(payload) + deflater.flush()
    except zlib.error as e:
        raise CodecError(f"deflate failed: {e}") from e

    trailer = struct.pack("<II", zlib.crc32(payload) & 0xFFFFFFFF, len(payload) & 0xFFFFFFFF)
    return head + fields + body + trailer


def _read_cstring(data: bytes, pos: int, what: str) -> Tuple[str, int]:
    end = data.find(b"\x00", pos)
    if end < 0:
        raise CodecError(f"truncated gzip header: unterminated {what}")
    return data[pos:end].decode("latin-1"), end + 1


def read_header(data: bytes) -> Provenance:
    """
    Parse the header of the first gzip member in `data`.

    Raises:
        CodecError: on bad magic, non-deflate method, reserved flags or truncation.
    """
    if len(data) < 10:
        raise CodecError("truncated gzip header")
    if data[:2] != MAGIC:
        raise CodecError("not a gzip file (bad magic)")
    method, flags, mtime = struct.unpack_from("<BBI", data, 2)
    if method != CM_DEFLATE:
        raise CodecError(f"unsupported gzip compression method: {method}")
    if flags & _RESERVED:
        raise CodecError(f"reserved gzip header flags set: {flags:#04x}")

    pos = 10
    if flags & FEXTRA:
        if len(data) < pos + 2:
            raise CodecError("truncated gzip header: FEXTRA length")
        (xlen,) = struct.unpack_from("<H", data, pos)
        pos += 2 + xlen
        if len(data) < pos:
            raise CodecError("truncated gzip header: FEXTRA data")
    name = comment = ""
    if flags & FNAME:
        name, pos = _read_cstring(data, pos, "name")
    if flags & FCOMMENT:
        comment, pos = _read_cstring(data, pos, "comment")
    if flags & FHCRC:
        if len(data) < pos + 2:
            raise CodecError("truncated gzip header: FHCRC")
        (hcrc,) = struct.unpack_from("<H", data, pos)
        if hcrc != zlib.crc32(data[:pos]) & 0xFFFF:
            raise CodecError("gzip header checksum mismatch")

    when = datetime.fromtimestamp(mtime, tz=timezone.utc) if mtime else None
    return Provenance(name=name, comment=comment, mtime=when)


def decompress(data: bytes) -> bytes:
    """Inflate every member in `data`, verifying CRC32 and length trailers."""
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise CodecError(f"cannot decompress index: {e}") from e
