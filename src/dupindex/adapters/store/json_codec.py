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
JSON payload of a stored index.

Layout: one object mapping each content key to an array of records,
    {"<hex key>":[{"name":...,"size":...,"mode":...,"modTime":...,"isDir":...}]}
Field names, field order and the compact separators are part of the format;
other tools read these files, so keep them byte-stable.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

from ...domain.errors import CodecError
from ...domain.index import ContentIndex
from ...domain.records import ZERO_TIME, FileRecord

_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d{1,9}))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))$"
)

# Escaped so the payload is safe to embed in HTML/JS.
_HTML_ESCAPES: Tuple[Tuple[str, str], ...] = (
    ("&", "\\u0026"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


# ------------------------------
# Timestamps (RFC 3339)
# ------------------------------


def format_timestamp(dt: datetime) -> str:
    """
    RFC 3339 text for `dt`. UTC is written as "Z", fractional seconds only
    when non-zero with trailing zeros trimmed. Naive values count as UTC.
    """
    offset = dt.utcoffset()
    text = (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )
    if dt.microsecond:
        text += "." + f"{dt.microsecond:06d}".rstrip("0")
    if not offset:
        return text + "Z"
    minutes = int(abs(offset.total_seconds())) // 60
    sign = "-" if offset < timedelta(0) else "+"
    hours, minutes = divmod(minutes, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def parse_timestamp(text: str) -> datetime:
    """Inverse of format_timestamp. Sub-microsecond digits are truncated."""
    m = _TIMESTAMP_RE.match(text)
    if not m:
        raise CodecError(f"invalid RFC 3339 timestamp: {text!r}")
    year, month, day, hour, minute, second = (int(g) for g in m.group(1, 2, 3, 4, 5, 6))
    fraction = m.group(7) or ""
    micro = int(fraction[:6].ljust(6, "0"))
    if m.group(8):
        tz = timezone.utc
    else:
        delta = timedelta(hours=int(m.group(10)), minutes=int(m.group(11)))
        if delta >= timedelta(hours=24):
            raise CodecError(f"invalid UTC offset in timestamp: {text!r}")
        tz = timezone(-delta if m.group(9) == "-" else delta)
    try:
        return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)
    except ValueError as e:
        raise CodecError(f"invalid RFC 3339 timestamp: {text!r}: {e}") from e


# ------------------------------
# Index payload
# ------------------------------


def record_to_json(record: FileRecord) -> Dict[str, Any]:
    return {
        "name": record.path,
        "size": record.size,
        "mode": record.mode,
        "modTime": format_timestamp(record.mod_time),
        "isDir": record.is_dir,
    }


def encode_index(index: ContentIndex) -> bytes:
    """
    Serialize `index` to compact UTF-8 JSON with keys in sorted order.

    Raises:
        CodecError: if a value cannot be represented (e.g. a path holding
            surrogate-escaped bytes, which has no UTF-8 form).
    """
    payload = {
        key: [record_to_json(r) for r in records] for key, records in sorted(index.all())
    }
    try:
        text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        for raw, escaped in _HTML_ESCAPES:
            text = text.replace(raw, escaped)
        return text.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise CodecError(f"cannot encode index: {e}") from e


def _field(item: Dict[str, Any], name: str, kind: type, default: Any) -> Any:
    value = item.get(name)
    if value is None:
        return default
    # bool is an int subclass; keep the two apart.
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise CodecError(
            f"field {name!r} must be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def record_from_json(item: Any) -> FileRecord:
    if item is None:
        return FileRecord(path="")
    if not isinstance(item, dict):
        raise CodecError(f"record must be an object, got {type(item).__name__}")

    size = _field(item, "size", int, 0)
    mode = _field(item, "mode", int, 0)
    if size < 0:
        raise CodecError(f"record size must be non-negative, got {size}")
    if mode < 0:
        raise CodecError(f"record mode must be non-negative, got {mode}")
    mod_time = _field(item, "modTime", str, None)

    return FileRecord(
        path=_field(item, "name", str, ""),
        size=size,
        mode=mode,
        mod_time=parse_timestamp(mod_time) if mod_time is not None else ZERO_TIME,
        is_dir=_field(item, "isDir", bool, False),
    )


def decode_index(data: bytes) -> ContentIndex:
    """
    Rebuild a ContentIndex from an encoded payload.

    Missing record fields take zero values and unknown fields are ignored.
    Anything structurally wrong raises CodecError; nothing partial is returned.
    """
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise CodecError(f"cannot decode index payload: {e}") from e

    index = ContentIndex()
    if payload is None:
        return index
    if not isinstance(payload, dict):
        raise CodecError(f"index payload must be an object, got {type(payload).__name__}")

    for key, items in payload.items():
        if items is None:
            items = []
        if not isinstance(items, list):
            raise CodecError(f"records for key {key!r} must be an array")
        if not items:
            index.ensure_key(key)
        records: List[FileRecord] = [record_from_json(item) for item in items]
        for record in records:
            index.add(key, record)
    return index
