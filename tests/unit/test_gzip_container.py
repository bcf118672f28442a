# tests/unit/test_gzip_container.py
import gzip
import io
from datetime import datetime, timezone

import pytest

from dupindex.adapters.store.gzip_container import (
    FCOMMENT,
    FNAME,
    compress,
    decompress,
    read_header,
)
from dupindex.domain.errors import CodecError
from dupindex.domain.provenance import Provenance

WHEN = datetime(2019, 10, 3, 1, 21, 54, tzinfo=timezone.utc)
HEADER = Provenance(name="cache.json", comment="A content index file", mtime=WHEN)


def test_output_is_plain_gzip():
    payload = b'{"k":[]}' * 100
    blob = compress(payload, HEADER)
    assert gzip.decompress(blob) == payload
    assert decompress(blob) == payload


def test_header_carries_name_comment_and_mtime():
    blob = compress(b"{}", HEADER)
    assert blob[:2] == b"\x1f\x8b"
    assert blob[3] == FNAME | FCOMMENT
    assert blob[9] == 255  # OS: unknown
    assert read_header(blob) == HEADER


def test_header_without_optional_fields():
    blob = compress(b"{}", Provenance())
    assert blob[3] == 0
    assert read_header(blob) == Provenance(name="", comment="", mtime=None)


def test_reads_headers_written_by_stdlib_gzip():
    buf = io.BytesIO()
    with gzip.GzipFile(filename="other.json", mode="wb", fileobj=buf, mtime=1570065714) as zf:
        zf.write(b"{}")
    header = read_header(buf.getvalue())
    assert header.name == "other.json"
    assert header.comment == ""
    assert header.mtime == WHEN


def test_pre_epoch_mtime_is_stored_as_unset():
    blob = compress(b"{}", Provenance(name="x", mtime=datetime(1960, 1, 1, tzinfo=timezone.utc)))
    assert read_header(blob).mtime is None


@pytest.mark.parametrize("name", ["snow☃man", "nul\x00inside"])
def test_name_must_be_latin1_without_nul(name):
    with pytest.raises(CodecError):
        compress(b"{}", Provenance(name=name))


@pytest.mark.parametrize(
    "blob",
    [
        b"",
        b"\x1f\x8b\x08",
        b"PK\x03\x04" + b"\x00" * 20,
        b"\x1f\x8b\x07\x00" + b"\x00" * 6,  # not deflate
        b"\x1f\x8b\x08\x08" + b"\x00" * 6 + b"no-terminator",
    ],
)
def test_bad_headers_are_codec_errors(blob):
    with pytest.raises(CodecError):
        read_header(blob)


def test_corrupt_trailer_is_a_codec_error():
    blob = bytearray(compress(b"payload", HEADER))
    blob[-8] ^= 0xFF  # CRC32
    with pytest.raises(CodecError):
        decompress(bytes(blob))


def test_truncated_body_is_a_codec_error():
    blob = compress(b"payload" * 50, HEADER)
    with pytest.raises(CodecError):
        decompress(blob[:-12])
