# tests/unit/test_md5_hasher.py
from io import BytesIO

from dupindex.adapters.hashing.md5_hasher import MD5Hasher

SOME_CONTENT_KEY = "78138d2003f1a87043d65c692fb3a64b"


def test_known_digest():
    assert MD5Hasher().hash_stream(BytesIO(b"Some Content")) == SOME_CONTENT_KEY


def test_digest_does_not_depend_on_chunking():
    data = b"abc" * 10_000
    assert MD5Hasher(chunk_size=7).hash_stream(BytesIO(data)) == MD5Hasher().hash_stream(
        BytesIO(data)
    )


def test_empty_stream():
    assert MD5Hasher().hash_stream(BytesIO(b"")) == "d41d8cd98f00b204e9800998ecf8427e"


def test_name():
    assert MD5Hasher().name == "md5"
