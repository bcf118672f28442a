# tests/services/test_index_service.py
from io import BytesIO
from pathlib import Path
from typing import Iterator, List

import pytest

from dupindex.adapters.filesystem.local_fs import LocalFS
from dupindex.adapters.hashing.md5_hasher import MD5Hasher
from dupindex.domain.errors import HashingError
from dupindex.domain.records import FileRecord
from dupindex.ports.filesystem import FilesystemPort
from dupindex.ports.hasher import HasherPort
from dupindex.services.index_service import IndexService

SOME_CONTENT_KEY = "78138d2003f1a87043d65c692fb3a64b"


class TrackingStream(BytesIO):
    pass


class TrackingFS(FilesystemPort):
    """Serves in-memory content and remembers every stream it handed out."""

    def __init__(self, content: bytes = b"Some Content"):
        self.content = content
        self.opened: List[TrackingStream] = []

    def walk(self, root: Path) -> Iterator[Path]:
        raise NotImplementedError

    def stat(self, path: Path):
        raise NotImplementedError

    def open_binary(self, path: Path):
        s = TrackingStream(self.content)
        self.opened.append(s)
        return s


class FailingHasher(HasherPort):
    @property
    def name(self) -> str:
        return "failing"

    def hash_stream(self, stream) -> str:
        stream.read(1)
        raise OSError("device went away")


def _service() -> IndexService:
    return IndexService(LocalFS(), MD5Hasher())


def test_key_for_hashes_full_contents(tmp_path: Path):
    f = tmp_path / "Foo"
    f.write_bytes(b"Some Content")
    assert _service().key_for(FileRecord(path=str(f))) == SOME_CONTENT_KEY


def test_key_is_deterministic_across_services(tmp_path: Path):
    f = tmp_path / "Foo"
    f.write_bytes(b"Some Content")
    rec = FileRecord(path=str(f))
    assert _service().key_for(rec) == _service().key_for(rec)


def test_identical_content_shares_a_key(tmp_path: Path):
    a, b, c = tmp_path / "a.txt", tmp_path / "b.txt", tmp_path / "c.txt"
    a.write_bytes(b"hello world\n")
    b.write_bytes(b"hello world\n")
    c.write_bytes(b"something else\n")
    recs = [FileRecord(path=str(p)) for p in (a, b, c)]

    index = _service().build(recs)

    key_ab = _service().key_for(recs[0])
    key_c = _service().key_for(recs[2])
    assert key_ab != key_c
    assert index.get(key_ab) == (recs[0], recs[1])
    assert index.get(key_c) == (recs[2],)
    assert len(index) == 2


def test_insert_returns_key(tmp_path: Path):
    f = tmp_path / "Foo"
    f.write_bytes(b"Some Content")
    svc = _service()
    index = svc.new_index()
    rec = FileRecord(path=str(f))

    assert svc.insert(index, rec) == SOME_CONTENT_KEY
    assert index.get(SOME_CONTENT_KEY)[0].path == str(f)


def test_missing_file_is_fatal_and_inserts_nothing(tmp_path: Path):
    svc = _service()
    index = svc.new_index()
    with pytest.raises(HashingError):
        svc.insert(index, FileRecord(path=str(tmp_path / "missing")))
    assert len(index) == 0


def test_build_aborts_on_first_failure(tmp_path: Path):
    ok = tmp_path / "ok.txt"
    ok.write_bytes(b"ok")
    recs = [FileRecord(path=str(ok)), FileRecord(path=str(tmp_path / "gone.txt"))]
    with pytest.raises(HashingError):
        _service().build(recs)


def test_key_reflects_content_at_index_time(tmp_path: Path):
    f = tmp_path / "a.txt"
    f.write_bytes(b"before")
    rec = FileRecord(path=str(f), size=6)
    f.write_bytes(b"Some Content")  # changed between walk and hash

    index = _service().build([rec])

    assert index.get(SOME_CONTENT_KEY) == (rec,)
    assert index.get(SOME_CONTENT_KEY)[0].size == 6


def test_streams_are_closed_after_hashing():
    fs = TrackingFS()
    svc = IndexService(fs, MD5Hasher())
    svc.build([FileRecord("x"), FileRecord("y")])
    assert len(fs.opened) == 2
    assert all(s.closed for s in fs.opened)


def test_streams_are_closed_when_reading_fails():
    fs = TrackingFS()
    svc = IndexService(fs, FailingHasher())
    with pytest.raises(HashingError):
        svc.key_for(FileRecord("x"))
    assert fs.opened[0].closed
