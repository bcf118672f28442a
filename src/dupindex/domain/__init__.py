from .errors import (
    CodecError,
    ConfigurationError,
    DupIndexError,
    FilesystemError,
    HashingError,
    PersistenceError,
)
from .index import ContentIndex
from .provenance import Provenance
from .records import ZERO_TIME, FileRecord

__all__ = [
    "CodecError",
    "ConfigurationError",
    "ContentIndex",
    "DupIndexError",
    "FileRecord",
    "FilesystemError",
    "HashingError",
    "PersistenceError",
    "Provenance",
    "ZERO_TIME",
]
