from .filesystem import FilesystemPort
from .hasher import HasherPort
from .store import IndexStorePort

__all__ = ["FilesystemPort", "HasherPort", "IndexStorePort"]
