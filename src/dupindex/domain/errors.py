class DupIndexError(Exception):
    """Base exception for domain-specific errors."""


class ConfigurationError(DupIndexError):
    """Bad CLI args or an unusable setup (e.g., index without a key function)."""


class FilesystemError(DupIndexError):
    """Unresolvable roots, unreadable directories, failed stat calls."""


class HashingError(DupIndexError):
    """A file could not be opened or fully read while computing its key."""


class PersistenceError(DupIndexError):
    """Reading or writing the index artifact failed."""


class CodecError(PersistenceError):
    """Malformed JSON payload or gzip container."""
