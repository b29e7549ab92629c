"""
partition-dedup - Canonical exception hierarchy.

Only ConfigurationError is allowed to end a run. The other errors are
raised by single-file primitives and are caught, logged and counted by
the stage that called them.
"""


class DedupError(Exception):
    """Base exception partition-dedup."""


class ConfigurationError(DedupError):
    """Invalid command line or settings (e.g. no partitions given)."""


class HashError(DedupError):
    """A file could not be read to compute its content digest."""

    def __init__(self, path, cause: Exception):
        super().__init__(f"cannot hash {path}: {cause}")
        self.path = path
        self.cause = cause


class DeletionError(DedupError):
    """A duplicate could not be removed."""

    def __init__(self, path, cause: Exception):
        super().__init__(f"cannot delete {path}: {cause}")
        self.path = path
        self.cause = cause
