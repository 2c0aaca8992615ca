from __future__ import annotations


class RepoctxError(Exception):
    """Base class for scan errors."""


class WalkError(RepoctxError):
    """Enumerating the directory tree failed.

    Raised only after every reader has finished; the underlying OSError is
    available as ``__cause__``.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"walk failed at {path}: {message}")
        self.path = path


class SinkError(RepoctxError):
    """The sink raised while handling a record."""

    def __init__(self, path: str) -> None:
        super().__init__(f"sink raised while handling {path}")
        self.path = path
