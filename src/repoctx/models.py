from __future__ import annotations

from dataclasses import dataclass

@dataclass(frozen=True)
class FileRecord:
    """One accepted, successfully read file.

    Ownership passes to the sink; nothing else keeps a reference.
    """
    path: str
    content: bytes

@dataclass
class ScanStats:
    """Statistics from a scan operation."""

    files_dispatched: int = 0
    files_read: int = 0
    files_failed: int = 0
    elapsed_seconds: float = 0.0
    cancelled: bool = False

    def merge(self, other: "ScanStats") -> None:
        self.files_read += other.files_read
        self.files_failed += other.files_failed
