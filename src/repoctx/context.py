from __future__ import annotations

import threading
from pathlib import Path

from .models import FileRecord
from .paths import relpath

FILE_HEADER = "\n--- FILE: {path} ---\n{text}\n"


class ContextCollector:
    """Thread-safe sink that concatenates every record into one text blob.

    Records arrive in whatever order the readers finish; ``render(sort=True)``
    orders them by path for reproducible output.

    Usage:
        collector = ContextCollector()
        ConcurrentWalker(cfg).scan(cfg.workers, collector)
        text = collector.render()
    """

    def __init__(self, root: Path | None = None, encoding: str = "utf-8") -> None:
        # Headers show paths relative to root when one is given
        self.root = root
        self.encoding = encoding
        self._parts: list[tuple[str, str]] = []
        self._total_bytes = 0
        self._lock = threading.Lock()

    def __call__(self, record: FileRecord) -> None:
        text = record.content.decode(self.encoding, errors="replace")
        path = relpath(self.root, Path(record.path)) if self.root is not None else record.path
        with self._lock:
            self._parts.append((path, text))
            self._total_bytes += len(record.content)

    @property
    def file_count(self) -> int:
        with self._lock:
            return len(self._parts)

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._total_bytes

    def paths(self) -> list[str]:
        with self._lock:
            return [p for p, _ in self._parts]

    def render(self, sort: bool = False) -> str:
        with self._lock:
            parts = list(self._parts)
        if sort:
            parts.sort(key=lambda item: item[0])
        return "".join(FILE_HEADER.format(path=p, text=t) for p, t in parts)
