"""Walk a tree on the calling thread and read accepted files on a reader pool.

The walk is the single producer. Accepted paths go through a bounded queue to
``worker_count`` reader threads; a full queue blocks the walk, so memory stays
bounded no matter how large the tree is. Once the walk stops (done, failed or
cancelled) every reader gets a sentinel, drains what is left and exits, and
``scan`` joins them all before it returns or raises.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator

from ..errors import SinkError, WalkError
from ..models import FileRecord, ScanStats
from .filter import PathFilter

if TYPE_CHECKING:
    from ..config import ScanConfig

logger = logging.getLogger(__name__)

Sink = Callable[[FileRecord], None]

# Queue sentinel; one is enqueued per reader when the walk is over
_CLOSED = object()


@dataclass
class _ReaderResult:
    stats: ScanStats = field(default_factory=ScanStats)
    sink_error: tuple[str, BaseException] | None = None


@dataclass
class _WalkState:
    """Per-scan plumbing, discarded when ``scan`` returns."""

    paths: queue.Queue
    stop: threading.Event = field(default_factory=threading.Event)
    readers: list[threading.Thread] = field(default_factory=list)
    results: list[_ReaderResult] = field(default_factory=list)
    walk_error: OSError | None = None
    cancelled: bool = False


def _raise(err: OSError) -> None:
    raise err


@dataclass
class ConcurrentWalker:
    cfg: ScanConfig

    def __post_init__(self) -> None:
        self.path_filter = PathFilter.from_config(self.cfg)

    def scan(
        self,
        worker_count: int | None,
        sink: Sink,
        cancel: threading.Event | None = None,
    ) -> ScanStats:
        """Scan ``cfg.root`` and hand every accepted, readable file to ``sink``.

        ``sink`` is called from reader threads, possibly concurrently and in
        no particular order; any synchronization it needs is its own.

        Files that cannot be read are skipped. An error enumerating the tree
        stops the walk and is raised as WalkError once every reader is done;
        records already delivered stay delivered.

        Setting ``cancel`` stops the walk at the next directory or file.
        Paths already queued are still read and delivered.
        """
        if worker_count is None:
            worker_count = self.cfg.workers
        if worker_count < 1:
            raise ValueError(f"Invalid worker_count: {worker_count}. Must be at least 1.")

        start = time.time()
        state = _WalkState(paths=queue.Queue(maxsize=self.cfg.queue_size))
        for i in range(worker_count):
            result = _ReaderResult()
            thread = threading.Thread(
                target=self._read_loop,
                args=(state, sink, result),
                name=f"repoctx-reader-{i}",
                daemon=True,
            )
            state.results.append(result)
            state.readers.append(thread)
            thread.start()

        logger.info(f"Scanning {self.cfg.root} with {worker_count} readers")

        stats = ScanStats()
        try:
            for path in self._walk(state, cancel):
                state.paths.put(path)
                stats.files_dispatched += 1
        except OSError as e:
            state.walk_error = e
        finally:
            for _ in state.readers:
                state.paths.put(_CLOSED)
            for thread in state.readers:
                thread.join()

        sink_error = None
        for result in state.results:
            stats.merge(result.stats)
            if sink_error is None and result.sink_error is not None:
                sink_error = result.sink_error
        stats.cancelled = state.cancelled
        stats.elapsed_seconds = time.time() - start

        if state.walk_error is not None:
            err = state.walk_error
            path = err.filename if err.filename is not None else str(self.cfg.root)
            logger.warning(f"Walk aborted after {stats.files_dispatched} files: {err}")
            raise WalkError(os.fsdecode(path), err.strerror or str(err)) from err
        if sink_error is not None:
            path, exc = sink_error
            raise SinkError(path) from exc

        logger.info(
            f"Scan complete: {stats.files_read} files read, "
            f"{stats.files_failed} unreadable in {stats.elapsed_seconds:.2f}s"
        )
        return stats

    def _walk(self, state: _WalkState, cancel: threading.Event | None) -> Iterator[str]:
        """Yield accepted file paths, depth-first in lexical order."""

        def stopped() -> bool:
            if state.stop.is_set():
                return True
            if cancel is not None and cancel.is_set():
                state.cancelled = True
                return True
            return False

        root = os.fspath(self.cfg.root)
        if os.path.isfile(root):
            name = os.path.basename(root)
            if self.path_filter.should_include(root, name):
                yield root
            return
        if not self.path_filter.should_descend(os.path.basename(os.path.normpath(root))):
            return

        for dirpath, dirnames, filenames in os.walk(
            root, onerror=_raise, followlinks=self.cfg.follow_symlinks
        ):
            if stopped():
                return
            # Pruning in place keeps os.walk out of ignored subtrees entirely
            dirnames[:] = sorted(d for d in dirnames if self.path_filter.should_descend(d))
            for name in sorted(filenames):
                if stopped():
                    return
                path = os.path.join(dirpath, name)
                if self.path_filter.should_include(path, name):
                    yield path

    def _read_loop(self, state: _WalkState, sink: Sink, result: _ReaderResult) -> None:
        while True:
            path = state.paths.get()
            if path is _CLOSED:
                return
            # After a sink failure the rest of the queue is only drained
            if state.stop.is_set():
                continue

            try:
                with open(path, "rb") as f:
                    content = f.read()
            except OSError as e:
                result.stats.files_failed += 1
                logger.debug(f"Skipping unreadable file {path}: {e}")
                continue

            result.stats.files_read += 1
            try:
                sink(FileRecord(path=path, content=content))
            except BaseException as e:
                # Recorded even for SystemExit so this reader keeps draining
                logger.error(f"Sink failed for {path}: {e!r}")
                result.sink_error = (path, e)
                state.stop.set()


def scan(cfg: ScanConfig, worker_count: int | None, sink: Sink) -> ScanStats:
    """Run one scan of ``cfg.root``; see ConcurrentWalker.scan."""
    return ConcurrentWalker(cfg).scan(worker_count, sink)
