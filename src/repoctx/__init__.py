"""repoctx: concurrent repository scanner that streams source files to a sink.

Walks a directory tree, prunes ignored directories, filters files by
extension and ignore-file glob patterns, and reads the survivors on a bounded
pool of reader threads.

Public API:
- ScanConfig
- PathFilter
- ConcurrentWalker
- ContextCollector
"""

from .config import ScanConfig
from .context import ContextCollector
from .errors import RepoctxError, SinkError, WalkError
from .models import FileRecord, ScanStats
from .scanner import ConcurrentWalker, PathFilter, scan

__all__ = [
    "ScanConfig",
    "PathFilter",
    "ConcurrentWalker",
    "ContextCollector",
    "FileRecord",
    "ScanStats",
    "RepoctxError",
    "WalkError",
    "SinkError",
    "scan",
]
