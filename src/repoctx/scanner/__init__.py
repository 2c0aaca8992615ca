from .filter import PathFilter, load_ignore_patterns
from .walker import ConcurrentWalker, Sink, scan

__all__ = ["PathFilter", "load_ignore_patterns", "ConcurrentWalker", "Sink", "scan"]
