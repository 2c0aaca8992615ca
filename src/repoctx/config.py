from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import os
import tomllib
from typing import Any, Iterable

from .scanner.filter import load_ignore_patterns

DEFAULT_IGNORED_DIRS = frozenset({".git", "node_modules"})
DEFAULT_EXTENSIONS = (".svelte", ".ts", ".go", ".html", ".sql")
DEFAULT_IGNORE_FILE = ".gitignore"
DEFAULT_QUEUE_SIZE = 100

def _expand(p: str) -> str:
    return os.path.expandvars(os.path.expanduser(p))

def default_workers() -> int:
    return os.cpu_count() or 1

def _str_list(table: dict[str, Any], key: str, default: Iterable[str]) -> list[str]:
    value = table.get(key)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Invalid {key}: {value!r}. Must be a list of strings.")
    return value

def _validate_extensions(extensions: Iterable[str]) -> frozenset[str]:
    exts = frozenset(extensions)
    for ext in exts:
        if not ext.startswith("."):
            raise ValueError(f"Invalid extension: {ext!r}. Extensions must start with '.'.")
    return exts

@dataclass(frozen=True)
class ScanConfig:
    """Everything one scan needs, fixed before the walk starts.

    ``glob_patterns`` are matched against base names only; any match excludes
    a file, so their order does not matter.
    """

    root: Path
    ignored_dir_names: frozenset[str] = DEFAULT_IGNORED_DIRS
    glob_patterns: tuple[str, ...] = ()
    allowed_extensions: frozenset[str] = frozenset(DEFAULT_EXTENSIONS)

    follow_symlinks: bool = False
    workers: int = field(default_factory=default_workers)
    queue_size: int = DEFAULT_QUEUE_SIZE

    def __post_init__(self):
        """Normalize collection types and expand ~ and environment variables in root."""
        if isinstance(self.root, str):
            object.__setattr__(self, 'root', Path(_expand(self.root)))
        object.__setattr__(self, 'ignored_dir_names', frozenset(self.ignored_dir_names))
        object.__setattr__(self, 'glob_patterns', tuple(self.glob_patterns))
        object.__setattr__(self, 'allowed_extensions', _validate_extensions(self.allowed_extensions))

        if self.workers < 1:
            raise ValueError(f"Invalid workers: {self.workers}. Must be at least 1.")
        if self.queue_size < 1:
            raise ValueError(f"Invalid queue_size: {self.queue_size}. Must be at least 1.")

    @staticmethod
    def from_ignore_file(
        root: str | Path,
        ignore_file: str | Path | None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        **kwargs: Any,
    ) -> "ScanConfig":
        """Build a config with patterns read from ``ignore_file``.

        A missing ignore-file leaves the pattern set empty.
        """
        return ScanConfig(
            root=root,
            glob_patterns=load_ignore_patterns(ignore_file),
            allowed_extensions=extensions,
            **kwargs,
        )

    @staticmethod
    def from_toml(path: str | Path) -> "ScanConfig":
        path = Path(path)
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        scan = data.get("scan")
        if scan is None:
            raise ValueError(f"Missing [scan] table in {path}")

        base = path.resolve().parent
        root = Path(_expand(scan.get("root", ".")))
        if not root.is_absolute():
            root = base / root

        # The ignore-file defaults to the one at the scan root
        ignore_value = scan.get("ignore_file")
        if ignore_value is None:
            ignore_file = root / DEFAULT_IGNORE_FILE
        else:
            ignore_file = Path(_expand(ignore_value))
            if not ignore_file.is_absolute():
                ignore_file = base / ignore_file

        patterns = load_ignore_patterns(ignore_file) + tuple(_str_list(scan, "patterns", ()))

        workers = int(scan.get("workers", default_workers()))
        if workers <= 0 or workers > 1024:
            raise ValueError(f"Invalid workers: {workers}. Must be between 1 and 1024.")

        queue_size = int(scan.get("queue_size", DEFAULT_QUEUE_SIZE))
        if queue_size <= 0 or queue_size > 100_000:
            raise ValueError(f"Invalid queue_size: {queue_size}. Must be between 1 and 100000.")

        return ScanConfig(
            root=root.resolve(),
            ignored_dir_names=frozenset(_str_list(scan, "ignored_dirs", DEFAULT_IGNORED_DIRS)),
            glob_patterns=patterns,
            allowed_extensions=_str_list(scan, "extensions", DEFAULT_EXTENSIONS),
            follow_symlinks=bool(scan.get("follow_symlinks", False)),
            workers=workers,
            queue_size=queue_size,
        )
