"""Include/exclude decisions for directory entries.

Directory pruning works on exact names only; file filtering checks the
extension first and then shell-glob patterns against the base name. Patterns
never see the full path, so ``build/*.go`` or ``**/x`` style entries in an
ignore-file simply never match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ..paths import extension

if TYPE_CHECKING:
    from ..config import ScanConfig

logger = logging.getLogger(__name__)


def _normalize_pattern(pattern: str) -> str:
    """Accept ``[^...]`` as class negation alongside fnmatch's ``[!...]``."""
    return pattern.replace("[^", "[!")


def parse_ignore_lines(lines: Iterable[str]) -> tuple[str, ...]:
    """Keep every stripped line that is neither blank nor a ``#`` comment."""
    patterns: list[str] = []
    for line in lines:
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return tuple(patterns)


def load_ignore_patterns(ignore_file: str | Path | None) -> tuple[str, ...]:
    """Load glob patterns from an ignore-file.

    A missing or unreadable file is not an error: filtering is best-effort
    and the scan proceeds with no patterns.
    """
    if ignore_file is None:
        return ()
    path = Path(ignore_file)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"No ignore patterns loaded from {path}: {e}")
        return ()
    patterns = parse_ignore_lines(text.splitlines())
    logger.debug(f"Loaded {len(patterns)} ignore patterns from {path}")
    return patterns


@dataclass(frozen=True)
class PathFilter:
    ignored_dir_names: frozenset[str] = field(default_factory=frozenset)
    glob_patterns: tuple[str, ...] = ()
    allowed_extensions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_config(cls, cfg: "ScanConfig") -> "PathFilter":
        return cls(
            ignored_dir_names=cfg.ignored_dir_names,
            glob_patterns=cfg.glob_patterns,
            allowed_extensions=cfg.allowed_extensions,
        )

    def should_descend(self, dir_name: str) -> bool:
        return dir_name not in self.ignored_dir_names

    def should_include(self, file_path: str, file_name: str) -> bool:
        if extension(file_name) not in self.allowed_extensions:
            return False
        for pattern in self.glob_patterns:
            if fnmatchcase(file_name, _normalize_pattern(pattern)):
                logger.debug(f"Excluded {file_path} (matches {pattern!r})")
                return False
        return True
