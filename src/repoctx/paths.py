from __future__ import annotations

import os
from pathlib import Path

def relpath(root: Path, path: Path) -> str:
    """Forward-slash path of ``path`` relative to ``root``, without resolving symlinks."""
    return os.path.relpath(path, root).replace("\\", "/")

def extension(file_name: str) -> str:
    """Suffix from the last dot of a base name, "" when there is none.

    Unlike ``os.path.splitext`` a leading dot counts, so ``.env`` has the
    extension ``.env``.
    """
    dot = file_name.rfind(".")
    if dot < 0:
        return ""
    return file_name[dot:]
