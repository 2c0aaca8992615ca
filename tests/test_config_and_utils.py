"""
Tests for configuration parsing, utilities, and helper functions.
"""

import os
from pathlib import Path

import pytest

from repoctx.config import (
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORED_DIRS,
    DEFAULT_QUEUE_SIZE,
    ScanConfig,
)
from repoctx.models import ScanStats
from repoctx.paths import relpath


def _write_toml(tmp_path: Path, body: str) -> Path:
    cfg_path = tmp_path / "repoctx.toml"
    cfg_path.write_text(body, encoding="utf-8")
    return cfg_path


class TestScanConfig:
    """Test scan configuration construction and validation."""

    def test_config_defaults(self, tmp_path: Path):
        """Test that config has the defaults of the original command line."""
        config = ScanConfig(root=tmp_path)

        assert config.ignored_dir_names == DEFAULT_IGNORED_DIRS
        assert config.allowed_extensions == frozenset(DEFAULT_EXTENSIONS)
        assert config.glob_patterns == ()
        assert config.queue_size == DEFAULT_QUEUE_SIZE
        assert config.workers >= 1
        assert config.follow_symlinks is False

    def test_config_string_root_is_expanded(self, tmp_path: Path, monkeypatch):
        """Test that ~ and environment variables are expanded in root."""
        monkeypatch.setenv("REPOCTX_TEST_ROOT", str(tmp_path))

        config = ScanConfig(root="$REPOCTX_TEST_ROOT/src")

        assert config.root == tmp_path / "src"

    def test_config_normalizes_collections(self, tmp_path: Path):
        """Test lists and sets become immutable collections."""
        config = ScanConfig(
            root=tmp_path,
            ignored_dir_names=[".git", ".git", "dist"],
            glob_patterns=["*.min.js"],
            allowed_extensions={".js"},
        )

        assert config.ignored_dir_names == frozenset({".git", "dist"})
        assert config.glob_patterns == ("*.min.js",)
        assert isinstance(config.allowed_extensions, frozenset)

    def test_config_is_immutable(self, tmp_path: Path):
        config = ScanConfig(root=tmp_path)

        with pytest.raises(AttributeError):
            config.root = tmp_path / "other"  # type: ignore[misc]

    def test_config_rejects_extension_without_dot(self, tmp_path: Path):
        with pytest.raises(ValueError, match="must start with"):
            ScanConfig(root=tmp_path, allowed_extensions={"go"})

    @pytest.mark.parametrize("field", ["workers", "queue_size"])
    def test_config_rejects_non_positive_sizes(self, tmp_path: Path, field: str):
        with pytest.raises(ValueError):
            ScanConfig(root=tmp_path, **{field: 0})

    def test_from_ignore_file_loads_patterns(self, tmp_path: Path):
        ignore = tmp_path / ".gitignore"
        ignore.write_text("# build output\n*.pb.go\n\n", encoding="utf-8")

        config = ScanConfig.from_ignore_file(tmp_path, ignore, [".go"], workers=3)

        assert config.glob_patterns == ("*.pb.go",)
        assert config.allowed_extensions == frozenset({".go"})
        assert config.workers == 3

    def test_from_ignore_file_tolerates_missing_file(self, tmp_path: Path):
        config = ScanConfig.from_ignore_file(tmp_path, tmp_path / "nope", [".go"])

        assert config.glob_patterns == ()


class TestScanConfigToml:
    """Test loading configuration from TOML."""

    def test_toml_defaults(self, tmp_path: Path):
        cfg_path = _write_toml(tmp_path, "[scan]\n")

        config = ScanConfig.from_toml(cfg_path)

        assert config.root == tmp_path.resolve()
        assert config.allowed_extensions == frozenset(DEFAULT_EXTENSIONS)
        assert config.ignored_dir_names == DEFAULT_IGNORED_DIRS
        assert config.glob_patterns == ()

    def test_toml_custom_values(self, tmp_path: Path):
        (tmp_path / "repo").mkdir()
        (tmp_path / "patterns.txt").write_text("*.gen.ts\n", encoding="utf-8")
        cfg_path = _write_toml(tmp_path, """
[scan]
root = "repo"
ignore_file = "patterns.txt"
extensions = [".ts", ".svelte"]
ignored_dirs = [".git", "dist"]
patterns = ["*.spec.ts"]
workers = 4
queue_size = 16
follow_symlinks = true
""")

        config = ScanConfig.from_toml(cfg_path)

        assert config.root == (tmp_path / "repo").resolve()
        assert config.glob_patterns == ("*.gen.ts", "*.spec.ts")
        assert config.allowed_extensions == frozenset({".ts", ".svelte"})
        assert config.ignored_dir_names == frozenset({".git", "dist"})
        assert config.workers == 4
        assert config.queue_size == 16
        assert config.follow_symlinks is True

    def test_toml_default_ignore_file_is_under_root(self, tmp_path: Path):
        repo = tmp_path / "repo"
        repo.mkdir()
        (repo / ".gitignore").write_text("vendor_*.go\n", encoding="utf-8")
        cfg_path = _write_toml(tmp_path, '[scan]\nroot = "repo"\n')

        config = ScanConfig.from_toml(cfg_path)

        assert config.glob_patterns == ("vendor_*.go",)

    def test_toml_missing_ignore_file_is_tolerated(self, tmp_path: Path):
        cfg_path = _write_toml(tmp_path, '[scan]\nignore_file = "absent.ignore"\n')

        config = ScanConfig.from_toml(cfg_path)

        assert config.glob_patterns == ()

    def test_toml_absolute_root(self, tmp_path: Path):
        root = tmp_path / "elsewhere"
        root.mkdir()
        cfg_dir = tmp_path / "cfg"
        cfg_dir.mkdir()
        cfg_path = _write_toml(cfg_dir, f'[scan]\nroot = "{root.as_posix()}"\n')

        config = ScanConfig.from_toml(cfg_path)

        assert config.root == root.resolve()

    def test_toml_missing_scan_table(self, tmp_path: Path):
        cfg_path = _write_toml(tmp_path, "[other]\nkey = 1\n")

        with pytest.raises(ValueError, match=r"\[scan\]"):
            ScanConfig.from_toml(cfg_path)

    @pytest.mark.parametrize("body", [
        "[scan]\nworkers = 0\n",
        "[scan]\nworkers = 5000\n",
        "[scan]\nqueue_size = 0\n",
        '[scan]\nextensions = ["go"]\n',
        '[scan]\npatterns = "*.go"\n',
        '[scan]\nignored_dirs = ".git"\n',
        '[scan]\nextensions = ".go"\n',
        '[scan]\npatterns = ["*.go", 3]\n',
    ])
    def test_toml_invalid_values(self, tmp_path: Path, body: str):
        cfg_path = _write_toml(tmp_path, body)

        with pytest.raises(ValueError):
            ScanConfig.from_toml(cfg_path)

    def test_toml_string_where_list_expected_names_the_key(self, tmp_path: Path):
        cfg_path = _write_toml(tmp_path, '[scan]\npatterns = "*_test.go"\n')

        with pytest.raises(ValueError, match="patterns"):
            ScanConfig.from_toml(cfg_path)


class TestScanStats:

    def test_merge_adds_reader_counts(self):
        total = ScanStats(files_dispatched=5)
        total.merge(ScanStats(files_read=2, files_failed=1))
        total.merge(ScanStats(files_read=2))

        assert total.files_dispatched == 5
        assert total.files_read == 4
        assert total.files_failed == 1


class TestPathUtilities:
    """Test path manipulation utilities."""

    def test_relpath_basic(self, tmp_path: Path):
        """Test relative path calculation."""
        root = tmp_path / "root"
        file_path = root / "subdir" / "file.txt"

        rel = relpath(root, file_path)

        assert rel == "subdir/file.txt"

    def test_relpath_with_dots(self, tmp_path: Path):
        """Test relpath doesn't include dot components."""
        root = tmp_path / "root"

        rel = relpath(root, root / "file.txt")

        assert ".." not in rel
        assert rel == "file.txt"

    def test_relpath_does_not_resolve_symlinks(self, tmp_path: Path):
        root = tmp_path / "root"
        root.mkdir()
        outside = tmp_path / "outside.txt"
        outside.write_text("x")
        link = root / "link.txt"
        try:
            os.symlink(outside, link)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        assert relpath(root, link) == "link.txt"
