from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import typer

from .config import DEFAULT_EXTENSIONS, DEFAULT_IGNORE_FILE, ScanConfig
from .context import ContextCollector
from .errors import RepoctxError
from .scanner import ConcurrentWalker

app = typer.Typer(add_completion=False, no_args_is_help=True)

def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def _load_cfg(directory: str | None, config: str | None, ignore_file: str | None, ext: list[str] | None) -> ScanConfig:
    if config:
        if directory is not None or ignore_file is not None:
            raise ValueError("--dir and --ignore-file cannot be combined with --config")
        cfg = ScanConfig.from_toml(config)
        if ext:
            cfg = dataclasses.replace(cfg, allowed_extensions=frozenset(ext))
        return cfg
    root = Path(directory if directory is not None else ".")
    ignore = Path(ignore_file) if ignore_file else root / DEFAULT_IGNORE_FILE
    return ScanConfig.from_ignore_file(root, ignore, ext or DEFAULT_EXTENSIONS)

@app.command()
def init(root: str = typer.Option(".", help="Directory to scan"),
         out: str = typer.Option("repoctx.toml", help="Write example config to this path")):
    """Write a starter repoctx.toml."""
    outp = Path(out)
    exts = ", ".join(f'"{e}"' for e in DEFAULT_EXTENSIONS)
    outp.write_text(f"""[scan]
root = "{root}"
# Glob patterns, one per line, matched against file base names
ignore_file = "{DEFAULT_IGNORE_FILE}"
extensions = [{exts}]
ignored_dirs = [".git", "node_modules"]
# Extra patterns added to the ignore-file's
patterns = []
# Defaults to the number of CPUs
# workers = 8
queue_size = 100
follow_symlinks = false
""", encoding="utf-8")
    typer.echo(f"Wrote {outp}")

@app.command()
def scan(
    directory: str = typer.Option(None, "--dir", help="The directory to analyze (default: current directory)"),
    config: str = typer.Option(None, help="Read settings from a TOML config instead of flags"),
    ignore_file: str = typer.Option(None, help="Ignore-file with glob patterns (default: <dir>/.gitignore)"),
    ext: list[str] = typer.Option(None, help="Allowed extension, repeatable (e.g. --ext .py --ext .md)"),
    workers: int = typer.Option(None, help="Override the number of reader threads"),
    out: str = typer.Option(None, help="Write the collected context to this file"),
    show: bool = typer.Option(False, "--print", help="Print the collected context to stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Scan a directory and collect matching files into one context blob."""
    _setup_logging(verbose)
    try:
        cfg = _load_cfg(directory, config, ignore_file, ext)
    except (ValueError, OSError) as e:
        raise typer.BadParameter(str(e))
    if workers is not None and workers < 1:
        raise typer.BadParameter(f"--workers must be at least 1, got {workers}")

    typer.echo(f"Scanning {cfg.root}...")
    collector = ContextCollector(root=cfg.root if cfg.root.is_dir() else cfg.root.parent)
    try:
        stats = ConcurrentWalker(cfg).scan(workers, collector)
    except RepoctxError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"{collector.file_count} files loaded into context ({stats.elapsed_seconds:.2f}s)")
    if stats.files_failed > 0:
        typer.echo(f"  ({stats.files_failed} files could not be read)")

    text = collector.render(sort=True)
    if out:
        Path(out).write_text(text, encoding="utf-8")
        typer.echo(f"Wrote {out}")
    if show:
        typer.echo(text)

if __name__ == "__main__":
    app()
