"""Shared filesystem helpers — recursive copy, sizing, read-only handling."""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def format_size(size_bytes: int) -> str:
    """Format byte count to human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"


def dir_size(path: Path) -> int:
    """Sum of file sizes below *path*. Unreadable entries are ignored."""
    if not path.exists():
        return 0
    total = 0
    for child in path.rglob("*"):
        try:
            if child.is_file() and not child.is_symlink():
                total += child.stat().st_size
        except OSError:
            continue
    return total


def is_readonly(path: Path) -> bool:
    """True when no write bit is set (the read-only attribute on Windows)."""
    return stat.S_IMODE(path.stat().st_mode) & _WRITE_BITS == 0


def set_readonly(path: Path) -> None:
    mode = stat.S_IMODE(path.stat().st_mode)
    os.chmod(path, mode & ~_WRITE_BITS)


def clear_readonly(path: Path) -> None:
    """Clear the read-only attribute on *path* and everything below it.

    Symlinks are skipped so their targets are left untouched.
    """
    if path.is_symlink() or not path.exists():
        return
    targets = [path]
    if path.is_dir():
        for dirpath, dirnames, filenames in os.walk(path):
            targets.extend(Path(dirpath) / name for name in dirnames + filenames)
    for target in targets:
        if target.is_symlink():
            continue
        try:
            mode = stat.S_IMODE(target.stat().st_mode)
            if mode & stat.S_IWUSR == 0:
                os.chmod(target, mode | stat.S_IWUSR)
        except OSError:
            continue


def force_remove(path: Path) -> None:
    """Remove a file or directory tree, clearing read-only first.

    Raises OSError if removal fails.
    """
    if not path.exists() and not path.is_symlink():
        return
    clear_readonly(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def copy_tree(src: Path, dst: Path, exclude: str | None = None) -> None:
    """
    Recursively copy *src* into *dst*, preserving relative paths.

    Directories are created before their files.  Each file is copied on
    its own; a failure part-way leaves whatever was already copied.
    A file named *exclude* is skipped at any depth.  Symlinks are copied
    as links.
    """
    if not src.is_dir():
        raise NotADirectoryError(f"Source is not a directory: {src}")

    dst.mkdir(parents=True, exist_ok=True)
    for dirpath, dirnames, filenames in os.walk(src):
        current = Path(dirpath)
        target_dir = dst / current.relative_to(src)
        target_dir.mkdir(parents=True, exist_ok=True)
        for dirname in dirnames:
            source = current / dirname
            if source.is_symlink():
                os.symlink(os.readlink(source), target_dir / dirname, target_is_directory=True)
            else:
                (target_dir / dirname).mkdir(exist_ok=True)
        for filename in filenames:
            if exclude and filename == exclude:
                continue
            shutil.copy2(current / filename, target_dir / filename, follow_symlinks=False)
