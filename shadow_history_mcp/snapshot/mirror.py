"""Copies a repository tree into the snapshot store."""

import logging
import os
import shutil
import stat
from collections.abc import Iterable
from pathlib import Path

from shadow_history_mcp.snapshot.errors import MirrorError
from shadow_history_mcp.tools.utils.constants import RESERVED_CONTROL_DIRS

logger = logging.getLogger(__name__)


def _raise(error: OSError) -> None:
    raise error


def _is_unchanged(src_stat: os.stat_result, dest: Path) -> bool:
    try:
        dest_stat = dest.stat()
    except FileNotFoundError:
        return False
    return dest_stat.st_size == src_stat.st_size and dest_stat.st_mtime_ns == src_stat.st_mtime_ns


def copy_file(src: Path, dest: Path) -> None:
    """Creates or truncates `dest` and copies every byte of `src` into it."""
    with open(src, "rb") as src_file, open(dest, "wb") as dest_file:
        src_file.seek(0)
        shutil.copyfileobj(src_file, dest_file)


def mirror_tree(
    source: Path,
    dest: Path,
    excluded_names: Iterable[str] = RESERVED_CONTROL_DIRS,
    skip_unchanged: bool = False,
) -> int:
    """
    Mirrors `source` into `dest`, skipping any subtree whose name is in `excluded_names`.

    Directories are created as needed and receive the permission bits of their
    source directory. Files are always copied in full unless `skip_unchanged`
    is set, in which case files with identical size and mtime are left alone.
    Files deleted from `source` are not removed from `dest`.

    Args:
        source: The repository root to copy from.
        dest: The snapshot store to copy into.
        excluded_names: Base names of directories that are never copied.
        skip_unchanged: Skip files whose size and mtime match the last copy.

    Returns:
        The number of files copied.

    Raises:
        MirrorError: On the first I/O failure. Files copied so far are kept.
    """
    excluded = frozenset(excluded_names)
    dir_modes: list[tuple[Path, int]] = []
    copied = 0
    current = source

    try:
        for dirpath, dirnames, filenames in os.walk(source, onerror=_raise):
            current = Path(dirpath)
            # Prune reserved subtrees in place so os.walk never descends into them
            dirnames[:] = sorted(name for name in dirnames if name not in excluded)

            rel_dir = current.relative_to(source)
            target_dir = dest / rel_dir
            target_dir.mkdir(parents=True, exist_ok=True)
            if rel_dir != Path("."):
                dir_modes.append((target_dir, stat.S_IMODE(current.stat().st_mode)))

            for name in sorted(filenames):
                if name in excluded:
                    continue
                current = Path(dirpath) / name
                target = target_dir / name
                if skip_unchanged:
                    src_stat = current.stat()
                    if _is_unchanged(src_stat, target):
                        continue
                    copy_file(current, target)
                    os.utime(target, ns=(src_stat.st_atime_ns, src_stat.st_mtime_ns))
                else:
                    copy_file(current, target)
                copied += 1

        # Modes are applied last so read-only directories can still be filled
        for target_dir, mode in reversed(dir_modes):
            current = target_dir
            os.chmod(target_dir, mode)
    except OSError as e:
        logger.error(f"Mirroring {source} into {dest} failed at {current}: {e}")
        raise MirrorError(current, e) from e

    logger.debug(f"Mirrored {copied} files from {source} into {dest}")
    return copied
