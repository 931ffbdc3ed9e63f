import os
from pathlib import Path

from .constants import HIDDEN_PREFIX


def should_ignore_path(name: str) -> bool:
    """Check if an entry should be hidden from file listings."""
    return name.startswith(HIDDEN_PREFIX)


def list_repo_files(root: Path) -> list[str]:
    """
    Lists the files of a repository as paths relative to `root`.

    Hidden directories are pruned together with their contents and hidden
    files are omitted. Results come depth-first, in lexical order per directory.

    Raises:
        OSError: If any directory cannot be read.
    """
    files: list[str] = []

    def _raise(error: OSError) -> None:
        raise error

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(name for name in dirnames if not should_ignore_path(name))
        for name in sorted(filenames):
            if should_ignore_path(name):
                continue
            files.append((Path(dirpath) / name).relative_to(root).as_posix())
    return files
