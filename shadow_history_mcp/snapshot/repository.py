"""
The snapshot store: a private git repository holding mirrored copies of a selected repository.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from shadow_history_mcp.snapshot.errors import NothingToCommitError, SnapshotError, VcsCommandError
from shadow_history_mcp.snapshot.mirror import mirror_tree
from shadow_history_mcp.tools.run import run
from shadow_history_mcp.tools.utils.constants import VCS_METADATA_DIR

# Настройка логирования
logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_COMMIT_LABEL = "Claude session commit"
# `git commit` exits with 1 when the index matches HEAD
NOTHING_TO_COMMIT_EXIT_CODE = 1


def format_commit_message(label: str, message: str, now: datetime | None = None) -> str:
    """Builds `"<label> - <message> [YYYY-MM-DD HH:MM:SS]"` using local time."""
    now = now or datetime.now()
    return f"{label} - {message} [{now.strftime(TIMESTAMP_FORMAT)}]"


class SnapshotRepository:
    """
    Wraps the VCS program for one snapshot store.

    Every commit mirrors the live repository into the store and then runs
    `add .` and `commit -m` inside it. Commits on the same instance are
    serialized by an asyncio lock, so overlapping cycles never interleave
    their copies.
    """

    def __init__(
        self,
        store_path: Path,
        vcs_binary: str = "git",
        commit_label: str = DEFAULT_COMMIT_LABEL,
        history_max_count: int = 20,
        timeout: float | None = None,
        identity: dict[str, str] | None = None,
        skip_unchanged: bool = False,
    ) -> None:
        self.store_path = store_path
        self.vcs_binary = vcs_binary
        self.commit_label = commit_label
        self.history_max_count = history_max_count
        self.timeout = timeout
        self.identity = identity or {}
        self.skip_unchanged = skip_unchanged
        self._lock = asyncio.Lock()

    async def _vcs(self, *args: str) -> tuple[int, str, str]:
        try:
            return await run(
                [self.vcs_binary, *args],
                cwd=self.store_path,
                timeout=self.timeout,
                env=self.identity,
            )
        except FileNotFoundError as e:
            raise SnapshotError(f"VCS program '{self.vcs_binary}' could not be started: {e}") from e
        except TimeoutError as e:
            raise SnapshotError(str(e)) from e

    async def init(self) -> None:
        """Creates the store directory if needed and runs `init` inside it."""
        try:
            self.store_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SnapshotError(f"Failed to create snapshot store {self.store_path}: {e}") from e

        return_code, stdout, stderr = await self._vcs("init")
        if return_code != 0:
            raise VcsCommandError("init", return_code, stdout + stderr)
        logger.info(f"Initialized snapshot store at {self.store_path}")

    async def commit(self, source_root: Path, message: str) -> str:
        """
        Mirrors `source_root` into the store and commits the result.

        Returns:
            The full commit message that was recorded.

        Raises:
            NothingToCommitError: If the mirrored tree matches the last commit.
            VcsCommandError: If `add` or `commit` fails for any other reason.
            MirrorError: If copying the tree fails.
        """
        async with self._lock:
            excluded = {VCS_METADATA_DIR, self.store_path.name}
            copied = await asyncio.to_thread(
                mirror_tree, source_root, self.store_path, excluded, self.skip_unchanged
            )
            logger.debug(f"Mirror cycle copied {copied} files into {self.store_path}")

            return_code, stdout, stderr = await self._vcs("add", ".")
            if return_code != 0:
                raise VcsCommandError("add", return_code, stdout + stderr)

            full_message = format_commit_message(self.commit_label, message)
            return_code, stdout, stderr = await self._vcs("commit", "-m", full_message)
            if return_code == NOTHING_TO_COMMIT_EXIT_CODE:
                raise NothingToCommitError()
            if return_code != 0:
                raise VcsCommandError("commit", return_code, stdout + stderr)

        logger.info(f"Committed snapshot: {full_message}")
        return full_message

    async def log(self) -> list[str]:
        """Returns the most recent commits, one `<id> <subject>` entry per commit."""
        return_code, stdout, stderr = await self._vcs(
            "log", "--oneline", f"--max-count={self.history_max_count}"
        )
        if return_code != 0:
            # A freshly initialized store has no HEAD yet
            head_code, _, _ = await self._vcs("rev-parse", "--quiet", "--verify", "HEAD")
            if head_code != 0:
                return []
            raise VcsCommandError("log", return_code, stdout + stderr)
        return [line for line in stdout.splitlines() if line.strip()]

    @staticmethod
    def exists(store_path: Path) -> bool:
        """True if `store_path` holds an initialized VCS repository."""
        return (store_path / VCS_METADATA_DIR / "config").is_file()
