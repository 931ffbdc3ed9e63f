"""
Delayed background commits.

After the assistant finishes, its file writes may still be settling, so the
resulting commit is deferred by a fixed delay and runs as an asyncio task.
Each task is registered under an invocation id; callers can cancel it while
it waits, and its outcome is recorded instead of being discarded.
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from datetime import datetime
from pathlib import Path

from shadow_history_mcp.models.session import CommitOutcome, CommitStatus
from shadow_history_mcp.snapshot.errors import NothingToCommitError
from shadow_history_mcp.snapshot.repository import SnapshotRepository

logger = logging.getLogger(__name__)


class AutoCommitScheduler:
    """Registry of delayed commit tasks keyed by invocation id."""

    def __init__(self, delay: float = 2.0, max_outcomes: int = 100) -> None:
        self.delay = delay
        self.max_outcomes = max_outcomes
        self._tasks: dict[str, asyncio.Task[CommitOutcome]] = {}
        # Invocations past their delay; their commit can no longer be cancelled
        self._committing: set[str] = set()
        self._outcomes: OrderedDict[str, CommitOutcome] = OrderedDict()

    def schedule(self, repository: SnapshotRepository, source_root: Path, message: str) -> str:
        """
        Schedules a commit of `source_root` after the configured delay.

        Must be called from a running event loop. Returns immediately.

        Returns:
            The invocation id identifying the scheduled commit.
        """
        invocation_id = uuid.uuid4().hex
        self._outcomes[invocation_id] = CommitOutcome(invocation_id=invocation_id, message=message)
        self._prune_outcomes()
        task = asyncio.create_task(
            self._run(invocation_id, repository, source_root, message),
            name=f"auto-commit-{invocation_id}",
        )
        self._tasks[invocation_id] = task
        task.add_done_callback(lambda _: self._on_done(invocation_id))
        logger.info(f"Scheduled auto-commit {invocation_id} in {self.delay}s: {message}")
        return invocation_id

    def _prune_outcomes(self) -> None:
        """Drops the oldest finished outcomes beyond `max_outcomes`. Unfinished ones are kept."""
        excess = len(self._outcomes) - self.max_outcomes
        if excess <= 0:
            return
        finished = [invocation_id for invocation_id, outcome in self._outcomes.items() if outcome.done]
        for invocation_id in finished[:excess]:
            del self._outcomes[invocation_id]

    def _on_done(self, invocation_id: str) -> None:
        self._tasks.pop(invocation_id, None)
        if invocation_id in self._committing:
            # The shielded commit records its own outcome
            return
        # A task cancelled before its first step never reaches its own handler
        outcome = self._outcomes.get(invocation_id)
        if outcome is not None and not outcome.done:
            self._finish(invocation_id, "cancelled")

    async def _run(
        self,
        invocation_id: str,
        repository: SnapshotRepository,
        source_root: Path,
        message: str,
    ) -> CommitOutcome:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self._finish(invocation_id, "cancelled")
            raise

        self._committing.add(invocation_id)
        commit = asyncio.ensure_future(repository.commit(source_root, message))
        commit.add_done_callback(lambda future: self._on_commit_done(invocation_id, future))
        # asyncio.wait never cancels the commit, so a mirror or VCS call is not interrupted halfway
        await asyncio.wait([commit])
        return self._outcomes[invocation_id]

    def _on_commit_done(self, invocation_id: str, commit: asyncio.Future) -> None:
        self._committing.discard(invocation_id)
        if commit.cancelled():
            self._finish(invocation_id, "cancelled")
            return
        error = commit.exception()
        if error is None:
            self._finish(invocation_id, "committed")
        elif isinstance(error, NothingToCommitError):
            self._finish(invocation_id, "nothing_to_commit", str(error))
        else:
            logger.error(f"Auto-commit {invocation_id} failed: {error}", exc_info=error)
            self._finish(invocation_id, "failed", str(error))

    def _finish(self, invocation_id: str, status: CommitStatus, error: str | None = None) -> CommitOutcome:
        outcome = self._outcomes[invocation_id].model_copy(
            update={"status": status, "error": error, "finished_at": datetime.now()}
        )
        self._outcomes[invocation_id] = outcome
        logger.info(f"Auto-commit {invocation_id} finished: {status}")
        return outcome

    def cancel(self, invocation_id: str) -> bool:
        """
        Cancels a commit that is still waiting out its delay.

        Returns False if the id is unknown, already finished, or its commit has started.
        """
        task = self._tasks.get(invocation_id)
        if task is None or task.done() or invocation_id in self._committing:
            return False
        return task.cancel()

    def get_outcome(self, invocation_id: str) -> CommitOutcome | None:
        return self._outcomes.get(invocation_id)

    def list_outcomes(self) -> list[CommitOutcome]:
        return sorted(self._outcomes.values(), key=lambda outcome: outcome.created_at)

    def pending(self) -> list[str]:
        return [invocation_id for invocation_id, task in self._tasks.items() if not task.done()]

    async def wait(self, invocation_id: str) -> CommitOutcome | None:
        """Waits for a scheduled commit to finish and returns its outcome."""
        task = self._tasks.get(invocation_id)
        if task is not None:
            await asyncio.wait([task])
        return self._outcomes.get(invocation_id)

    async def shutdown(self) -> None:
        """Cancels every commit still waiting and lets commits already running finish."""
        tasks = list(self._tasks.items())
        for invocation_id, task in tasks:
            if invocation_id not in self._committing:
                task.cancel()
        if tasks:
            await asyncio.gather(*(task for _, task in tasks), return_exceptions=True)
