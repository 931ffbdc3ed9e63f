#!/usr/bin/env python3
"""
Unit тесты для snapshot/repository.py
"""

import asyncio
import re
import shutil
from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest

from shadow_history_mcp.snapshot.errors import NothingToCommitError, SnapshotError, VcsCommandError
from shadow_history_mcp.snapshot.repository import SnapshotRepository, format_commit_message

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

MESSAGE_PATTERN = re.compile(r"^Claude session commit - first \[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\]$")


class TestFormatCommitMessage:
    """Тесты для format_commit_message"""

    def test_exact_format(self):
        now = datetime(2024, 3, 7, 9, 5, 1)
        assert format_commit_message("Label", "did things", now) == "Label - did things [2024-03-07 09:05:01]"

    def test_uses_current_local_time(self):
        assert MESSAGE_PATTERN.match(format_commit_message("Claude session commit", "first"))


class TestSnapshotRepositoryCommands:
    """Тесты вызовов VCS с подмененным run"""

    @pytest.fixture
    def store(self, repo):
        return repo / ".snapshotstore"

    @pytest.fixture
    def repository(self, store):
        return SnapshotRepository(store)

    @pytest.mark.asyncio
    async def test_init_creates_store_and_runs_init(self, repository, store):
        """Тест создания каталога и git init"""
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(return_value=(0, "", ""))) as mock_run:
            await repository.init()

        assert store.is_dir()
        mock_run.assert_awaited_once()
        assert mock_run.call_args.args[0] == ["git", "init"]
        assert mock_run.call_args.kwargs["cwd"] == store

    @pytest.mark.asyncio
    async def test_init_failure_raises(self, repository):
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(return_value=(128, "", "fatal"))):
            with pytest.raises(VcsCommandError) as exc_info:
                await repository.init()
        assert exc_info.value.returncode == 128

    @pytest.mark.asyncio
    async def test_missing_binary_raises_snapshot_error(self, store):
        repository = SnapshotRepository(store, vcs_binary="definitely-not-a-vcs-binary")
        with pytest.raises(SnapshotError):
            await repository.init()

    @pytest.mark.asyncio
    async def test_vcs_timeout_raises_snapshot_error(self, store, tmp_path):
        """Тест: зависшая VCS программа прерывается по таймауту"""
        slow_vcs = tmp_path / "slow-vcs"
        slow_vcs.write_text("#!/bin/sh\nexec sleep 30\n")
        slow_vcs.chmod(0o755)
        repository = SnapshotRepository(store, vcs_binary=str(slow_vcs), timeout=0.5)

        with pytest.raises(SnapshotError, match="timed out"):
            await repository.init()

    @pytest.mark.asyncio
    async def test_commit_runs_add_then_commit_with_formatted_message(self, repository, repo, store):
        """Тест последовательности add и commit"""
        store.mkdir()
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(return_value=(0, "", ""))) as mock_run:
            message = await repository.commit(repo, "first")

        calls = [call.args[0] for call in mock_run.call_args_list]
        assert calls[0] == ["git", "add", "."]
        assert calls[1][:3] == ["git", "commit", "-m"]
        assert MESSAGE_PATTERN.match(calls[1][3])
        assert message == calls[1][3]
        # The tree was mirrored before staging
        assert (store / "a.txt").read_text() == "hi"
        assert not (store / ".git" / "x").exists()

    @pytest.mark.asyncio
    async def test_commit_exit_one_means_nothing_to_commit(self, repository, repo, store):
        """Тест кода выхода 1 как 'нечего коммитить'"""
        store.mkdir()
        results = [(0, "", ""), (1, "nothing to commit, working tree clean", "")]
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(side_effect=results)):
            with pytest.raises(NothingToCommitError):
                await repository.commit(repo, "first")

    @pytest.mark.asyncio
    async def test_commit_other_exit_code_is_generic_failure(self, repository, repo, store):
        store.mkdir()
        results = [(0, "", ""), (128, "", "fatal: unable to auto-detect email address")]
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(side_effect=results)):
            with pytest.raises(VcsCommandError) as exc_info:
                await repository.commit(repo, "first")

        assert not isinstance(exc_info.value, NothingToCommitError)
        assert exc_info.value.action == "commit"
        assert "auto-detect email" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_log_splits_one_entry_per_commit(self, repository):
        """Тест разбиения лога на записи"""
        output = "abc1234 second\ndef5678 first\n"
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(return_value=(0, output, ""))) as mock_run:
            entries = await repository.log()

        assert entries == ["abc1234 second", "def5678 first"]
        assert mock_run.call_args.args[0] == ["git", "log", "--oneline", "--max-count=20"]

    @pytest.mark.asyncio
    async def test_log_of_empty_store_is_empty(self, repository):
        results = [(128, "", "fatal: your current branch does not have any commits yet"), (1, "", "")]
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(side_effect=results)):
            assert await repository.log() == []

    @pytest.mark.asyncio
    async def test_log_failure_with_head_raises(self, repository):
        results = [(128, "", "fatal: bad config"), (0, "abc\n", "")]
        with patch("shadow_history_mcp.snapshot.repository.run", new=AsyncMock(side_effect=results)):
            with pytest.raises(VcsCommandError):
                await repository.log()

    @pytest.mark.asyncio
    async def test_concurrent_commits_are_serialized(self, repository, repo, store):
        """Тест сериализации параллельных коммитов"""
        store.mkdir()
        events = []

        async def fake_run(args, cwd, **kwargs):
            events.append(("start", args[1]))
            await asyncio.sleep(0.01)
            events.append(("end", args[1]))
            return (0, "", "")

        with patch("shadow_history_mcp.snapshot.repository.run", new=fake_run), \
             patch("shadow_history_mcp.snapshot.repository.mirror_tree", return_value=0):
            await asyncio.gather(repository.commit(repo, "one"), repository.commit(repo, "two"))

        cycle = [("start", "add"), ("end", "add"), ("start", "commit"), ("end", "commit")]
        assert events == cycle * 2


@requires_git
class TestSnapshotRepositoryWithGit:
    """Интеграционные тесты с настоящим git"""

    @pytest.fixture
    def repository(self, repo):
        return SnapshotRepository(
            repo / ".snapshotstore",
            identity={
                "GIT_AUTHOR_NAME": "test",
                "GIT_AUTHOR_EMAIL": "test@localhost",
                "GIT_COMMITTER_NAME": "test",
                "GIT_COMMITTER_EMAIL": "test@localhost",
            },
        )

    @pytest.mark.asyncio
    async def test_commit_cycle(self, repository, repo):
        """Сценарий: init, commit, пустой commit, изменение, commit"""
        await repository.init()
        assert SnapshotRepository.exists(repo / ".snapshotstore")
        assert await repository.log() == []

        await repository.commit(repo, "first")
        assert len(await repository.log()) == 1

        with pytest.raises(NothingToCommitError):
            await repository.commit(repo, "first")

        (repo / "a.txt").write_text("changed")
        await repository.commit(repo, "second")

        entries = await repository.log()
        assert len(entries) == 2
        assert "second" in entries[0]
        assert "first" in entries[1]

    @pytest.mark.asyncio
    async def test_exists_is_false_before_init(self, repo):
        assert not SnapshotRepository.exists(repo / ".snapshotstore")
