#!/usr/bin/env python3
"""
Unit тесты для workspace_tool.py
"""

from pathlib import Path

import pytest

from shadow_history_mcp.models.session import Session
from shadow_history_mcp.tools.workspace_tool import WorkspaceTool
from shadow_history_mcp.utils.guards import NO_REPOSITORY_MESSAGE


class TestWorkspaceTool:
    """Тесты для WorkspaceTool"""

    @pytest.fixture
    def workspace_tool(self):
        """Создает экземпляр WorkspaceTool"""
        return WorkspaceTool()

    @pytest.fixture
    def tree(self, repo):
        """Дерево со скрытыми каталогами и файлами"""
        (repo / "src" / "pkg").mkdir(parents=True)
        (repo / "src" / "main.py").write_text("main")
        (repo / "src" / "pkg" / "util.py").write_text("util")
        (repo / "src" / ".cache").mkdir()
        (repo / "src" / ".cache" / "blob").write_text("cached")
        (repo / ".env").write_text("SECRET=1")
        (repo / ".hidden_dir" / "child").mkdir(parents=True)
        (repo / ".hidden_dir" / "child" / "file.txt").write_text("x")
        return repo

    @pytest.mark.asyncio
    async def test_select_sets_repository_and_clears_history(self, workspace_tool, repo):
        """Тест выбора репозитория"""
        session = Session(snapshot_store=Path("/elsewhere/.snapshotstore"))

        result = await workspace_tool.execute({"subcommand": "select", "path": str(repo), "_session": session})

        assert result.ok
        assert session.selected_repo == repo.resolve()
        assert session.snapshot_store is None
        assert result.output == str(repo.resolve())

    @pytest.mark.asyncio
    async def test_select_rejects_non_directory(self, workspace_tool, repo, session):
        result = await workspace_tool.execute(
            {"subcommand": "select", "path": str(repo / "a.txt"), "_session": session}
        )

        assert not result.ok
        assert "is not a directory" in result.error
        assert session.selected_repo is None

    @pytest.mark.asyncio
    async def test_current_without_selection_is_empty(self, workspace_tool, session):
        result = await workspace_tool.execute({"subcommand": "current", "_session": session})
        assert result.ok
        assert result.output == ""

    @pytest.mark.asyncio
    async def test_current_returns_selected_path(self, workspace_tool, selected_session, repo):
        result = await workspace_tool.execute({"subcommand": "current", "_session": selected_session})
        assert result.output == str(repo)

    @pytest.mark.asyncio
    async def test_list_skips_hidden_entries(self, workspace_tool, tree):
        """Тест: скрытые каталоги и файлы не попадают в список"""
        session = Session()
        session.select(tree)

        result = await workspace_tool.execute({"subcommand": "list", "_session": session})

        assert result.ok
        assert result.data["files"] == ["a.txt", "src/main.py", "src/pkg/util.py"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("subcommand", ["list", "read", "write"])
    async def test_file_access_requires_selection(self, workspace_tool, session, subcommand):
        """Тест предусловия 'репозиторий выбран'"""
        result = await workspace_tool.execute(
            {"subcommand": subcommand, "path": "a.txt", "content": "x", "_session": session}
        )

        assert not result.ok
        assert result.error == NO_REPOSITORY_MESSAGE

    @pytest.mark.asyncio
    async def test_read_returns_contents(self, workspace_tool, selected_session):
        result = await workspace_tool.execute({"subcommand": "read", "path": "a.txt", "_session": selected_session})
        assert result.ok
        assert result.output == "hi"

    @pytest.mark.asyncio
    async def test_read_missing_file(self, workspace_tool, selected_session):
        result = await workspace_tool.execute({"subcommand": "read", "path": "nope.txt", "_session": selected_session})
        assert not result.ok
        assert "Failed to read file" in result.error

    @pytest.mark.asyncio
    async def test_write_creates_parent_directories(self, workspace_tool, selected_session, repo):
        """Тест записи файла с созданием каталогов"""
        result = await workspace_tool.execute(
            {"subcommand": "write", "path": "deep/er/new.txt", "content": "hello", "_session": selected_session}
        )

        assert result.ok
        assert (repo / "deep" / "er" / "new.txt").read_text() == "hello"

    @pytest.mark.asyncio
    async def test_write_truncates_existing_file(self, workspace_tool, selected_session, repo):
        (repo / "a.txt").write_text("a much longer original content")
        await workspace_tool.execute(
            {"subcommand": "write", "path": "a.txt", "content": "short", "_session": selected_session}
        )
        assert (repo / "a.txt").read_text() == "short"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["../outside.txt", "sub/../../outside.txt", "/etc/passwd"])
    async def test_paths_must_stay_inside_repository(self, workspace_tool, selected_session, repo, path):
        """Тест: пути за пределами репозитория запрещены"""
        result = await workspace_tool.execute(
            {"subcommand": "write", "path": path, "content": "x", "_session": selected_session}
        )

        assert not result.ok
        assert not (repo.parent / "outside.txt").exists()

    @pytest.mark.asyncio
    async def test_missing_session(self, workspace_tool):
        result = await workspace_tool.execute({"subcommand": "current"})
        assert not result.ok
        assert "Session not found" in result.error

    @pytest.mark.asyncio
    async def test_unknown_subcommand(self, workspace_tool, session):
        result = await workspace_tool.execute({"subcommand": "rm", "_session": session})
        assert result.error == "Unknown subcommand: rm"
