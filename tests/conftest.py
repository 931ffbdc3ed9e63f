"""
Общие фикстуры для тестов
"""

import os
import stat
from pathlib import Path

import pytest

from shadow_history_mcp.models.session import Session
from shadow_history_mcp.snapshot.manager import SnapshotManager
from shadow_history_mcp.snapshot.scheduler import AutoCommitScheduler
from shadow_history_mcp.utils.config import ServiceConfig


@pytest.fixture(autouse=True)
def isolated_git(monkeypatch, tmp_path):
    """Изолирует git от пользовательской и системной конфигурации"""
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def repo(tmp_path) -> Path:
    """Создает репозиторий с файлом a.txt и каталогом .git"""
    root = tmp_path / "repo"
    root.mkdir()
    (root / "a.txt").write_text("hi")
    (root / ".git").mkdir()
    (root / ".git" / "x").write_text("native vcs metadata")
    return root


@pytest.fixture
def fake_assistant(tmp_path) -> Path:
    """Создает скрипт, который ведет себя как CLI ассистента"""
    script = tmp_path / "bin" / "fake-assistant"
    script.parent.mkdir()
    script.write_text(
        "#!/bin/sh\n"
        "echo \"assistant ran: $1 $2\"\n"
        "echo \"diagnostic\" >&2\n"
        "echo \"generated\" > generated.txt\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def failing_assistant(tmp_path) -> Path:
    """Скрипт ассистента, завершающийся с ошибкой"""
    script = tmp_path / "bin-fail" / "failing-assistant"
    script.parent.mkdir()
    script.write_text("#!/bin/sh\necho \"boom: cannot do that\" >&2\nexit 3\n")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def config(fake_assistant) -> ServiceConfig:
    return ServiceConfig(ASSISTANT_BINARY=str(fake_assistant), AUTO_COMMIT_DELAY=0.0)


@pytest.fixture
def snapshot_manager(config) -> SnapshotManager:
    return SnapshotManager(config)


@pytest.fixture
def scheduler(config) -> AutoCommitScheduler:
    return AutoCommitScheduler(delay=config.AUTO_COMMIT_DELAY)


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def selected_session(repo) -> Session:
    state = Session()
    state.select(repo)
    return state
