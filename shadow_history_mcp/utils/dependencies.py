"""
Configuration and dependency management for the Shadow History MCP server.
"""

import logging
from functools import lru_cache

from shadow_history_mcp.utils.config import ServiceConfig
from shadow_history_mcp.utils.session_manager import SessionManager

logger = logging.getLogger(__name__)


@lru_cache
def get_base_config() -> ServiceConfig:
    """
    Retrieves the base server configuration from environment variables.

    This function is cached to avoid repeatedly reading and parsing environment
    variables and .env files.

    Returns:
        A cached instance of the ServiceConfig.
    """
    return ServiceConfig()


@lru_cache
def get_session_manager() -> SessionManager:
    """Returns the process-wide SessionManager."""
    logger.info("Initializing SessionManager singleton.")
    return SessionManager()


# --- Tool Providers ---
# Each provider returns a cached tool wired to the shared snapshot services.

from ..snapshot.manager import SnapshotManager
from ..snapshot.scheduler import AutoCommitScheduler
from ..tools.assistant_tool import AssistantTool
from ..tools.history_tool import HistoryTool
from ..tools.workspace_tool import WorkspaceTool


# The SnapshotManager is a singleton so every tool shares one repository (and lock) per store.
@lru_cache
def get_snapshot_manager() -> SnapshotManager:
    """Returns a singleton instance of the SnapshotManager."""
    logger.info("Initializing SnapshotManager singleton.")
    return SnapshotManager(get_base_config())


@lru_cache
def get_auto_commit_scheduler() -> AutoCommitScheduler:
    """Returns a singleton instance of the AutoCommitScheduler."""
    logger.info("Initializing AutoCommitScheduler singleton.")
    return AutoCommitScheduler(
        delay=get_base_config().AUTO_COMMIT_DELAY,
        max_outcomes=get_base_config().AUTO_COMMIT_OUTCOME_LIMIT,
    )


@lru_cache
def get_workspace_tool_provider() -> WorkspaceTool:
    """Returns a cached instance of the WorkspaceTool."""
    logger.info("Initializing WorkspaceTool singleton.")
    return WorkspaceTool()


@lru_cache
def get_history_tool_provider() -> HistoryTool:
    """Returns a cached instance of the HistoryTool."""
    logger.info("Initializing HistoryTool singleton.")
    return HistoryTool(get_snapshot_manager(), get_auto_commit_scheduler())


@lru_cache
def get_assistant_tool_provider() -> AssistantTool:
    """Returns a cached instance of the AssistantTool."""
    logger.info("Initializing AssistantTool singleton.")
    return AssistantTool(get_base_config(), get_snapshot_manager(), get_auto_commit_scheduler())
