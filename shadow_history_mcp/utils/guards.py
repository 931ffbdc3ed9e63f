"""Preconditions shared by every tool that touches a repository."""

from pathlib import Path

from shadow_history_mcp.models.session import Session
from shadow_history_mcp.tools.base import ToolCallArguments, ToolError

NO_REPOSITORY_MESSAGE = "No repository selected. Select a repository first."
NO_HISTORY_MESSAGE = "Local history is not initialized. Initialize it first."


def get_session(arguments: ToolCallArguments) -> Session:
    """
    Extracts the session object injected by the server.

    Raises:
        ToolError: If the arguments carry no session.
    """
    session = arguments.get("_session")
    if not isinstance(session, Session):
        raise ToolError("Session not found in arguments. This is an internal server error.")
    return session


def require_repository(session: Session) -> Path:
    """Returns the selected repository or fails before any side effect."""
    if session.selected_repo is None:
        raise ToolError(NO_REPOSITORY_MESSAGE)
    return session.selected_repo


def require_history(session: Session) -> Path:
    """Returns the initialized snapshot store or fails before any side effect."""
    if session.snapshot_store is None:
        raise ToolError(NO_HISTORY_MESSAGE)
    return session.snapshot_store
