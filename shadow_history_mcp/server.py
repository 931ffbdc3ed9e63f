"""
MCP server definition for the Shadow History MCP.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi.middleware.cors import CORSMiddleware
from starlette.applications import Starlette
from starlette.middleware import Middleware

from mcp.server.fastmcp import Context, FastMCP

from shadow_history_mcp.prompts import get_workflow_prompt
from shadow_history_mcp.tools.base import Tool, ToolCallArguments
from shadow_history_mcp.utils.config import ServiceConfig
from shadow_history_mcp.utils.dependencies import (
    get_assistant_tool_provider,
    get_auto_commit_scheduler,
    get_base_config,
    get_history_tool_provider,
    get_session_manager,
    get_workspace_tool_provider,
)


# Get a module-level logger
logger = logging.getLogger(__name__)


class CustomFastMCP(FastMCP):
    """Custom FastMCP server with CORS middleware."""

    def _add_cors_middleware(self, app: Starlette) -> Starlette:
        """A helper to add CORS middleware to a Starlette app."""
        app.user_middleware.insert(
            0,
            Middleware(
                CORSMiddleware,
                allow_origin_regex=".*",  # Allow any origin
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            ),
        )
        app.middleware_stack = app.build_middleware_stack()
        return app

    def sse_app(self, mount_path: str | None = None) -> Starlette:
        """Overrides the default sse_app to inject CORS middleware."""
        app = super().sse_app(mount_path)
        return self._add_cors_middleware(app)

    def streamable_http_app(self) -> Starlette:
        """Overrides the default streamable_http_app to inject CORS middleware."""
        app = super().streamable_http_app()
        return self._add_cors_middleware(app)


@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Cancels waiting auto-commits on shutdown and lets running ones finish."""
    try:
        yield {}
    finally:
        logger.info("Shutting down auto-commit scheduler")
        await get_auto_commit_scheduler().shutdown()


def build_server(config: ServiceConfig) -> CustomFastMCP:
    """Build and configure the FastMCP server instance.

    Args:
        config: The server's service configuration.

    Returns:
        A configured CustomFastMCP instance.
    """
    logger.info(
        "Initializing FastMCP server",
        extra={"host": config.MCP_HOST, "port": config.MCP_PORT},
    )
    return CustomFastMCP(
        "shadow-history-mcp",
        host=config.MCP_HOST,
        port=config.MCP_PORT,
        lifespan=server_lifespan,
    )


async def call_tool(tool: Tool, arguments: ToolCallArguments) -> dict[str, Any]:
    """
    Runs a tool against the current session and converts its result for the client.

    The session is injected here so tools never reach for global state.
    """
    args = {k: v for k, v in arguments.items() if v is not None}
    args["_session"] = get_session_manager().get_session()
    try:
        result = await tool.execute(args)
        return result.to_response()
    except Exception as e:
        logger.error(f"Error executing {tool.get_name()}: {e}", exc_info=True)
        # It's better to return a structured error than to let the exception bubble up
        return {"status": "error", "error": str(e), "exit_code": 1}


# Get the base configuration for server initialization.
# This is also imported by main.py to run the server.
server_config = get_base_config()
mcp_app = build_server(server_config)


# --- Prompt Handlers ---
@mcp_app.prompt(name="workflow", title="Shadow History Workflow")
def get_system_prompt() -> str:
    """Explains how to select a repository, keep its history and use the assistant."""
    return get_workflow_prompt()


# --- Repository and File Tools ---

@mcp_app.tool()
async def select_repository(context: Context, path: str) -> dict[str, Any]:
    """
    Selects the local repository to work on. Detaches any previously attached history.

    Args:
        path: The absolute path of the repository directory.

    Returns:
        A dictionary containing the selected path.
    """
    logger.info(f"Selecting repository '{path}'")
    return await call_tool(get_workspace_tool_provider(), {"subcommand": "select", "path": path})


@mcp_app.tool()
async def get_selected_repository(context: Context) -> dict[str, Any]:
    """
    Returns the currently selected repository path, or an empty string if none is selected.
    """
    return await call_tool(get_workspace_tool_provider(), {"subcommand": "current"})


@mcp_app.tool()
async def list_files(context: Context) -> dict[str, Any]:
    """
    Lists the non-hidden files of the selected repository, relative to its root.

    Returns:
        A dictionary containing the file list under `files`.
    """
    logger.info("Listing repository files")
    return await call_tool(get_workspace_tool_provider(), {"subcommand": "list"})


@mcp_app.tool()
async def read_file(context: Context, path: str) -> dict[str, Any]:
    """
    Reads a text file of the selected repository.

    Args:
        path: The file path, relative to the repository root.

    Returns:
        A dictionary containing the file content.
    """
    logger.info(f"Reading file '{path}'")
    return await call_tool(get_workspace_tool_provider(), {"subcommand": "read", "path": path})


@mcp_app.tool()
async def write_file(context: Context, path: str, content: str) -> dict[str, Any]:
    """
    Writes a text file in the selected repository, creating parent directories as needed.

    Args:
        path: The file path, relative to the repository root.
        content: The full new content of the file.

    Returns:
        A dictionary describing the result of the write.
    """
    logger.info(f"Writing file '{path}'")
    return await call_tool(
        get_workspace_tool_provider(),
        {"subcommand": "write", "path": path, "content": content},
    )


# --- Local History Tools ---

@mcp_app.tool()
async def initialize_local_history(context: Context) -> dict[str, Any]:
    """
    Creates the `.snapshotstore` directory in the selected repository and initializes version control in it.
    """
    logger.info("Initializing local history")
    return await call_tool(get_history_tool_provider(), {"command": "init"})


@mcp_app.tool()
async def check_history_exists(context: Context) -> dict[str, Any]:
    """
    Checks whether the selected repository already has an initialized local history, and attaches to it if so.

    Returns:
        A dictionary with a boolean `exists` field.
    """
    return await call_tool(get_history_tool_provider(), {"command": "exists"})


@mcp_app.tool()
async def commit_changes(context: Context, message: str) -> dict[str, Any]:
    """
    Snapshots the selected repository into the local history.

    Args:
        message: A short summary of the changes.

    Returns:
        A dictionary with status `success`, or `nothing_to_commit` when nothing changed since the last snapshot.
    """
    logger.info(f"Committing changes: {message}")
    return await call_tool(get_history_tool_provider(), {"command": "commit", "message": message})


@mcp_app.tool()
async def get_commit_history(context: Context) -> dict[str, Any]:
    """
    Returns the 20 most recent snapshot commits, newest first, under `commits`.
    """
    return await call_tool(get_history_tool_provider(), {"command": "log"})


@mcp_app.tool()
async def get_auto_commit_status(context: Context, invocation_id: Optional[str] = None) -> dict[str, Any]:
    """
    Reports the outcome of background commits made after assistant runs.

    Args:
        invocation_id: The id returned by `invoke_assistant`. If omitted, all outcomes are returned.
    """
    return await call_tool(
        get_history_tool_provider(),
        {"command": "status", "invocation_id": invocation_id},
    )


@mcp_app.tool()
async def cancel_auto_commit(context: Context, invocation_id: str) -> dict[str, Any]:
    """
    Cancels a background commit that has not run yet.

    Args:
        invocation_id: The id returned by `invoke_assistant`.
    """
    logger.info(f"Cancelling auto-commit {invocation_id}")
    return await call_tool(
        get_history_tool_provider(),
        {"command": "cancel", "invocation_id": invocation_id},
    )


# --- Assistant Tool ---

@mcp_app.tool()
async def invoke_assistant(context: Context, prompt: str) -> dict[str, Any]:
    """
    Runs the AI coding assistant with a prompt inside the selected repository.

    Args:
        prompt: The instruction for the assistant.

    Returns:
        A dictionary with the assistant's output and, when the local history is
        initialized, the `invocation_id` of the scheduled auto-commit.
    """
    logger.info("Invoking assistant")
    return await call_tool(get_assistant_tool_provider(), {"prompt": prompt})
