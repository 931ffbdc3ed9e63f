import asyncio
import logging
from pathlib import Path
from typing import override

from shadow_history_mcp.models.session import Session
from shadow_history_mcp.tools.base import Tool, ToolCallArguments, ToolError, ToolExecResult, ToolParameter
from shadow_history_mcp.tools.utils.file_utils import list_repo_files
from shadow_history_mcp.tools.utils.formatting_utils import format_file_list
from shadow_history_mcp.utils.guards import get_session, require_repository
from shadow_history_mcp.utils.path_utils import resolve_path

logger = logging.getLogger(__name__)

WorkspaceToolSubCommands = ["select", "current", "list", "read", "write"]


class WorkspaceTool(Tool):
    """
    Tool for choosing the working repository and accessing its files.
    `select` must be called before any other tool can operate.
    """

    @override
    def get_name(self) -> str:
        return "workspace"

    @override
    def get_description(self) -> str:
        return """A tool for selecting the working repository and reading or writing its files.
Use `select` with an absolute directory path to choose the repository. All other tools need a selected repository.
`current` shows the selected repository. `list` shows its non-hidden files.
`read` and `write` take paths relative to the selected repository."""

    @override
    def get_parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="subcommand",
                type="string",
                description=f"The command to run. Allowed options are: {', '.join(WorkspaceToolSubCommands)}.",
                required=True,
                enum=WorkspaceToolSubCommands,
            ),
            ToolParameter(
                name="path",
                type="string",
                description="Directory to select for `select`, or a file path relative to the repository for `read` and `write`.",
                required=False,
            ),
            ToolParameter(
                name="content",
                type="string",
                description="The text to write for `write`.",
                required=False,
            ),
        ]

    @override
    async def execute(self, arguments: ToolCallArguments) -> ToolExecResult:
        subcommand = arguments.get("subcommand")
        if not isinstance(subcommand, str):
            return ToolExecResult(error="Subcommand must be a string.", error_code=-1)

        try:
            session = get_session(arguments)
            match subcommand:
                case "select":
                    return self._select_handler(session, arguments)
                case "current":
                    return self._current_handler(session)
                case "list":
                    return await self._list_handler(session)
                case "read":
                    return self._read_handler(session, arguments)
                case "write":
                    return self._write_handler(session, arguments)
                case _:
                    return ToolExecResult(error=f"Unknown subcommand: {subcommand}", error_code=-1)
        except (ToolError, ValueError, NotADirectoryError) as e:
            return ToolExecResult(error=str(e), error_code=-1)

    def _select_handler(self, session: Session, args: ToolCallArguments) -> ToolExecResult:
        path = args.get("path")
        if not path or not isinstance(path, str):
            raise ValueError("Path is required for select and must be a string.")

        target_dir = Path(path).expanduser().resolve()
        if not target_dir.is_dir():
            raise NotADirectoryError(f"'{target_dir}' is not a directory.")

        session.select(target_dir)
        logger.info(f"Selected repository {target_dir}")
        return ToolExecResult(output=str(target_dir))

    def _current_handler(self, session: Session) -> ToolExecResult:
        return ToolExecResult(output=str(session.selected_repo) if session.selected_repo else "")

    async def _list_handler(self, session: Session) -> ToolExecResult:
        repo_root = require_repository(session)
        try:
            files = await asyncio.to_thread(list_repo_files, repo_root)
        except OSError as e:
            return ToolExecResult(error=f"Failed to list files: {e}", error_code=1)
        return ToolExecResult(output=format_file_list(files), data={"files": files})

    def _read_handler(self, session: Session, args: ToolCallArguments) -> ToolExecResult:
        repo_root = require_repository(session)
        path = args.get("path")
        if not isinstance(path, str):
            raise ValueError("Path is required for read and must be a string.")

        file_path = resolve_path(repo_root, path)
        try:
            content = file_path.read_text()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading file {file_path}: {e}")
            return ToolExecResult(error=f"Failed to read file: {e}", error_code=1)
        return ToolExecResult(output=content)

    def _write_handler(self, session: Session, args: ToolCallArguments) -> ToolExecResult:
        repo_root = require_repository(session)
        path = args.get("path")
        content = args.get("content", "")
        if not isinstance(path, str):
            raise ValueError("Path is required for write and must be a string.")
        if not isinstance(content, str):
            raise ValueError("Content must be a string.")

        file_path = resolve_path(repo_root, path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return ToolExecResult(error=f"Failed to create directory: {e}", error_code=1)
        try:
            file_path.write_text(content)
        except OSError as e:
            logger.error(f"Error writing file {file_path}: {e}")
            return ToolExecResult(error=f"Failed to write file: {e}", error_code=1)
        return ToolExecResult(output=f"Wrote {len(content)} characters to {path}")
