import logging
from typing import override

from shadow_history_mcp.snapshot.errors import NothingToCommitError, SnapshotError
from shadow_history_mcp.snapshot.manager import SnapshotManager
from shadow_history_mcp.snapshot.repository import SnapshotRepository
from shadow_history_mcp.snapshot.scheduler import AutoCommitScheduler
from shadow_history_mcp.tools.base import Tool, ToolCallArguments, ToolError, ToolExecResult, ToolParameter
from shadow_history_mcp.tools.utils.formatting_utils import format_history, format_outcome
from shadow_history_mcp.utils.guards import get_session, require_history, require_repository

# Настройка логирования
logger = logging.getLogger(__name__)

HISTORY_COMMANDS = ["init", "exists", "commit", "log", "status", "cancel"]


class HistoryTool(Tool):
    """
    Tool for the local snapshot history of the selected repository.
    Supports init, exists, commit, log, and inspection of background commits.
    """

    def __init__(self, snapshot_manager: SnapshotManager, scheduler: AutoCommitScheduler) -> None:
        super().__init__()
        self._snapshots = snapshot_manager
        self._scheduler = scheduler

    @override
    def get_name(self) -> str:
        return "history"

    @override
    def get_description(self) -> str:
        return """
        Manages the private snapshot history of the selected repository.
        - `init`: Creates the snapshot store and initializes version control inside it.
        - `exists`: Detects an already initialized snapshot store and attaches to it.
        - `commit`: Copies the repository into the store and commits the snapshot.
        - `log`: Lists the 20 most recent snapshot commits.
        - `status`: Shows the outcome of background commits made after assistant runs.
        - `cancel`: Cancels a background commit that has not run yet.
        """

    @override
    def get_parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="command",
                type="string",
                description="The history command to execute.",
                required=True,
                enum=HISTORY_COMMANDS,
            ),
            ToolParameter(
                name="message",
                type="string",
                description="For `commit` command. The commit message.",
                required=False,
            ),
            ToolParameter(
                name="invocation_id",
                type="string",
                description="For `status` and `cancel` commands. The id returned by an assistant run.",
                required=False,
            ),
        ]

    @override
    async def execute(self, arguments: ToolCallArguments) -> ToolExecResult:
        command = arguments.get("command")
        if not command or not isinstance(command, str) or command not in HISTORY_COMMANDS:
            return ToolExecResult(error=f"A valid 'command' is required: {', '.join(HISTORY_COMMANDS)}.", error_code=1)

        try:
            session = get_session(arguments)

            match command:
                case "init":
                    repo_root = require_repository(session)
                    store_path = self._snapshots.store_path_for(repo_root)
                    await self._snapshots.get_repository(store_path).init()
                    session.snapshot_store = store_path
                    return ToolExecResult(output=f"Local history initialized at {store_path}")

                case "exists":
                    repo_root = require_repository(session)
                    store_path = self._snapshots.store_path_for(repo_root)
                    found = SnapshotRepository.exists(store_path)
                    if found:
                        session.snapshot_store = store_path
                    return ToolExecResult(output=str(found).lower(), data={"exists": found})

                case "commit":
                    message = arguments.get("message")
                    if not message or not isinstance(message, str):
                        return ToolExecResult(error="The 'message' parameter is required for commit.", error_code=1)
                    repo_root = require_repository(session)
                    store_path = require_history(session)
                    try:
                        full_message = await self._snapshots.get_repository(store_path).commit(repo_root, message)
                    except NothingToCommitError as e:
                        return ToolExecResult(output=str(e), status="nothing_to_commit")
                    return ToolExecResult(output=full_message)

                case "log":
                    store_path = require_history(session)
                    entries = await self._snapshots.get_repository(store_path).log()
                    return ToolExecResult(output=format_history(entries), data={"commits": entries})

                case "status":
                    invocation_id = arguments.get("invocation_id")
                    if invocation_id:
                        outcome = self._scheduler.get_outcome(invocation_id)
                        if outcome is None:
                            return ToolExecResult(error=f"Unknown invocation id: {invocation_id}", error_code=1)
                        outcomes = [outcome]
                    else:
                        outcomes = self._scheduler.list_outcomes()
                    return ToolExecResult(
                        output="\n".join(format_outcome(o) for o in outcomes) or "No background commits.",
                        data={"outcomes": [o.model_dump(mode="json") for o in outcomes]},
                    )

                case "cancel":
                    invocation_id = arguments.get("invocation_id")
                    if not invocation_id or not isinstance(invocation_id, str):
                        return ToolExecResult(error="The 'invocation_id' parameter is required for cancel.", error_code=1)
                    if not self._scheduler.cancel(invocation_id):
                        return ToolExecResult(error=f"No pending background commit with id {invocation_id}", error_code=1)
                    return ToolExecResult(output=f"Cancelled background commit {invocation_id}")

                case _:
                    # This case should not be reachable due to the initial check
                    return ToolExecResult(error=f"Unknown command: {command}", error_code=1)

        except ToolError as e:
            return ToolExecResult(error=e.message, error_code=-1)
        except SnapshotError as e:
            logger.error(f"History command '{command}' failed: {e}")
            return ToolExecResult(error=str(e), error_code=1)
