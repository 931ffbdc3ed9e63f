import logging
from typing import override

from shadow_history_mcp.snapshot.manager import SnapshotManager
from shadow_history_mcp.snapshot.scheduler import AutoCommitScheduler
from shadow_history_mcp.tools.base import Tool, ToolCallArguments, ToolError, ToolExecResult, ToolParameter
from shadow_history_mcp.tools.run import run
from shadow_history_mcp.tools.utils.formatting_utils import truncate_prompt
from shadow_history_mcp.utils.config import ServiceConfig
from shadow_history_mcp.utils.guards import get_session, require_repository

logger = logging.getLogger(__name__)


class AssistantTool(Tool):
    """
    A tool that runs the AI coding assistant CLI inside the selected repository
    and commits whatever it changed shortly afterwards.
    """

    def __init__(
        self,
        config: ServiceConfig,
        snapshot_manager: SnapshotManager,
        scheduler: AutoCommitScheduler,
    ) -> None:
        super().__init__()
        self._config = config
        self._snapshots = snapshot_manager
        self._scheduler = scheduler

    @override
    def get_name(self) -> str:
        return "assistant"

    @override
    def get_description(self) -> str:
        return """Run the AI coding assistant with a natural-language prompt inside the selected repository.
* The assistant may read and modify any file of the repository.
* Its combined stdout and stderr are returned.
* On success, its changes are committed to the local history a few seconds later.
  Use the returned invocation id with `history.status` to see how that commit went.
"""

    @override
    def get_parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="prompt",
                type="string",
                description="The instruction to send to the assistant.",
                required=True,
            ),
        ]

    @override
    async def execute(self, arguments: ToolCallArguments) -> ToolExecResult:
        try:
            session = get_session(arguments)
            repo_root = require_repository(session)
        except ToolError as e:
            return ToolExecResult(error=e.message, error_code=-1)

        prompt = arguments.get("prompt")
        if not prompt or not isinstance(prompt, str):
            return ToolExecResult(error="The 'prompt' parameter is required.", error_code=-1)

        command = [self._config.ASSISTANT_BINARY, self._config.ASSISTANT_SUBCOMMAND, prompt]
        try:
            return_code, output, _ = await run(
                command,
                cwd=repo_root,
                timeout=self._config.ASSISTANT_TIMEOUT,
                merge_stderr=True,
            )
        except (OSError, TimeoutError) as e:
            logger.error(f"Assistant could not be run: {e}")
            return ToolExecResult(error=f"Assistant execution failed: {e}", error_code=1)

        if return_code != 0:
            return ToolExecResult(
                error=f"Assistant execution failed with exit code {return_code}\nOutput: {output}",
                error_code=return_code,
            )

        data: dict[str, str] = {}
        if session.snapshot_store is not None:
            summary = truncate_prompt(prompt, self._config.PROMPT_SUMMARY_LIMIT)
            repository = self._snapshots.get_repository(session.snapshot_store)
            data["invocation_id"] = self._scheduler.schedule(
                repository, repo_root, f"{self._config.AUTO_COMMIT_LABEL}: {summary}"
            )
        else:
            logger.info("Local history is not initialized; skipping auto-commit.")

        return ToolExecResult(output=output, data=data)
