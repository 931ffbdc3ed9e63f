"""Utility to run external programs asynchronously."""

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

TRUNCATED_MESSAGE: str = "<response clipped>"
MAX_RESPONSE_LEN: int = 64000


def maybe_truncate(content: str, truncate_after: int | None = MAX_RESPONSE_LEN) -> str:
    """Truncate content and append a notice if content exceeds the specified length."""
    if not truncate_after or len(content) <= truncate_after:
        return content
    return content[:truncate_after] + TRUNCATED_MESSAGE


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kills the child and reaps it so no orphan or open pipe is left behind."""
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


async def run(
    args: Sequence[str],
    cwd: Path | str,
    timeout: float | None = None,
    merge_stderr: bool = False,
    env: Mapping[str, str] | None = None,
    truncate_after: int | None = MAX_RESPONSE_LEN,
) -> tuple[int, str, str]:
    """
    Runs a program without a shell and waits for it to finish.

    Args:
        args: The program and its arguments.
        cwd: Working directory of the child process.
        timeout: Seconds to wait before killing the process. None waits forever.
        merge_stderr: If True, stderr is folded into stdout and the returned stderr is empty.
        env: Extra environment variables layered over the current environment.
        truncate_after: Maximum length of the decoded outputs.

    Returns:
        A tuple of (return_code, stdout, stderr).

    Raises:
        FileNotFoundError: If the program cannot be found.
        TimeoutError: If the process does not finish within `timeout`.
    """
    child_env = None
    if env:
        child_env = {**os.environ, **env}

    logger.debug("Running %s in %s", list(args), cwd)
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=str(cwd),
        env=child_env,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT if merge_stderr else asyncio.subprocess.PIPE,
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.CancelledError:
        await _kill(process)
        raise
    except asyncio.TimeoutError as exc:
        await _kill(process)
        raise TimeoutError(f"Command {list(args)} timed out after {timeout} seconds") from exc

    return (
        process.returncode or 0,
        maybe_truncate(stdout.decode(errors="replace"), truncate_after),
        maybe_truncate(stderr.decode(errors="replace"), truncate_after) if stderr else "",
    )
