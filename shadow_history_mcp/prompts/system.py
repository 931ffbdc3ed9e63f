"""Defines the composable prompts for the MCP server."""

BASE_PROMPT = """You are working with a repository through the Shadow History tools.
Every change you make can be reviewed and traced because the repository is snapshotted into a private local history.

Follow these steps:

1.  Select the Repository:
    - Use `select_repository` with the absolute path of the project directory.
    - Use `get_selected_repository` to confirm which repository is active.

2.  Prepare the Local History:
    - Call `check_history_exists` first. If it reports `false`, call `initialize_local_history`.
    - The history lives in `.snapshotstore` inside the repository and never touches the project's own `.git`.

3.  Work on the Code:
    - Use `list_files`, `read_file` and `write_file` for direct edits. Paths are relative to the repository.
    - Use `invoke_assistant` to delegate a task to the coding assistant in natural language.

4.  Record Snapshots:
    - Call `commit_changes` with a short summary after each meaningful edit.
    - A `nothing_to_commit` status is not an error: the repository has not changed since the last snapshot.
    - Assistant runs are committed automatically a few seconds later. Check them with `get_auto_commit_status`.

5.  Review:
    - Use `get_commit_history` to see the 20 most recent snapshots.
"""

HISTORY_INSTRUCTIONS = """
# Local History Rules

- `commit_changes` and `get_commit_history` fail until the local history is initialized or detected.
- Selecting another repository detaches the current history; check or initialize it again.
- Files deleted from the repository remain in the snapshot store.
"""


def get_prompts() -> dict[str, str]:
    """
    Returns a dictionary of available prompt components.
    """
    return {
        "base": BASE_PROMPT,
        "history-instructions": HISTORY_INSTRUCTIONS,
    }
