from pathlib import Path

from shadow_history_mcp.tools.base import ToolError


def resolve_path(repo_root: Path, path_str: str) -> Path:
    """
    Resolves a user-provided path against the selected repository, ensuring it stays inside it.

    Args:
        repo_root: The selected repository.
        path_str: The path string provided by the user, relative to the repository.

    Returns:
        A resolved, validated Path object.

    Raises:
        ToolError: If the path is empty, absolute, or escapes the repository.
    """
    if not path_str:
        raise ToolError("A file path is required.")

    path = Path(path_str)
    if path.is_absolute():
        raise ToolError(f"Path '{path_str}' must be relative to the selected repository.")

    root = repo_root.resolve()
    resolved_path = (root / path).resolve()
    if not resolved_path.is_relative_to(root):
        raise ToolError(f"Path '{path_str}' is outside the selected repository.")

    return resolved_path
