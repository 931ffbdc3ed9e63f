from shadow_history_mcp.models.session import CommitOutcome

ELLIPSIS = "..."


def truncate_prompt(prompt: str, limit: int = 50) -> str:
    """
    Shortens a prompt for use in a commit message.

    Counts characters, not bytes, so multi-byte text is never split mid-character.
    """
    if len(prompt) <= limit:
        return prompt
    return prompt[:limit] + ELLIPSIS


def format_history(entries: list[str]) -> str:
    """Formats commit log entries for display."""
    if not entries:
        return "No commits yet."
    return "\n".join(entries)


def format_file_list(files: list[str]) -> str:
    if not files:
        return "No files found."
    return "\n".join(files)


def format_outcome(outcome: CommitOutcome) -> str:
    """One-line summary of a background commit outcome."""
    line = f"{outcome.invocation_id} {outcome.status}: {outcome.message}"
    if outcome.error:
        line += f" ({outcome.error})"
    return line
