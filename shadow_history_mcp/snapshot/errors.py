from pathlib import Path


class SnapshotError(Exception):
    """Base error for snapshot store operations."""


class MirrorError(SnapshotError):
    """Raised when copying the repository into the snapshot store fails."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Failed to mirror {path}: {cause}")
        self.path = path
        self.cause = cause


class VcsCommandError(SnapshotError):
    """Raised when the VCS program exits with a failure status."""

    def __init__(self, action: str, returncode: int, output: str = ""):
        message = f"{action} failed with exit code {returncode}"
        if output.strip():
            message += f": {output.strip()}"
        super().__init__(message)
        self.action = action
        self.returncode = returncode
        self.output = output


class NothingToCommitError(SnapshotError):
    """The snapshot store has no changes since the last commit. Not a failure."""

    def __init__(self) -> None:
        super().__init__("No changes to commit.")
