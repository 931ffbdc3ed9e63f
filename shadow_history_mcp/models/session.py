from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class Session(BaseModel):
    """Stores the repository selection and history state for a single session."""

    selected_repo: Path | None = None
    snapshot_store: Path | None = None  # Set only once the local history is initialized
    credential: str | None = None  # Carried for clients, never read by any tool

    def select(self, repo: Path) -> None:
        self.selected_repo = repo
        # A store always belongs to the currently selected repository
        self.snapshot_store = None


CommitStatus = Literal["pending", "committed", "nothing_to_commit", "failed", "cancelled"]


class CommitOutcome(BaseModel):
    """Outcome of a background commit scheduled after an assistant run."""

    invocation_id: str
    status: CommitStatus = "pending"
    message: str
    error: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def done(self) -> bool:
        return self.status != "pending"
