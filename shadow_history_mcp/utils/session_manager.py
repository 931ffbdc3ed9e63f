from shadow_history_mcp.models.session import Session


class SessionManager:
    """Manages repository sessions for all clients."""

    def __init__(self) -> None:
        # Simple dict as an in-process session storage.
        self._storage: dict[str, Session] = {}

    def get_session(self, session_id: str = "default") -> Session:
        """Returns or creates the session for a given id."""
        if session_id not in self._storage:
            self._storage[session_id] = Session()
        return self._storage[session_id]
