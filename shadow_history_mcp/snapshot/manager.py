from pathlib import Path
from threading import Lock

from shadow_history_mcp.snapshot.repository import SnapshotRepository
from shadow_history_mcp.utils.config import ServiceConfig


class SnapshotManager:
    """
    Manages the lifecycle of SnapshotRepository instances.

    This class ensures that only one SnapshotRepository exists per snapshot
    store path, so every commit against a store goes through the same
    commit lock. A thread lock guards creation of new instances.
    """
    _instances: dict[Path, SnapshotRepository]
    _lock: Lock

    def __init__(self, config: ServiceConfig | None = None):
        self._config = config or ServiceConfig()
        self._instances = {}
        self._lock = Lock()

    @property
    def config(self) -> ServiceConfig:
        return self._config

    def store_path_for(self, repo_root: Path) -> Path:
        return repo_root / self._config.SNAPSHOT_DIR_NAME

    def get_repository(self, store_path: Path) -> SnapshotRepository:
        """
        Retrieves the SnapshotRepository for a given store path.

        If an instance does not exist for the path, it is created and cached
        in a thread-safe manner.

        Args:
            store_path: The snapshot store directory.

        Returns:
            The shared SnapshotRepository for the given path.
        """
        store_path = store_path.absolute()

        # First, check without a lock for performance
        instance = self._instances.get(store_path)
        if instance is None:
            with self._lock:
                # Double-check if another thread created it while we were waiting for the lock
                instance = self._instances.get(store_path)
                if instance is None:
                    config = self._config
                    instance = SnapshotRepository(
                        store_path,
                        vcs_binary=config.VCS_BINARY,
                        commit_label=config.COMMIT_LABEL,
                        history_max_count=config.HISTORY_MAX_COUNT,
                        timeout=config.VCS_TIMEOUT,
                        identity={
                            "GIT_AUTHOR_NAME": config.COMMIT_AUTHOR_NAME,
                            "GIT_AUTHOR_EMAIL": config.COMMIT_AUTHOR_EMAIL,
                            "GIT_COMMITTER_NAME": config.COMMIT_AUTHOR_NAME,
                            "GIT_COMMITTER_EMAIL": config.COMMIT_AUTHOR_EMAIL,
                        },
                        skip_unchanged=config.MIRROR_SKIP_UNCHANGED,
                    )
                    self._instances[store_path] = instance
        return instance
