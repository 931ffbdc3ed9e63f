"""Service configuration definition."""

from pydantic_settings import BaseSettings


class ServiceConfig(BaseSettings):
    """
    Defines the configuration for the MCP server, loaded from environment
    variables or a .env file.
    """

    # MCP Server transport mechanism (e.g., "stdio", "sse", "streamable-http")
    MCP_TRANSPORT: str = "stdio"
    # Host for the MCP server to bind to. Defaults to 0.0.0.0 for accessibility.
    MCP_HOST: str = "0.0.0.0"
    # Port for the MCP server to listen on.
    MCP_PORT: int = 8660

    # External programs
    VCS_BINARY: str = "git"
    ASSISTANT_BINARY: str = "claude"
    ASSISTANT_SUBCOMMAND: str = "code"
    # Seconds before an external program is killed. None waits indefinitely.
    VCS_TIMEOUT: float | None = None
    ASSISTANT_TIMEOUT: float | None = None

    # Snapshot store layout and commit messages
    SNAPSHOT_DIR_NAME: str = ".snapshotstore"
    COMMIT_LABEL: str = "Claude session commit"
    AUTO_COMMIT_LABEL: str = "Claude session"
    COMMIT_AUTHOR_NAME: str = "shadow-history"
    COMMIT_AUTHOR_EMAIL: str = "shadow-history@localhost"
    HISTORY_MAX_COUNT: int = 20

    # Seconds to wait after an assistant run before committing its changes.
    AUTO_COMMIT_DELAY: float = 2.0
    # Finished background commit outcomes kept for status queries; oldest are dropped first.
    AUTO_COMMIT_OUTCOME_LIMIT: int = 100
    PROMPT_SUMMARY_LIMIT: int = 50
    # Copy only files whose size or mtime changed since the last mirror cycle.
    MIRROR_SKIP_UNCHANGED: bool = False

    class Config:
        """Pydantic configuration settings."""

        # We do not specify env_file here.
        # Environment loading is handled explicitly in main.py via load_dotenv
        # to ensure the correct .env file is used.
        extra = "ignore"
