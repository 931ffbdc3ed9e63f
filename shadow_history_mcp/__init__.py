"""Shadow History MCP: private snapshot history for repositories edited by an AI coding assistant."""

__version__ = "0.1.0"
