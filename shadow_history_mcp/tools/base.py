"""Base classes shared by every tool exposed by the server."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

ToolCallArguments = dict[str, Any]


class ToolError(Exception):
    """Raised by tools for invalid arguments or unmet preconditions."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message: str = message


@dataclass
class ToolExecResult:
    """Result of a tool execution."""

    output: str | None = None
    error: str | None = None
    error_code: int = 0
    status: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error_code == 0 and not self.error

    def to_response(self) -> dict[str, Any]:
        """Converts the result into the dictionary returned to MCP clients."""
        if not self.ok:
            response: dict[str, Any] = {
                "status": self.status or "error",
                "error": self.error,
                "exit_code": self.error_code,
            }
        else:
            response = {
                "status": self.status or "success",
                "result": self.output,
                "exit_code": self.error_code,
            }
        response.update(self.data)
        return response


@dataclass
class ToolParameter:
    """A parameter accepted by a tool."""

    name: str
    type: str | list[str]
    description: str
    enum: list[str] | None = None
    required: bool = True


class Tool(ABC):
    """Base class for all tools."""

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def get_description(self) -> str:
        pass

    @abstractmethod
    def get_parameters(self) -> list[ToolParameter]:
        pass

    @abstractmethod
    async def execute(self, arguments: ToolCallArguments) -> ToolExecResult:
        pass
