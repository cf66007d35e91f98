"""
Tool Executor - dispatch of model tool calls to registered handlers

Resolves the requested tool by exact name, parses its JSON arguments and
awaits the handler. Every failure is raised to the caller: an unknown tool,
malformed arguments or a failing handler ends the whole run.
"""

from typing import Any
import json
import time
import logging

from wizybot.services.tools.registry import ToolRegistry, RegisteredTool
from wizybot.services.tools.schema import ToolCall, ToolResult

logger = logging.getLogger(__name__)


class ToolNotFoundError(LookupError):
    """Raised when the model requests a tool that is not registered"""

    def __init__(self, tool_name: str):
        super().__init__(f"Function {tool_name} not found")
        self.tool_name = tool_name


class ToolExecutionError(Exception):
    """Raised when a tool handler fails"""

    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Tool {tool_name} failed: {message}")
        self.tool_name = tool_name


class ToolExecutor:
    """Executes tool calls against one registry."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def resolve(self, tool_name: str) -> RegisteredTool:
        registered_tool = self.registry.get_tool(tool_name)
        if registered_tool is None:
            raise ToolNotFoundError(tool_name)
        return registered_tool

    async def execute(self, tool_call: ToolCall) -> ToolResult:
        """
        Execute a single tool call.

        Raises:
            ToolArgumentsError: arguments are not a JSON object
            ToolNotFoundError: no tool with that name is registered
            ToolExecutionError: the handler raised
        """
        arguments = tool_call.parse_arguments()
        registered_tool = self.resolve(tool_call.name)

        start_time = time.time()
        try:
            result = await registered_tool.handler(arguments)
        except Exception as e:
            logger.exception(f"Tool {tool_call.name} failed: {e}")
            raise ToolExecutionError(tool_call.name, str(e)) from e

        execution_time_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Tool {tool_call.name} executed in {execution_time_ms}ms")

        return ToolResult(
            tool_call_id=tool_call.id,
            tool_name=tool_call.name,
            arguments=arguments,
            content=self._to_content(result),
            execution_time_ms=execution_time_ms
        )

    @staticmethod
    def _to_content(result: Any) -> str:
        if isinstance(result, str):
            return result
        if isinstance(result, (dict, list)):
            return json.dumps(result, default=str)
        return str(result)
