"""
Tool Calling System for the Wizy chatbot

This package provides OpenAI-style function/tool calling, letting the LLM
invoke local lookups (currency conversion, product search) before answering.

Main components:
- schema.py: Pydantic models for tool definitions, calls and results
- registry.py: Ordered per-request registry and tool schema builder
- executor.py: Dispatch of tool calls by exact name
- agent.py: Agent loop orchestrating tool calls
- chatbot_tools.py: The chatbot's tools bound to their services
"""

from wizybot.services.tools.schema import (
    ToolDefinition,
    ToolParameter,
    ToolCall,
    ToolResult,
    LLMResponse,
    ParameterSchemaMode,
)
from wizybot.services.tools.registry import ToolRegistry, RegisteredTool
from wizybot.services.tools.executor import ToolExecutor, ToolNotFoundError, ToolExecutionError

__all__ = [
    "ToolDefinition",
    "ToolParameter",
    "ToolCall",
    "ToolResult",
    "LLMResponse",
    "ParameterSchemaMode",
    "ToolRegistry",
    "RegisteredTool",
    "ToolExecutor",
    "ToolNotFoundError",
    "ToolExecutionError",
]
