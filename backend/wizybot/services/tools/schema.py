"""
Tool Definition Schema - OpenAI Function Calling Format

Pydantic models for locally implemented tools, the tool calls the model
requests, their results, and the normalized completion returned by the LLM client.
"""

import json
from enum import Enum
from typing import Dict, Any, List, Optional, Literal

from pydantic import BaseModel, Field


TOOL_CALLS_FINISH_REASON = "tool_calls"


class ToolArgumentsError(ValueError):
    """Raised when the model sends tool arguments that are not a JSON object"""
    pass


class ParameterSchemaMode(str, Enum):
    """How tool parameters are exposed to the provider"""
    # Each tool carries its own parameter object
    PER_TOOL = "per_tool"
    # Every tool shares one flattened parameter object (legacy behaviour)
    SHARED = "shared"


class ToolParameter(BaseModel):
    """Individual parameter definition for a tool"""
    name: str
    type: Literal["string", "number"]
    description: str
    required: bool = True

    def to_json_schema(self) -> Dict[str, Any]:
        return {"type": self.type, "description": self.description}


class ToolDefinition(BaseModel):
    """
    A locally implemented operation exposed to the model.

    The handler is attached separately when the tool is registered
    (see ToolRegistry), so the definition stays plain data.
    """
    name: str = Field(..., description="Unique tool identifier within a registry")
    description: str = Field(..., description="Shown to the model to decide when to call the tool")
    parameters: List[ToolParameter] = Field(default_factory=list)

    @property
    def parameter_names(self) -> List[str]:
        return [p.name for p in self.parameters]

    def parameters_schema(self) -> Dict[str, Any]:
        """JSON Schema object for this tool's own parameters"""
        return {
            "type": "object",
            "properties": {p.name: p.to_json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
            "additionalProperties": False,
        }

    def to_openai_format(self, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Convert to OpenAI tools API format"""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters if parameters is not None else self.parameters_schema(),
            }
        }

    def signature(self) -> str:
        return f"{self.name}({', '.join(self.parameter_names)})"


class ToolCall(BaseModel):
    """Represents a single tool call requested by the LLM"""
    id: str = Field(..., description="Unique identifier for this tool call")
    name: str = Field(..., description="Name of the tool to call")
    arguments_json: str = Field(default="{}", description="Raw JSON arguments as sent by the model")

    def parse_arguments(self) -> Dict[str, Any]:
        try:
            arguments = json.loads(self.arguments_json or "{}")
        except json.JSONDecodeError as e:
            raise ToolArgumentsError(
                f"Invalid arguments for tool {self.name}: {self.arguments_json!r} ({e.msg})"
            ) from e
        if not isinstance(arguments, dict):
            raise ToolArgumentsError(
                f"Invalid arguments for tool {self.name}: expected a JSON object, got {self.arguments_json!r}"
            )
        return arguments

    def to_openai_format(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.name,
                "arguments": self.arguments_json,
            }
        }


class ToolResult(BaseModel):
    """Result from tool execution"""
    tool_call_id: str
    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    content: str
    execution_time_ms: int = 0

    def to_message(self) -> Dict[str, Any]:
        """Convert to a `tool` message answering the original call"""
        return {
            "role": "tool",
            "tool_call_id": self.tool_call_id,
            "content": self.content,
        }


class LLMResponse(BaseModel):
    """Top choice of a chat completion, normalized across providers"""
    finish_reason: Optional[str] = None
    content: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)
    tokens_used: Optional[int] = None

    @property
    def requests_tools(self) -> bool:
        return self.finish_reason == TOOL_CALLS_FINISH_REASON

    def to_assistant_message(self) -> Dict[str, Any]:
        message: Dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [tc.to_openai_format() for tc in self.tool_calls]
        return message
