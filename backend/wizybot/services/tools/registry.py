"""
Tool Registry - ordered registration of the tools exposed to the model

A registry is built per request so handlers can close over request-scoped
collaborators. It also produces the provider-facing tool schema and the
enumeration of tools used in system prompts.
"""

from typing import Dict, Callable, Awaitable, Any, List, Optional
from dataclasses import dataclass
import logging

from wizybot.services.tools.schema import ToolDefinition, ParameterSchemaMode

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class RegisteredTool:
    """A tool that has been registered with the registry"""
    definition: ToolDefinition
    handler: ToolHandler


class ToolRegistry:
    """
    Ordered registry mapping tool name to its definition and handler.

    Usage:
        registry = ToolRegistry()

        @registry.register(my_tool_definition)
        async def my_tool(arguments):
            ...

        tools = registry.get_openai_tools_spec()
        prompt = registry.get_function_list()
    """

    def __init__(self):
        self._tools: Dict[str, RegisteredTool] = {}

    def register(
        self,
        definition: ToolDefinition
    ) -> Callable[[ToolHandler], ToolHandler]:
        """
        Decorator to register a tool handler.

        Usage:
            @registry.register(my_tool_definition)
            async def my_tool(arguments):
                ...
        """
        def decorator(func: ToolHandler) -> ToolHandler:
            self.register_tool(definition, func)
            return func
        return decorator

    def register_tool(
        self,
        definition: ToolDefinition,
        handler: ToolHandler
    ) -> None:
        """
        Programmatic registration of a tool.

        Raises:
            ValueError: if a tool with the same name is already registered
        """
        if definition.name in self._tools:
            raise ValueError(f"Tool {definition.name} is already registered")

        self._tools[definition.name] = RegisteredTool(
            definition=definition,
            handler=handler
        )
        logger.debug(f"Registered tool: {definition.name}")

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        """Get a registered tool by exact name"""
        return self._tools.get(name)

    def get_all_tools(self) -> List[RegisteredTool]:
        """Get all registered tools in registration order"""
        return list(self._tools.values())

    def get_openai_tools_spec(
        self,
        mode: ParameterSchemaMode = ParameterSchemaMode.PER_TOOL
    ) -> List[Dict[str, Any]]:
        """
        Get all tools in OpenAI function calling format.

        In SHARED mode every tool advertises the same parameter object: the
        union of all tools' parameters, where a later tool's parameter
        replaces an earlier one with the same name, and the union of all
        required names.
        """
        definitions = [tool.definition for tool in self._tools.values()]

        if ParameterSchemaMode(mode) == ParameterSchemaMode.SHARED:
            shared = self._shared_parameters_schema(definitions)
            return [definition.to_openai_format(shared) for definition in definitions]

        return [definition.to_openai_format() for definition in definitions]

    def get_function_list(self) -> str:
        """
        Human-readable enumeration of the tools for system prompts.

        Example: "1. convertCurrencies(amount, from, to) 2. searchProducts(name)"
        """
        return " ".join(
            f"{index}. {tool.definition.signature()}"
            for index, tool in enumerate(self._tools.values(), start=1)
        )

    @staticmethod
    def _shared_parameters_schema(definitions: List[ToolDefinition]) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        required: List[str] = []

        for definition in definitions:
            for param in definition.parameters:
                properties[param.name] = param.to_json_schema()
                if param.required and param.name not in required:
                    required.append(param.name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
            "additionalProperties": False,
        }

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
