"""
Tests for wizybot/services/tools/registry.py and schema.py - tool schema building.

Tests cover:
- Per-tool parameter schemas (default)
- Legacy shared parameter namespace (union, last-write-wins)
- Tool enumeration used in prompts
- Registration invariants
- Tool call argument parsing
"""
import pytest
from unittest.mock import AsyncMock

from wizybot.services.tools.registry import ToolRegistry
from wizybot.services.tools.schema import (
    ParameterSchemaMode,
    ToolArgumentsError,
    ToolCall,
    ToolDefinition,
    ToolParameter,
)


class TestPerToolSchema:
    """Default mode: each tool declares only its own parameters."""

    def test_each_tool_gets_its_own_parameters(self, tool_registry):
        """Tools should not see each other's parameters."""
        spec = tool_registry.get_openai_tools_spec()

        assert [tool["function"]["name"] for tool in spec] == ["convertCurrencies", "searchProducts"]

        currency_params = spec[0]["function"]["parameters"]
        assert set(currency_params["properties"]) == {"amount", "from", "to"}
        assert currency_params["required"] == ["amount", "from", "to"]
        assert currency_params["additionalProperties"] is False

        product_params = spec[1]["function"]["parameters"]
        assert set(product_params["properties"]) == {"name"}
        assert product_params["required"] == ["name"]

    def test_openai_format(self, currency_definition):
        """Definitions should convert to the OpenAI tools format."""
        tool = currency_definition.to_openai_format()

        assert tool["type"] == "function"
        assert tool["function"]["description"] == "Convert a specified amount from one currency to another"
        assert tool["function"]["parameters"]["properties"]["amount"] == {
            "type": "number",
            "description": "Amount to convert",
        }

    def test_optional_parameters_are_not_required(self):
        """Parameters flagged as optional should be left out of `required`."""
        definition = ToolDefinition(
            name="lookup",
            description="Lookup",
            parameters=[
                ToolParameter(name="query", type="string", description="Query"),
                ToolParameter(name="limit", type="number", description="Limit", required=False),
            ],
        )

        assert definition.parameters_schema()["required"] == ["query"]


class TestSharedSchema:
    """Legacy mode: all tools share one flattened parameter object."""

    def test_union_of_properties_and_required(self, tool_registry):
        """With distinct names, properties and required are the union over all tools."""
        spec = tool_registry.get_openai_tools_spec(ParameterSchemaMode.SHARED)

        for tool in spec:
            params = tool["function"]["parameters"]
            assert set(params["properties"]) == {"amount", "from", "to", "name"}
            assert set(params["required"]) == {"amount", "from", "to", "name"}
            assert params["additionalProperties"] is False

    def test_later_tool_wins_on_name_collision(self):
        """A parameter name declared twice should take the later tool's definition."""
        registry = ToolRegistry()
        registry.register_tool(
            ToolDefinition(
                name="first",
                description="First",
                parameters=[ToolParameter(name="value", type="string", description="Text value")],
            ),
            AsyncMock(),
        )
        registry.register_tool(
            ToolDefinition(
                name="second",
                description="Second",
                parameters=[
                    ToolParameter(name="value", type="number", description="Numeric value", required=False)
                ],
            ),
            AsyncMock(),
        )

        spec = registry.get_openai_tools_spec("shared")

        for tool in spec:
            params = tool["function"]["parameters"]
            assert params["properties"]["value"] == {"type": "number", "description": "Numeric value"}
            assert params["required"] == ["value"]


class TestFunctionList:
    """Tool enumeration used in the system prompts."""

    def test_enumeration_format(self, tool_registry):
        """Tools are numbered from 1 in registry order with their parameter names."""
        assert tool_registry.get_function_list() == (
            "1. convertCurrencies(amount, from, to) 2. searchProducts(name)"
        )

    def test_empty_registry(self):
        """An empty registry produces an empty enumeration and no tools."""
        registry = ToolRegistry()

        assert registry.get_function_list() == ""
        assert registry.get_openai_tools_spec() == []
        assert len(registry) == 0


class TestRegistration:
    """Registry invariants."""

    def test_duplicate_name_rejected(self, tool_registry, currency_definition):
        """Tool names must be unique within a registry."""
        with pytest.raises(ValueError, match="already registered"):
            tool_registry.register_tool(currency_definition, AsyncMock())

    def test_decorator_registration(self, product_definition):
        """The decorator should register the handler and return it unchanged."""
        registry = ToolRegistry()

        @registry.register(product_definition)
        async def search(arguments):
            return "[]"

        assert "searchProducts" in registry
        assert registry.get_tool("searchProducts").handler is search

    def test_lookup_is_exact(self, tool_registry):
        """Lookup should not match on case-insensitive or partial names."""
        assert tool_registry.get_tool("convertcurrencies") is None
        assert tool_registry.get_tool("convert") is None


class TestToolCallArguments:
    """Parsing of raw JSON arguments sent by the model."""

    def test_parses_json_object(self):
        call = ToolCall(id="call_1", name="convertCurrencies", arguments_json='{"amount": 100}')

        assert call.parse_arguments() == {"amount": 100}

    def test_empty_arguments_default_to_empty_object(self):
        call = ToolCall(id="call_1", name="searchProducts", arguments_json="")

        assert call.parse_arguments() == {}

    def test_invalid_json_raises(self):
        call = ToolCall(id="call_1", name="searchProducts", arguments_json='{"name": ')

        with pytest.raises(ToolArgumentsError, match="searchProducts"):
            call.parse_arguments()

    def test_non_object_json_raises(self):
        call = ToolCall(id="call_1", name="searchProducts", arguments_json='["phone"]')

        with pytest.raises(ToolArgumentsError, match="expected a JSON object"):
            call.parse_arguments()
