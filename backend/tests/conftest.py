"""
Shared test fixtures and configuration for the Wizy chatbot tests.
"""
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment before importing application modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("OPENAI_KEY", None)

from wizybot.services.ai.llm_client import LLMClient
from wizybot.services.tools.registry import ToolRegistry
from wizybot.services.tools.schema import ToolDefinition, ToolParameter


@pytest.fixture
def mock_llm_client():
    """LLM client whose completions are scripted per test via complete.side_effect."""
    client = MagicMock(spec=LLMClient)
    client.complete = AsyncMock()
    return client


@pytest.fixture
def currency_definition():
    return ToolDefinition(
        name="convertCurrencies",
        description="Convert a specified amount from one currency to another",
        parameters=[
            ToolParameter(name="amount", type="number", description="Amount to convert"),
            ToolParameter(name="from", type="string", description="Currency code to convert from"),
            ToolParameter(name="to", type="string", description="Currency code to convert to"),
        ],
    )


@pytest.fixture
def product_definition():
    return ToolDefinition(
        name="searchProducts",
        description="Search for products in the inventory",
        parameters=[
            ToolParameter(name="name", type="string", description="Name of the product"),
        ],
    )


@pytest.fixture
def currency_handler():
    return AsyncMock(return_value="0.025")


@pytest.fixture
def product_handler():
    return AsyncMock(return_value='[{"displayTitle": "iPhone 12"}]')


@pytest.fixture
def tool_registry(currency_definition, product_definition, currency_handler, product_handler):
    """Registry with the currency tool first and the product tool second."""
    registry = ToolRegistry()
    registry.register_tool(currency_definition, currency_handler)
    registry.register_tool(product_definition, product_handler)
    return registry


@pytest.fixture
def products_csv(tmp_path):
    """Small product catalog on disk."""
    path = tmp_path / "products.csv"
    path.write_text(
        "displayTitle,embeddingText,url,imageUrl,productType,discount,price,variants,createDate\n"
        "iPhone 12,Apple phone,https://shop/iphone-12,https://cdn/iphone12.png,Technology,0,900.0 USD,Black,2023-06-21\n"
        "iPhone 13,Apple phone,https://shop/iphone-13,https://cdn/iphone13.png,Technology,0,1099.0 USD,Blue,2023-06-21\n"
        "Leather Watch,Wrist watch,https://shop/watch,https://cdn/watch.png,Accessories,10,120.0 USD,Brown,2023-07-02\n",
        encoding="utf-8",
    )
    return path
