"""
Chatbot Tools - currency conversion and product search

Definitions are module constants; handlers are bound per request in
build_chatbot_registry() so they close over that request's collaborators.
"""

from typing import Dict, Any

from wizybot.services.currency_service import CurrencyService
from wizybot.services.product_service import ProductService
from wizybot.services.tools.registry import ToolRegistry
from wizybot.services.tools.schema import ToolDefinition, ToolParameter


CONVERT_CURRENCIES = ToolDefinition(
    name="convertCurrencies",
    description="Convert a specified amount from one currency to another",
    parameters=[
        ToolParameter(
            name="amount",
            type="number",
            description="Amount to convert (e.g., 100).",
        ),
        ToolParameter(
            name="from",
            type="string",
            description='Currency code to convert from (e.g., "COP").',
        ),
        ToolParameter(
            name="to",
            type="string",
            description='Currency code to convert to (e.g., "USD").',
        ),
    ],
)

SEARCH_PRODUCTS = ToolDefinition(
    name="searchProducts",
    description="Search for products in the inventory",
    parameters=[
        ToolParameter(
            name="name",
            type="string",
            description="Name of the product",
        ),
    ],
)


def build_chatbot_registry(
    currency_service: CurrencyService,
    product_service: ProductService
) -> ToolRegistry:
    """Build the registry of chatbot tools in the order they are offered to the model."""
    registry = ToolRegistry()

    @registry.register(CONVERT_CURRENCIES)
    async def convert_currencies(arguments: Dict[str, Any]) -> str:
        converted = await currency_service.convert(
            arguments["amount"],
            arguments["from"],
            arguments["to"],
        )
        return str(converted)

    @registry.register(SEARCH_PRODUCTS)
    async def search_products(arguments: Dict[str, Any]) -> str:
        return await product_service.search_by_name(arguments["name"])

    return registry
