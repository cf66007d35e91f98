# AI Services Package
# LLM client, item search and failure policies

from wizybot.services.ai.llm_client import LLMClient, LLMProviderError
from wizybot.services.ai.policies import ValidationFailurePolicy
from wizybot.services.ai.search_service import ItemSearchService, InvalidSearchResponseError

__all__ = [
    "LLMClient",
    "LLMProviderError",
    "ValidationFailurePolicy",
    "ItemSearchService",
    "InvalidSearchResponseError",
]
