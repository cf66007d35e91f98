"""
Item search - let the model pick relevant entries from an enumerated list

Unlike the function-calling agent, a failed search is reported as "no
relevant items" by default. The behaviour is selected per call through
ValidationFailurePolicy.
"""

from typing import List
import json
import logging

from wizybot.services.ai.llm_client import LLMClient
from wizybot.services.ai.policies import ValidationFailurePolicy

logger = logging.getLogger(__name__)


class InvalidSearchResponseError(ValueError):
    """Raised when the model does not answer with a JSON array of integers"""
    pass


class ItemSearchService:
    def __init__(
        self,
        llm_client: LLMClient,
        on_validation_failure: ValidationFailurePolicy = ValidationFailurePolicy.RETURN_EMPTY
    ):
        self.llm_client = llm_client
        self.on_validation_failure = on_validation_failure

    async def search_items(
        self,
        search_term: str,
        items: List[str],
        constraints: str = ""
    ) -> List[int]:
        """
        Ask the model which items relate to the search term.

        Args:
            search_term: Free-text query from the user or the model
            items: Candidate labels, enumerated 1-based in the prompt
            constraints: Optional extra instruction, e.g. "Must select 2 items."

        Returns:
            1-based indices of the relevant items, in the model's order.
            Empty when the search fails and the policy is RETURN_EMPTY.
        """
        enumerated_items = "\n".join(f"{index}. {item}" for index, item in enumerate(items, start=1))
        constraint_text = f" with the following constraints {constraints}" if constraints else ""

        messages = [
            {
                "role": "user",
                "content": f'Please find items related to "{search_term}".{constraint_text}'
            },
            {
                "role": "system",
                "content": (
                    "You are a helpful assistant. Based on the user's query, return a JSON array "
                    "containing the indices without any decoration of the relevant items from the "
                    f"following list:\n{enumerated_items}"
                )
            }
        ]

        try:
            response = await self.llm_client.complete(messages)
            return self.validate_response_format(response.content)
        except Exception as e:
            if self.on_validation_failure == ValidationFailurePolicy.PROPAGATE:
                raise
            logger.warning(f"Item search failed, returning no results: {e}")
            return []

    @staticmethod
    def validate_response_format(response_message: str) -> List[int]:
        """
        Parse the model output as a JSON array of integers.

        Raises:
            InvalidSearchResponseError: for anything else (booleans included)
        """
        try:
            indices = json.loads(response_message or "")
        except json.JSONDecodeError as e:
            raise InvalidSearchResponseError(
                f"Invalid response format from search: {response_message}"
            ) from e

        if not isinstance(indices, list) or not all(
            isinstance(index, int) and not isinstance(index, bool) for index in indices
        ):
            raise InvalidSearchResponseError(f"Invalid response format from search: {response_message}")

        return indices
