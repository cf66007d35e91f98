import logging

from wizybot.core.config import Settings
from wizybot.schemas.chatbot import ChatbotRequest, ChatbotResponse
from wizybot.services.ai.llm_client import LLMClient
from wizybot.services.ai.policies import ValidationFailurePolicy
from wizybot.services.currency_service import CurrencyService
from wizybot.services.product_service import ProductService
from wizybot.services.tools.agent import ToolCallingAgent
from wizybot.services.tools.chatbot_tools import build_chatbot_registry
from wizybot.services.tools.schema import ParameterSchemaMode

logger = logging.getLogger(__name__)


class ChatbotService:
    """Answers one chatbot request through the function-calling agent."""

    def __init__(
        self,
        llm_client: LLMClient,
        currency_service: CurrencyService,
        product_service: ProductService,
        settings: Settings
    ):
        self.llm_client = llm_client
        self.currency_service = currency_service
        self.product_service = product_service
        self.settings = settings

    async def chat(self, request: ChatbotRequest) -> ChatbotResponse:
        """
        Raises:
            FunctionCallingError: if the agent run fails
        """
        registry = build_chatbot_registry(self.currency_service, self.product_service)
        agent = ToolCallingAgent(
            self.llm_client,
            registry,
            max_rounds=self.settings.TOOL_CALL_MAX_ROUNDS,
            schema_mode=ParameterSchemaMode(self.settings.TOOL_SCHEMA_MODE),
            on_validation_failure=ValidationFailurePolicy(self.settings.TOOL_VALIDATION_FAILURE_POLICY),
        )

        result = await agent.run(request.input)
        logger.info(
            f"Chatbot answered after {result.rounds} tool round(s), "
            f"{len(result.tool_history)} tool call(s)"
        )
        return ChatbotResponse(response=result.response)
