import logging

from fastapi import Request

from wizybot.core.config import settings
from wizybot.services.chatbot import ChatbotService

logger = logging.getLogger("wizybot.deps")


def get_chatbot_service(request: Request) -> ChatbotService:
    """Build the request-scoped chatbot service from the process-wide collaborators."""
    state = request.app.state
    return ChatbotService(
        llm_client=state.llm_client,
        currency_service=state.currency_service,
        product_service=state.product_service,
        settings=settings,
    )
