import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status

from wizybot.api.deps import get_chatbot_service
from wizybot.schemas.chatbot import ChatbotRequest, ChatbotResponse
from wizybot.services.chatbot import ChatbotService
from wizybot.services.tools.agent import FunctionCallingError

logger = logging.getLogger(__name__)

router = APIRouter()

CHATBOT_EXAMPLES = {
    "phone": {
        "summary": "Request for a phone",
        "value": {"input": "I am looking for a phone"},
    },
    "present": {
        "summary": "Request for a present for dad",
        "value": {"input": "I am looking for a present for my dad"},
    },
    "watch_price": {
        "summary": "Inquiry about watch price",
        "value": {"input": "How much does a watch costs?"},
    },
    "watch_price_euros": {
        "summary": "Price inquiry for watch in Euros",
        "value": {"input": "What is the price of the watch in Euros?"},
    },
    "currency": {
        "summary": "Currency conversion inquiry",
        "value": {"input": "How many Canadian Dollars are 350 Euros?"},
    },
}


@router.post(
    "",
    response_model=ChatbotResponse,
    status_code=status.HTTP_200_OK,
    summary="Chatbot Interaction",
    responses={
        400: {"description": "Bad Request"},
        500: {"description": "Internal Server Error"},
    },
)
async def chatbot(
    request: ChatbotRequest = Body(..., openapi_examples=CHATBOT_EXAMPLES),
    service: ChatbotService = Depends(get_chatbot_service),
):
    """
    Send a message to the chatbot and get a response.

    - **input**: The user's message. The assistant may convert currencies or
      search the product catalog before answering.
    """
    try:
        return await service.chat(request)
    except FunctionCallingError as e:
        logger.error(f"Error processing chatbot request: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Chatbot error: {str(e)}"
        )
