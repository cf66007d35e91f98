from fastapi import APIRouter

from wizybot.api import chatbot

api_router = APIRouter()
api_router.include_router(chatbot.router, prefix="/chatbot", tags=["chatbot"])
